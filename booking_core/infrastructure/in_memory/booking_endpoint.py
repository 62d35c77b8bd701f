from typing import Any
from uuid import uuid4

from booking_core.application.interfaces.booking_endpoint import (
    BookingEndpoint,
    BookingEndpointResult,
)
from booking_core.domain.constants import BOOKING_STATUS_CONFIRMED


class InMemoryBookingEndpoint(BookingEndpoint):
    def __init__(self):
        self.bookings: dict[str, dict[str, Any]] = {}
        self.calls = 0

    async def create_booking(
        self,
        hotel_id: str,
        room_id: str,
        check_in_date: str,
        check_out_date: str,
        guest_info: dict[str, Any],
        payment_confirmation_id: str,
        user_id: str | None = None,
    ) -> BookingEndpointResult:
        self.calls += 1
        booking_id = f"bk_{uuid4().hex[:12]}"
        self.bookings[booking_id] = {
            "hotel_id": hotel_id,
            "room_id": room_id,
            "check_in_date": check_in_date,
            "check_out_date": check_out_date,
            "guest_info": dict(guest_info),
            "payment_confirmation_id": payment_confirmation_id,
            "user_id": user_id,
        }
        return BookingEndpointResult(
            booking_id=booking_id,
            status=BOOKING_STATUS_CONFIRMED,
            reference_number=f"BK-{uuid4().hex[:8].upper()}",
        )
