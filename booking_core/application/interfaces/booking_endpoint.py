from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class BookingEndpointResult:
    booking_id: str
    status: str = "confirmed"
    reference_number: str | None = None
    payload: dict[str, Any] | None = None


class BookingEndpoint(ABC):
    @abstractmethod
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
        """
        Creates the booking for an already confirmed payment.
        """
        pass
