import logging
from typing import Any

from booking_core.application.interfaces.booking_endpoint import (
    BookingEndpoint,
    BookingEndpointResult,
)
from booking_core.application.telemetry import ErrorTelemetry
from booking_core.domain.errors import BookingSubmissionError
from booking_core.infrastructure.circuit_breaker import booking_breaker
from booking_core.infrastructure.gateways.http_json import request_json

logger = logging.getLogger(__name__)


class HttpBookingEndpoint(BookingEndpoint):
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        telemetry: ErrorTelemetry | None = None,
    ) -> None:
        """
        HTTP booking creation endpoint.

        Args:
            base_url: Base URL of the booking API
            timeout_seconds: Request timeout in seconds
            telemetry: Sink for failed API calls
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._telemetry = telemetry

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
        POST the booking, keyed for idempotency by the payment confirmation id.

        The server deduplicates on the Idempotency-Key header, so a retried
        submission for the same payment cannot create a second booking.
        """
        payload: dict[str, Any] = {
            "hotelId": hotel_id,
            "roomId": room_id,
            "checkInDate": check_in_date,
            "checkOutDate": check_out_date,
            "guestInfo": guest_info,
            "paymentConfirmationId": payment_confirmation_id,
        }
        if user_id:
            payload["userId"] = user_id

        body = await request_json(
            booking_breaker,
            "booking",
            "POST",
            f"{self._base_url}/bookings",
            self._timeout,
            telemetry=self._telemetry,
            json=payload,
            headers={"Idempotency-Key": payment_confirmation_id},
        )

        if not isinstance(body, dict):
            body = {}
        booking_id = body.get("bookingId") or body.get("booking_id")
        if not booking_id:
            logger.error(
                "Booking response without booking id",
                extra={"payment_confirmation_id": payment_confirmation_id},
            )
            raise BookingSubmissionError("Booking response did not include a booking id")

        return BookingEndpointResult(
            booking_id=str(booking_id),
            status=body.get("status", "confirmed"),
            reference_number=body.get("referenceNumber"),
            payload=body,
        )
