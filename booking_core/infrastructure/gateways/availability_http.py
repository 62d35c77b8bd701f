import logging
from decimal import Decimal
from typing import Any

from booking_core.application.interfaces.availability_provider import (
    AvailabilityProvider,
    AvailabilityResponse,
)
from booking_core.domain.entities.availability import RoomOption
from booking_core.application.telemetry import ErrorTelemetry
from booking_core.domain.errors import AvailabilityError
from booking_core.infrastructure.circuit_breaker import availability_breaker
from booking_core.infrastructure.gateways.http_json import request_json

logger = logging.getLogger(__name__)


def parse_room(raw: dict[str, Any]) -> RoomOption:
    return RoomOption(
        id=str(raw["id"]),
        name=raw["name"],
        capacity=int(raw.get("capacity", 1)),
        base_price=Decimal(str(raw.get("basePrice", raw.get("base_price", "0")))),
        currency_code=raw.get("currency", "USD"),
        description=raw.get("description", ""),
        bed_type=raw.get("bedType", raw.get("bed_type")),
        available=int(raw.get("available", 1)),
    )


class HttpAvailabilityProvider(AvailabilityProvider):
    """`GET {base_url}/availability` protected by the availability breaker."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 3.0,
        telemetry: ErrorTelemetry | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._telemetry = telemetry

    async def check_availability(
        self,
        hotel_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> AvailabilityResponse:
        body = await request_json(
            availability_breaker,
            "availability",
            "GET",
            f"{self._base_url}/availability",
            self._timeout,
            telemetry=self._telemetry,
            params={"hotelId": hotel_id, "checkIn": check_in_date, "checkOut": check_out_date},
        )
        try:
            rooms = [parse_room(raw) for raw in body.get("rooms", [])]
            return AvailabilityResponse(available=bool(body.get("available")), rooms=rooms)
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            logger.error("Malformed availability response", extra={"hotel_id": hotel_id})
            raise AvailabilityError(f"Malformed availability response: {exc}") from exc
