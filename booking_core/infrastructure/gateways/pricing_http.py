import logging
from decimal import Decimal

from booking_core.application.interfaces.pricing_provider import PricingProvider, PricingResponse
from booking_core.application.telemetry import ErrorTelemetry
from booking_core.domain.errors import PricingError
from booking_core.infrastructure.circuit_breaker import pricing_breaker
from booking_core.infrastructure.gateways.http_json import request_json

logger = logging.getLogger(__name__)


class HttpPricingProvider(PricingProvider):
    """`GET {base_url}/pricing` protected by the pricing breaker."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 2.0,
        telemetry: ErrorTelemetry | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._telemetry = telemetry

    async def get_pricing(
        self,
        hotel_id: str,
        room_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> PricingResponse:
        body = await request_json(
            pricing_breaker,
            "pricing",
            "GET",
            f"{self._base_url}/pricing",
            self._timeout,
            telemetry=self._telemetry,
            params={
                "hotelId": hotel_id,
                "roomId": room_id,
                "checkIn": check_in_date,
                "checkOut": check_out_date,
            },
        )
        try:
            return PricingResponse(
                subtotal=Decimal(str(body["subtotal"])),
                taxes=Decimal(str(body["taxes"])),
                total=Decimal(str(body["total"])),
                currency=body["currency"],
                fees=Decimal(str(body.get("fees", "0"))),
            )
        except (KeyError, TypeError, ArithmeticError) as exc:
            logger.error("Malformed pricing response", extra={"hotel_id": hotel_id, "room_id": room_id})
            raise PricingError(f"Malformed pricing response: {exc}") from exc
