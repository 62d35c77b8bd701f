from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from booking_core.application.interfaces.pricing_provider import PricingProvider, PricingResponse
from booking_core.domain.entities.availability import RoomOption
from booking_core.infrastructure.in_memory.availability_provider import DEFAULT_ROOMS

CENTS = Decimal("0.01")


class InMemoryPricingProvider(PricingProvider):
    """Nightly base price times nights, plus a flat tax rate and fees."""

    def __init__(
        self,
        rooms: list[RoomOption] | None = None,
        tax_rate: Decimal = Decimal("0.12"),
        fees: Decimal = Decimal("0"),
        currency: str = "USD",
    ):
        self._rooms = {room.id: room for room in (rooms or DEFAULT_ROOMS)}
        self._tax_rate = tax_rate
        self._fees = fees
        self._currency = currency

    async def get_pricing(
        self,
        hotel_id: str,
        room_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> PricingResponse:
        room = self._rooms.get(room_id)
        if room is None:
            raise ValueError(f"Unknown room: {room_id}")
        nights = (date.fromisoformat(check_out_date) - date.fromisoformat(check_in_date)).days
        subtotal = (room.base_price * nights).quantize(CENTS, rounding=ROUND_HALF_UP)
        taxes = (subtotal * self._tax_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
        return PricingResponse(
            subtotal=subtotal,
            taxes=taxes,
            total=subtotal + taxes + self._fees,
            currency=self._currency,
            fees=self._fees,
        )
