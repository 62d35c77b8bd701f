import asyncio
from decimal import Decimal

from booking_core.application.interfaces.availability_provider import (
    AvailabilityProvider,
    AvailabilityResponse,
)
from booking_core.domain.entities.availability import RoomOption

DEFAULT_ROOMS = (
    RoomOption(
        id="standard-1",
        name="Standard Room",
        capacity=2,
        base_price=Decimal("120.00"),
        description="Queen bed, city view",
        bed_type="queen",
        available=5,
    ),
    RoomOption(
        id="deluxe-1",
        name="Deluxe Room",
        capacity=3,
        base_price=Decimal("150.00"),
        description="King bed, balcony",
        bed_type="king",
        available=2,
    ),
)


class InMemoryAvailabilityProvider(AvailabilityProvider):
    """Seeded inventory per hotel; unknown hotels get the default rooms."""

    def __init__(
        self,
        inventory: dict[str, list[RoomOption]] | None = None,
        latency_seconds: float = 0.0,
    ):
        self._inventory = {str(k): list(v) for k, v in (inventory or {}).items()}
        self._latency_seconds = latency_seconds
        self.calls: list[tuple[str, str, str]] = []

    async def check_availability(
        self,
        hotel_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> AvailabilityResponse:
        self.calls.append((hotel_id, check_in_date, check_out_date))
        if self._latency_seconds:
            await asyncio.sleep(self._latency_seconds)
        rooms = self._inventory.get(str(hotel_id), list(DEFAULT_ROOMS))
        available = [room for room in rooms if room.available > 0]
        return AvailabilityResponse(available=bool(available), rooms=available)
