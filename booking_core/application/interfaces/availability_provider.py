from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from booking_core.domain.entities.availability import RoomOption


@dataclass
class AvailabilityResponse:
    available: bool
    rooms: list[RoomOption] = field(default_factory=list)


class AvailabilityProvider(ABC):
    @abstractmethod
    async def check_availability(
        self,
        hotel_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> AvailabilityResponse:
        """
        Returns room inventory for the ISO date range.
        """
        pass
