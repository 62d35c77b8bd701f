"""Availability entities: room options and resolver query/result."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from booking_core.domain.value_objects.stay_dates import StayDates


@dataclass(frozen=True)
class RoomOption:
    id: str
    name: str
    capacity: int
    base_price: Decimal
    currency_code: str = "USD"
    description: str = ""
    bed_type: str | None = None
    available: int = 1


def availability_cache_prefix(hotel_id: str) -> str:
    return f"availability:{hotel_id}:"


@dataclass(frozen=True)
class AvailabilityQuery:
    """The exact (hotel, check-in, check-out) triple a result is valid for."""

    hotel_id: str
    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "hotel_id", str(self.hotel_id))
        # Raises InvalidDateRangeError on unordered dates
        StayDates(check_in=self.check_in, check_out=self.check_out)

    @property
    def stay(self) -> StayDates:
        return StayDates(check_in=self.check_in, check_out=self.check_out)

    @property
    def nights(self) -> int:
        return self.stay.nights

    @property
    def cache_key(self) -> str:
        return (
            f"{availability_cache_prefix(self.hotel_id)}"
            f"{self.check_in.isoformat()}:{self.check_out.isoformat()}"
        )

    def shifted(self, days: int) -> "AvailabilityQuery":
        stay = self.stay.shifted(days)
        return AvailabilityQuery(
            hotel_id=self.hotel_id, check_in=stay.check_in, check_out=stay.check_out
        )


@dataclass(frozen=True)
class AvailabilityResult:
    query: AvailabilityQuery
    available: bool
    rooms: tuple[RoomOption, ...] = field(default_factory=tuple)
    fetched_at: datetime | None = None

    def matches(self, query: AvailabilityQuery) -> bool:
        """Results are only reusable for the exact triple that produced them."""
        return self.query == query

    def find_room(self, room_id: str) -> RoomOption | None:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None
