"""Value Object StayDates - check-in / check-out pair."""

from dataclasses import dataclass
from datetime import date, timedelta

from booking_core.domain.errors import InvalidDateRangeError


def dates_are_ordered(check_in: date | None, check_out: date | None) -> bool:
    """True when both dates are set and check-out is strictly after check-in."""
    return check_in is not None and check_out is not None and check_out > check_in


@dataclass(frozen=True)
class StayDates:
    """
    Immutable stay range.

    Attributes:
        check_in: Arrival date.
        check_out: Departure date, strictly after check_in.
    """

    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        if not dates_are_ordered(self.check_in, self.check_out):
            raise InvalidDateRangeError(
                f"check_out must be after check_in: {self.check_in} >= {self.check_out}"
            )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def shifted(self, days: int) -> "StayDates":
        """Same stay length moved by `days`."""
        delta = timedelta(days=days)
        return StayDates(check_in=self.check_in + delta, check_out=self.check_out + delta)

    def __str__(self) -> str:
        return f"{self.check_in.isoformat()} -> {self.check_out.isoformat()}"

    @classmethod
    def parse(cls, check_in: str | date, check_out: str | date) -> "StayDates":
        """Factory accepting ISO strings or dates."""
        if isinstance(check_in, str):
            check_in = date.fromisoformat(check_in)
        if isinstance(check_out, str):
            check_out = date.fromisoformat(check_out)
        return cls(check_in=check_in, check_out=check_out)
