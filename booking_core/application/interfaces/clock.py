"""Clock port - abstraction over system time."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Port over the system clock.

    Lets tests inject a fake implementation for deterministic TTL checks.
    """

    @abstractmethod
    def now(self) -> datetime:
        """
        Returns the current time.

        Returns:
            timezone-aware UTC datetime.
        """
        raise NotImplementedError

    def timestamp(self) -> float:
        """Current Unix timestamp in seconds."""
        return self.now().timestamp()


class SystemClock(Clock):
    """Real implementation backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock(Clock):
    """
    Fake implementation for tests.

    Time only moves when the test says so.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        self._fixed_time = new_time

    def advance(self, seconds: float = 0, minutes: float = 0, hours: float = 0) -> None:
        """
        Moves the fixed time forward.

        Args:
            seconds: Seconds to advance.
            minutes: Minutes to advance.
            hours: Hours to advance.
        """
        delta = timedelta(seconds=seconds, minutes=minutes, hours=hours)
        self._fixed_time = self._fixed_time + delta
