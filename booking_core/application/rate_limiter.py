"""Fixed-window rate limiter for booking operations."""

import logging
import math
from dataclasses import dataclass

from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.domain.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    retry_after: int | None = None


@dataclass
class _WindowEntry:
    count: int
    reset_at: float
    first_request_at: float


class RateLimiter:
    """
    Counts requests per user key inside a fixed window.

    The first request opens a window of `window_seconds`; once `max_requests`
    have been allowed, further requests are refused until the window resets.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        identifier: str,
        clock: Clock | None = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.identifier = identifier
        self._clock = clock or SystemClock()
        self._entries: dict[str, _WindowEntry] = {}

    def _key(self, user_key: str) -> str:
        return f"{self.identifier}:{user_key}"

    def check(self, user_key: str) -> RateLimitResult:
        """Register one request for `user_key` and report whether it is allowed."""
        now = self._clock.timestamp()
        key = self._key(user_key)
        entry = self._entries.get(key)

        if entry is None or now >= entry.reset_at:
            entry = _WindowEntry(count=1, reset_at=now + self.window_seconds, first_request_at=now)
            self._entries[key] = entry
            return RateLimitResult(
                allowed=True,
                remaining=self.max_requests - 1,
                reset_at=entry.reset_at,
            )

        if entry.count >= self.max_requests:
            retry_after = math.ceil(entry.reset_at - now)
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=entry.reset_at,
                retry_after=retry_after,
            )

        entry.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - entry.count,
            reset_at=entry.reset_at,
        )

    def headers(self, result: RateLimitResult) -> dict[str, str]:
        """Standard X-RateLimit-* headers for a check result."""
        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(math.ceil(result.reset_at)),
        }
        if result.retry_after is not None:
            headers["Retry-After"] = str(result.retry_after)
        return headers

    def reset(self, user_key: str) -> None:
        self._entries.pop(self._key(user_key), None)

    def clear(self) -> None:
        self._entries.clear()

    def count(self, user_key: str) -> int:
        entry = self._entries.get(self._key(user_key))
        if entry is None or self._clock.timestamp() >= entry.reset_at:
            return 0
        return entry.count


def enforce_rate_limit(limiter: RateLimiter, user_key: str) -> RateLimitResult:
    """
    Checks the limiter and raises when the request is refused.

    Raises:
        RateLimitExceededError: The user exhausted the current window.
    """
    result = limiter.check(user_key)
    if not result.allowed:
        logger.warning(
            "Rate limit exceeded",
            extra={
                "limiter": limiter.identifier,
                "user_key": user_key,
                "retry_after": result.retry_after,
            },
        )
        raise RateLimitExceededError(
            identifier=limiter.identifier,
            retry_after=result.retry_after or 0,
            reset_at=result.reset_at,
        )
    return result
