import asyncio
import logging

from booking_core.application.cancellation import CancellationToken, OperationCancelled
from booking_core.application.interfaces.availability_provider import AvailabilityProvider
from booking_core.application.interfaces.cache import CachePort
from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.application.rate_limiter import RateLimiter, enforce_rate_limit
from booking_core.application.results import Outcome
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.domain.constants import ERROR_MESSAGES, GUEST_USER_KEY
from booking_core.domain.entities.availability import (
    AvailabilityQuery,
    AvailabilityResult,
    availability_cache_prefix,
)
from booking_core.domain.entities.telemetry import ErrorContext, Severity
from booking_core.domain.errors import (
    AvailabilityError,
    DomainError,
    ProviderTimeoutError,
    RateLimitExceededError,
)

AvailabilityOutcome = Outcome[AvailabilityResult]

DEFAULT_DEBOUNCE_SECONDS = 0.5
DEFAULT_TIMEOUT_SECONDS = 3.0
DEFAULT_PREFETCH_OFFSETS_DAYS = (1, 7)


class AvailabilityResolver:
    """
    Debounced, cached, cancellable availability lookups.

    Every call cancels the previous pending or in-flight call, so at most one
    result is live. Superseded calls resolve to a cancelled outcome and never
    touch `result` or `error`.
    """

    def __init__(
        self,
        provider: AvailabilityProvider,
        cache: CachePort[AvailabilityResult],
        telemetry: ErrorTelemetry | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Clock | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        prefetch_offsets_days: tuple[int, ...] = DEFAULT_PREFETCH_OFFSETS_DAYS,
        cache_ttl_seconds: float | None = None,
        enabled: bool = True,
        analytics: FunnelAnalytics | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._telemetry = telemetry
        self._rate_limiter = rate_limiter
        self._clock = clock or SystemClock()
        self._debounce_seconds = debounce_seconds
        self._timeout_seconds = timeout_seconds
        self._prefetch_offsets_days = prefetch_offsets_days
        self._cache_ttl_seconds = cache_ttl_seconds
        self._enabled = enabled
        self._analytics = analytics
        self._logger = logging.getLogger(__name__)

        self._token: CancellationToken | None = None
        self._prefetch_tasks: set[asyncio.Task] = set()
        self._disposed = False

        self.is_loading = False
        self.result: AvailabilityResult | None = None
        self.error: str | None = None
        self.error_code: str | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self._cancel_pending("disabled")
            self.is_loading = False

    async def check_availability(
        self, query: AvailabilityQuery, user_key: str | None = None
    ) -> AvailabilityOutcome:
        if not self._enabled or self._disposed:
            return Outcome.cancelled()

        self._cancel_pending("superseded")
        self.is_loading = True
        self.error = None
        self.error_code = None

        cached = self._cache.get(query.cache_key)
        self._track_cache_hit_rate()
        if cached is not None:
            self._logger.debug("Availability cache hit", extra={"cache_key": query.cache_key})
            self.result = cached
            self.is_loading = False
            return Outcome.success(cached, from_cache=True)

        token = CancellationToken()
        self._token = token
        try:
            await token.sleep(self._debounce_seconds)
            if self._rate_limiter is not None:
                enforce_rate_limit(self._rate_limiter, user_key or GUEST_USER_KEY)
            result = await token.run(self._fetch(query))
        except OperationCancelled:
            self._logger.debug(
                "Availability check cancelled",
                extra={"cache_key": query.cache_key, "reason": token.reason},
            )
            return Outcome.cancelled()
        except RateLimitExceededError as exc:
            return self._fail(query, exc, exc.message, report=False)
        except DomainError as exc:
            return self._fail(query, exc, ERROR_MESSAGES["AVAILABILITY_CHECK_FAILED"])
        finally:
            if self._token is token:
                self._token = None

        self._cache.set(query.cache_key, result, self._cache_ttl_seconds)
        self.result = result
        self.is_loading = False
        self._logger.info(
            "Availability resolved",
            extra={
                "hotel_id": query.hotel_id,
                "check_in": query.check_in.isoformat(),
                "check_out": query.check_out.isoformat(),
                "rooms": len(result.rooms),
            },
        )
        self._schedule_prefetch(query)
        return Outcome.success(result)

    async def _fetch(self, query: AvailabilityQuery, timed: bool = True) -> AvailabilityResult:
        started = self._clock.timestamp()
        try:
            response = await asyncio.wait_for(
                self._provider.check_availability(
                    hotel_id=query.hotel_id,
                    check_in_date=query.check_in.isoformat(),
                    check_out_date=query.check_out.isoformat(),
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError("availability", self._timeout_seconds) from exc
        except DomainError:
            raise
        except Exception as exc:
            raise AvailabilityError(str(exc) or type(exc).__name__) from exc
        finally:
            if timed and self._analytics is not None:
                self._analytics.track_api_response_time(
                    "availability", self._clock.timestamp() - started
                )

        return AvailabilityResult(
            query=query,
            available=response.available,
            rooms=tuple(response.rooms),
            fetched_at=self._clock.now(),
        )

    def _fail(
        self,
        query: AvailabilityQuery,
        error: DomainError,
        message: str,
        report: bool = True,
    ) -> AvailabilityOutcome:
        self.result = None
        self.error = message
        self.error_code = error.code
        self.is_loading = False
        if report and self._telemetry is not None:
            self._telemetry.log_error(
                error,
                ErrorContext(
                    component="AvailabilityResolver",
                    step="dates",
                    action="check_availability",
                    hotel_id=query.hotel_id,
                    metadata={"cache_key": query.cache_key},
                ),
                Severity.MEDIUM,
            )
        self._logger.warning(
            "Availability check failed",
            extra={"cache_key": query.cache_key, "error_code": error.code},
        )
        return Outcome.failure(error, message)

    # === Prefetch ===

    def _schedule_prefetch(self, query: AvailabilityQuery) -> None:
        for offset in self._prefetch_offsets_days:
            adjacent = query.shifted(offset)
            if self._cache.contains(adjacent.cache_key):
                continue
            task = asyncio.ensure_future(self._prefetch(adjacent))
            self._prefetch_tasks.add(task)
            task.add_done_callback(self._prefetch_tasks.discard)

    async def _prefetch(self, query: AvailabilityQuery) -> None:
        try:
            result = await self._fetch(query, timed=False)
        except Exception as exc:
            # Best effort only; never reaches the caller.
            self._logger.debug(
                "Availability prefetch failed",
                extra={"cache_key": query.cache_key, "error": str(exc)},
            )
            return
        self._cache.set(query.cache_key, result, self._cache_ttl_seconds)

    async def wait_for_prefetches(self) -> None:
        """Waits until outstanding prefetches settle."""
        if self._prefetch_tasks:
            await asyncio.gather(*list(self._prefetch_tasks), return_exceptions=True)

    # === Cancellation ===

    def _cancel_pending(self, reason: str) -> None:
        if self._token is not None:
            self._token.cancel(reason)
            self._token = None

    def _cancel_prefetches(self) -> None:
        for task in list(self._prefetch_tasks):
            task.cancel()
        self._prefetch_tasks.clear()

    def clear(self) -> None:
        """Cancels pending work and forgets the current result and error."""
        self._cancel_pending("cleared")
        self._cancel_prefetches()
        self.is_loading = False
        self.result = None
        self.error = None
        self.error_code = None

    def dispose(self) -> None:
        self.clear()
        self._disposed = True

    # === Cache upkeep ===

    def invalidate_hotel(self, hotel_id: str) -> int:
        """Drops cached availability for every date range of `hotel_id`."""
        removed = self._cache.invalidate_prefix(availability_cache_prefix(hotel_id))
        self._logger.info(
            "Availability cache invalidated",
            extra={"hotel_id": hotel_id, "entries_removed": removed},
        )
        return removed

    def _track_cache_hit_rate(self) -> None:
        if self._analytics is not None:
            self._analytics.track_cache_hit_rate(
                "availability", self._cache.stats()["hit_rate_percent"]
            )
