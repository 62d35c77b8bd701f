import asyncio
from datetime import date

import pytest

from booking_core.application.interfaces.availability_provider import (
    AvailabilityProvider,
    AvailabilityResponse,
)
from booking_core.application.rate_limiter import RateLimiter
from booking_core.application.use_cases.availability_resolver import AvailabilityResolver
from booking_core.domain.constants import ERROR_MESSAGES
from booking_core.domain.entities.availability import AvailabilityQuery
from booking_core.infrastructure.in_memory import DEFAULT_ROOMS

QUERY = AvailabilityQuery("42", date(2024, 6, 1), date(2024, 6, 4))


class GatedProvider(AvailabilityProvider):
    """Holds every call until the test releases it."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []
        self.release = asyncio.Event()
        self.fail_with: Exception | None = None

    async def check_availability(self, hotel_id, check_in_date, check_out_date):
        self.calls.append((hotel_id, check_in_date, check_out_date))
        await self.release.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return AvailabilityResponse(available=True, rooms=list(DEFAULT_ROOMS))


class PerCallGatedProvider(AvailabilityProvider):
    """Holds each call until the test releases its check-in date."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []
        self._gates: dict[str, asyncio.Event] = {}

    def _gate(self, check_in_date: str) -> asyncio.Event:
        return self._gates.setdefault(check_in_date, asyncio.Event())

    async def wait_for_call(self, query: AvailabilityQuery) -> None:
        while not any(call[1] == query.check_in.isoformat() for call in self.calls):
            await asyncio.sleep(0)

    def release(self, query: AvailabilityQuery) -> None:
        self._gate(query.check_in.isoformat()).set()

    async def check_availability(self, hotel_id, check_in_date, check_out_date):
        self.calls.append((hotel_id, check_in_date, check_out_date))
        await self._gate(check_in_date).wait()
        return AvailabilityResponse(available=True, rooms=list(DEFAULT_ROOMS))


class FailingProvider(AvailabilityProvider):
    def __init__(self, fail_for: set[str] | None = None):
        self.calls: list[tuple[str, str, str]] = []
        self.fail_for = fail_for

    async def check_availability(self, hotel_id, check_in_date, check_out_date):
        self.calls.append((hotel_id, check_in_date, check_out_date))
        if self.fail_for is None or check_in_date in self.fail_for:
            raise ConnectionError("availability service down")
        return AvailabilityResponse(available=True, rooms=list(DEFAULT_ROOMS))


@pytest.fixture
def make_resolver(make_cache, telemetry, clock):
    def _make(provider, **kwargs) -> AvailabilityResolver:
        kwargs.setdefault("debounce_seconds", 0)
        kwargs.setdefault("prefetch_offsets_days", ())
        return AvailabilityResolver(
            provider=provider,
            cache=make_cache("availability"),
            telemetry=telemetry,
            clock=clock,
            **kwargs,
        )

    return _make


async def test_resolves_and_caches(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider)

    first = await resolver.check_availability(QUERY)
    second = await resolver.check_availability(QUERY)

    assert first.ok and not first.from_cache
    assert second.ok and second.from_cache
    assert availability_provider.calls == [("42", "2024-06-01", "2024-06-04")]
    assert resolver.result.matches(QUERY)
    assert not resolver.is_loading


async def test_debounce_keeps_only_last_query(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider, debounce_seconds=0.05)
    queries = [
        AvailabilityQuery("42", date(2024, 6, 1), date(2024, 6, 2)),
        AvailabilityQuery("42", date(2024, 6, 1), date(2024, 6, 3)),
        QUERY,
    ]

    outcomes = await asyncio.gather(*(resolver.check_availability(q) for q in queries))

    assert [o.is_cancelled for o in outcomes] == [True, True, False]
    assert availability_provider.calls == [("42", "2024-06-01", "2024-06-04")]
    assert resolver.result.matches(QUERY)


async def test_in_flight_call_superseded(make_resolver):
    provider = PerCallGatedProvider()
    resolver = make_resolver(provider)
    older = QUERY.shifted(1)

    first = asyncio.ensure_future(resolver.check_availability(older))
    await provider.wait_for_call(older)
    second = asyncio.ensure_future(resolver.check_availability(QUERY))
    await provider.wait_for_call(QUERY)

    provider.release(QUERY)
    second_outcome = await second
    assert second_outcome.ok
    assert resolver.result.matches(QUERY)

    provider.release(older)
    first_outcome = await first

    assert first_outcome.is_cancelled
    assert resolver.result.matches(QUERY)
    assert resolver.error is None
    assert not resolver.is_loading
    assert [call[1] for call in provider.calls] == ["2024-06-02", "2024-06-01"]


async def test_failure_reports_and_clears_result(make_resolver, telemetry):
    resolver = make_resolver(FailingProvider(fail_for={"2024-06-04"}))
    await resolver.check_availability(QUERY)

    outcome = await resolver.check_availability(QUERY.shifted(3))

    assert outcome.is_failure
    assert outcome.message == ERROR_MESSAGES["AVAILABILITY_CHECK_FAILED"]
    assert resolver.result is None
    assert resolver.error == ERROR_MESSAGES["AVAILABILITY_CHECK_FAILED"]
    assert resolver.error_code == "AVAILABILITY_ERROR"
    [record] = telemetry.get_errors()
    assert record.component == "AvailabilityResolver"


async def test_timeout(make_resolver):
    provider = GatedProvider()
    resolver = make_resolver(provider, timeout_seconds=0.01)

    outcome = await resolver.check_availability(QUERY)

    assert outcome.is_failure
    assert outcome.error.code == "PROVIDER_TIMEOUT"


async def test_cache_expires_after_ttl(make_resolver, availability_provider, clock):
    resolver = make_resolver(availability_provider, cache_ttl_seconds=300)
    await resolver.check_availability(QUERY)

    clock.advance(seconds=301)
    outcome = await resolver.check_availability(QUERY)

    assert not outcome.from_cache
    assert len(availability_provider.calls) == 2


async def test_prefetches_adjacent_ranges(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider, prefetch_offsets_days=(1, 7))

    await resolver.check_availability(QUERY)
    await resolver.wait_for_prefetches()

    assert ("42", "2024-06-02", "2024-06-05") in availability_provider.calls
    assert ("42", "2024-06-08", "2024-06-11") in availability_provider.calls
    outcome = await resolver.check_availability(QUERY.shifted(7))
    assert outcome.from_cache


async def test_prefetch_failures_are_silent(make_resolver, telemetry):
    provider = FailingProvider(fail_for={"2024-06-02", "2024-06-08"})
    resolver = make_resolver(provider, prefetch_offsets_days=(1, 7))

    outcome = await resolver.check_availability(QUERY)
    await resolver.wait_for_prefetches()

    assert outcome.ok
    assert resolver.error is None
    assert telemetry.get_errors() == []
    assert len(provider.calls) == 3


async def test_rate_limited(make_resolver, availability_provider, clock, telemetry):
    limiter = RateLimiter(max_requests=1, window_seconds=60, identifier="availability", clock=clock)
    resolver = make_resolver(availability_provider, rate_limiter=limiter)

    await resolver.check_availability(QUERY, user_key="user-1")
    outcome = await resolver.check_availability(QUERY.shifted(1), user_key="user-1")

    assert outcome.is_failure
    assert outcome.error.code == "RATE_LIMIT_EXCEEDED"
    assert telemetry.get_errors() == []


async def test_disabled_resolver_is_inert(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider, enabled=False)

    outcome = await resolver.check_availability(QUERY)

    assert outcome.is_cancelled
    assert availability_provider.calls == []
    assert not resolver.is_loading


async def test_clear_cancels_pending(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider, debounce_seconds=10)

    pending = asyncio.ensure_future(resolver.check_availability(QUERY))
    await asyncio.sleep(0)
    resolver.clear()

    assert (await pending).is_cancelled
    assert availability_provider.calls == []
    assert resolver.result is None


async def test_dispose(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider)
    resolver.dispose()

    assert (await resolver.check_availability(QUERY)).is_cancelled


async def test_tracks_response_time_and_hit_rate(make_resolver, availability_provider, analytics):
    resolver = make_resolver(availability_provider, analytics=analytics)

    await resolver.check_availability(QUERY)
    await resolver.check_availability(QUERY)

    [timing] = analytics.get_events("Performance: API Response Time")
    assert timing.data["endpoint"] == "availability"
    hit_rates = [e.data["cacheHitRate"] for e in analytics.get_events("Performance: Cache Hit Rate")]
    assert hit_rates == [0.0, 50.0]


async def test_invalidate_hotel_drops_only_that_hotel(make_resolver, availability_provider):
    resolver = make_resolver(availability_provider)
    other_hotel = AvailabilityQuery("7", QUERY.check_in, QUERY.check_out)
    await resolver.check_availability(QUERY)
    await resolver.check_availability(QUERY.shifted(2))
    await resolver.check_availability(other_hotel)

    assert resolver.invalidate_hotel("42") == 2

    assert not (await resolver.check_availability(QUERY)).from_cache
    assert (await resolver.check_availability(other_hotel)).from_cache
