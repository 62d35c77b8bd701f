import asyncio
from datetime import date
from decimal import Decimal

import pytest

from booking_core.application.interfaces.pricing_provider import PricingProvider
from booking_core.application.use_cases.pricing_service import PricingService, pricing_cache_key
from booking_core.domain.constants import ERROR_MESSAGES
from booking_core.infrastructure.in_memory import InMemoryPricingProvider

CHECK_IN = date(2024, 6, 1)
CHECK_OUT = date(2024, 6, 4)


class SlowPricingProvider(PricingProvider):
    async def get_pricing(self, **kwargs):
        await asyncio.Event().wait()


@pytest.fixture
def make_service(make_cache, telemetry, clock):
    def _make(provider, **kwargs) -> PricingService:
        return PricingService(
            provider=provider,
            cache=make_cache("pricing"),
            telemetry=telemetry,
            clock=clock,
            **kwargs,
        )

    return _make


async def test_quote_for_three_nights(make_service):
    service = make_service(InMemoryPricingProvider(tax_rate=Decimal("0.10"), fees=Decimal("15")))

    outcome = await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)

    quote = outcome.value
    assert outcome.ok
    assert quote.subtotal.amount == Decimal("450.00")
    assert quote.taxes.amount == Decimal("45.00")
    assert quote.total.amount == Decimal("510.00")
    assert [line.name for line in quote.breakdown] == ["Subtotal", "Taxes", "Fees"]
    assert quote.total.to_minor_units() == 51000


async def test_zero_fees_left_out(make_service, pricing_provider):
    outcome = await make_service(pricing_provider).get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)

    assert outcome.value.fees is None
    assert outcome.value.total.amount == Decimal("450.00")


async def test_cached_per_exact_key(make_service, pricing_provider):
    service = make_service(pricing_provider)

    await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)
    again = await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)
    other_room = await service.get_quote("42", "standard-1", CHECK_IN, CHECK_OUT)

    assert again.from_cache
    assert not other_room.from_cache
    assert other_room.value.total.amount == Decimal("360.00")


async def test_unknown_room_fails(make_service, pricing_provider, telemetry):
    outcome = await make_service(pricing_provider).get_quote("42", "penthouse", CHECK_IN, CHECK_OUT)

    assert outcome.is_failure
    assert outcome.message == ERROR_MESSAGES["PRICING_FAILED"]
    assert outcome.error.code == "PRICING_ERROR"
    assert telemetry.get_errors()[0].component == "PricingService"


def test_cache_key():
    assert pricing_cache_key("42", "deluxe-1", CHECK_IN, CHECK_OUT) == (
        "pricing:42:deluxe-1:2024-06-01:2024-06-04"
    )


async def test_timeout(make_service, telemetry):
    service = make_service(SlowPricingProvider(), timeout_seconds=0.01)

    outcome = await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)

    assert outcome.is_failure
    assert outcome.error.code == "PROVIDER_TIMEOUT"
    assert outcome.message == ERROR_MESSAGES["PRICING_FAILED"]
    [record] = telemetry.get_errors()
    assert record.severity.value == "high"
    assert record.step == "rooms"


async def test_tracks_response_time_and_hit_rate(make_service, pricing_provider, analytics):
    service = make_service(pricing_provider, analytics=analytics)

    await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)
    await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)

    [timing] = analytics.get_events("Performance: API Response Time")
    assert timing.data["endpoint"] == "pricing"
    hit_rates = [e.data["cacheHitRate"] for e in analytics.get_events("Performance: Cache Hit Rate")]
    assert hit_rates == [0.0, 50.0]


async def test_invalidate_hotel(make_service, pricing_provider):
    service = make_service(pricing_provider)
    await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)
    await service.get_quote("42", "standard-1", CHECK_IN, CHECK_OUT)
    await service.get_quote("420", "deluxe-1", CHECK_IN, CHECK_OUT)

    assert service.invalidate_hotel("42") == 2

    assert not (await service.get_quote("42", "deluxe-1", CHECK_IN, CHECK_OUT)).from_cache
    assert (await service.get_quote("420", "deluxe-1", CHECK_IN, CHECK_OUT)).from_cache
