"""
Shared fixtures for the booking core tests.

Every test gets a FakeClock, in-memory providers and closed circuit breakers.
"""

from decimal import Decimal

import pytest

from booking_core.application.interfaces.clock import FakeClock
from booking_core.application.interfaces.transport import TransportSecurity
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.infrastructure.cache.memory_cache import InMemoryCache
from booking_core.infrastructure.circuit_breaker import reset_all_breakers
from booking_core.infrastructure.in_memory import (
    InMemoryAvailabilityProvider,
    InMemoryBookingEndpoint,
    InMemoryPricingProvider,
    StubPaymentProcessor,
)
from booking_core.infrastructure.services.transport_security import StaticTransportSecurity
from tests.factories import make_quote


@pytest.fixture(autouse=True)
def closed_breakers():
    reset_all_breakers()
    yield
    reset_all_breakers()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def telemetry(clock) -> ErrorTelemetry:
    return ErrorTelemetry(clock=clock)


@pytest.fixture
def analytics(clock) -> FunnelAnalytics:
    return FunnelAnalytics(clock=clock)


@pytest.fixture
def secure_transport() -> TransportSecurity:
    return StaticTransportSecurity(secure=True)


@pytest.fixture
def availability_provider() -> InMemoryAvailabilityProvider:
    return InMemoryAvailabilityProvider()


@pytest.fixture
def pricing_provider() -> InMemoryPricingProvider:
    # No tax so 3 nights of deluxe-1 is exactly 450.00
    return InMemoryPricingProvider(tax_rate=Decimal("0"))


@pytest.fixture
def payment_processor() -> StubPaymentProcessor:
    return StubPaymentProcessor()


@pytest.fixture
def booking_endpoint() -> InMemoryBookingEndpoint:
    return InMemoryBookingEndpoint()


@pytest.fixture
def make_cache(clock):
    def _make(name: str = "test", ttl: float = 300) -> InMemoryCache:
        return InMemoryCache(name=name, default_ttl_seconds=ttl, clock=clock)

    return _make


@pytest.fixture
def quote():
    return make_quote()
