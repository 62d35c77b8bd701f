import pytest

from booking_core.bootstrap import build_context, build_providers, build_rate_limiters
from booking_core.config import Settings
from booking_core.infrastructure.gateways import (
    HttpAvailabilityProvider,
    HttpBookingEndpoint,
    HttpPricingProvider,
    StripePaymentProcessor,
)
from booking_core.infrastructure.in_memory import StubPaymentProcessor


def test_rate_limiters_from_settings(clock):
    limiters = build_rate_limiters(Settings(booking_creation_rate_limit=2), clock)

    assert set(limiters) == {
        "availability",
        "booking_creation",
        "booking_modification",
        "booking_cancellation",
    }
    assert limiters["booking_creation"].max_requests == 2
    assert limiters["booking_cancellation"].window_seconds == 3600


def test_in_memory_providers_by_default():
    _, _, processor, _ = build_providers(Settings(use_in_memory=True))

    assert isinstance(processor, StubPaymentProcessor)


def test_http_providers_need_stripe_key(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)

    with pytest.raises(ValueError):
        build_providers(Settings(use_in_memory=False))


def test_http_providers(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")

    providers = build_providers(Settings(use_in_memory=False, api_base_url="https://api.example.com"))

    assert [type(p) for p in providers] == [
        HttpAvailabilityProvider,
        HttpPricingProvider,
        StripePaymentProcessor,
        HttpBookingEndpoint,
    ]


def test_context_honours_settings(clock):
    settings = Settings(
        telemetry_enabled=False,
        availability_debounce_ms=250,
        api_base_url="http://localhost:8000",
        allow_insecure_localhost=True,
    )

    context = build_context(settings, clock=clock)

    assert not context.telemetry.enabled
    assert context.resolver._debounce_seconds == 0.25
    assert context.payments._transport.is_secure()
    assert "booking_modification" in context.rate_limiters
