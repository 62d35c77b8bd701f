"""Wires a BookingFlow from Settings."""

import logging

from booking_core.application.interfaces.availability_provider import AvailabilityProvider
from booking_core.application.interfaces.booking_endpoint import BookingEndpoint
from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.application.interfaces.payment_processor import PaymentProcessor
from booking_core.application.interfaces.pricing_provider import PricingProvider
from booking_core.application.interfaces.transport import TransportSecurity
from booking_core.application.rate_limiter import RateLimiter
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.application.use_cases.availability_resolver import AvailabilityResolver
from booking_core.application.use_cases.booking_flow import BookingContext, BookingFlow
from booking_core.application.use_cases.booking_submission import BookingSubmitter
from booking_core.application.use_cases.payment_coordinator import PaymentCoordinator
from booking_core.application.use_cases.pricing_service import PricingService
from booking_core.application.validation import InputValidator
from booking_core.config import Settings, get_settings
from booking_core.infrastructure.cache.memory_cache import InMemoryCache
from booking_core.infrastructure.gateways import (
    HttpAvailabilityProvider,
    HttpBookingEndpoint,
    HttpPricingProvider,
    StripePaymentProcessor,
)
from booking_core.infrastructure.in_memory import (
    InMemoryAvailabilityProvider,
    InMemoryBookingEndpoint,
    InMemoryPricingProvider,
    StubPaymentProcessor,
)
from booking_core.infrastructure.services.transport_security import UrlTransportSecurity

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_rate_limiters(settings: Settings, clock: Clock) -> dict[str, RateLimiter]:
    """Limiters keyed by operation: availability, booking_creation, modification, cancellation."""
    return {
        "availability": RateLimiter(
            settings.availability_rate_limit,
            settings.availability_rate_window_seconds,
            "availability",
            clock,
        ),
        "booking_creation": RateLimiter(
            settings.booking_creation_rate_limit,
            settings.booking_creation_rate_window_seconds,
            "booking_creation",
            clock,
        ),
        "booking_modification": RateLimiter(
            settings.booking_modification_rate_limit,
            settings.booking_modification_rate_window_seconds,
            "booking_modification",
            clock,
        ),
        "booking_cancellation": RateLimiter(
            settings.booking_cancellation_rate_limit,
            settings.booking_cancellation_rate_window_seconds,
            "booking_cancellation",
            clock,
        ),
    }


def build_providers(
    settings: Settings,
    telemetry: ErrorTelemetry | None = None,
) -> tuple[AvailabilityProvider, PricingProvider, PaymentProcessor, BookingEndpoint]:
    if settings.use_in_memory:
        return (
            InMemoryAvailabilityProvider(),
            InMemoryPricingProvider(),
            StubPaymentProcessor(),
            InMemoryBookingEndpoint(),
        )

    if not settings.stripe_api_key:
        raise ValueError("STRIPE_SECRET_KEY is required when use_in_memory is disabled")

    logger.info("Using HTTP providers", extra={"api_base_url": settings.api_base_url})
    return (
        HttpAvailabilityProvider(
            settings.api_base_url, settings.availability_timeout_seconds, telemetry
        ),
        HttpPricingProvider(settings.api_base_url, settings.pricing_timeout_seconds, telemetry),
        StripePaymentProcessor(
            settings.stripe_api_key,
            three_d_secure_threshold=settings.three_d_secure_threshold_minor_units,
        ),
        HttpBookingEndpoint(
            settings.api_base_url, settings.booking_submission_timeout_seconds, telemetry
        ),
    )


def build_context(
    settings: Settings | None = None,
    clock: Clock | None = None,
    transport: TransportSecurity | None = None,
    providers: tuple[AvailabilityProvider, PricingProvider, PaymentProcessor, BookingEndpoint]
    | None = None,
) -> BookingContext:
    settings = settings or get_settings()
    clock = clock or SystemClock()
    transport = transport or UrlTransportSecurity(
        settings.api_base_url, allow_localhost=settings.allow_insecure_localhost
    )
    telemetry = ErrorTelemetry(clock=clock, enabled=settings.telemetry_enabled)
    analytics = FunnelAnalytics(clock=clock, enabled=settings.analytics_enabled)
    availability, pricing, processor, endpoint = providers or build_providers(settings, telemetry)
    validator = InputValidator()
    rate_limiters = build_rate_limiters(settings, clock)

    resolver = AvailabilityResolver(
        provider=availability,
        cache=InMemoryCache(
            name="availability",
            default_ttl_seconds=settings.availability_cache_ttl_seconds,
            clock=clock,
            max_size=settings.cache_max_entries,
        ),
        telemetry=telemetry,
        rate_limiter=rate_limiters["availability"],
        clock=clock,
        debounce_seconds=settings.availability_debounce_seconds,
        timeout_seconds=settings.availability_timeout_seconds,
        prefetch_offsets_days=settings.prefetch_offsets_days,
        analytics=analytics,
    )
    pricing_service = PricingService(
        provider=pricing,
        cache=InMemoryCache(
            name="pricing",
            default_ttl_seconds=settings.pricing_cache_ttl_seconds,
            clock=clock,
            max_size=settings.cache_max_entries,
        ),
        telemetry=telemetry,
        timeout_seconds=settings.pricing_timeout_seconds,
        analytics=analytics,
        clock=clock,
    )
    payments = PaymentCoordinator(
        processor=processor,
        transport=transport,
        telemetry=telemetry,
        clock=clock,
        require_secure_transport=settings.require_secure_transport,
        three_d_secure_threshold=settings.three_d_secure_threshold_minor_units,
    )
    submitter = BookingSubmitter(
        endpoint=endpoint,
        validator=validator,
        detail_cache=InMemoryCache(
            name="booking_detail",
            default_ttl_seconds=settings.booking_detail_cache_ttl_seconds,
            clock=clock,
            max_size=settings.cache_max_entries,
        ),
        telemetry=telemetry,
        rate_limiter=rate_limiters["booking_creation"],
        clock=clock,
        timeout_seconds=settings.booking_submission_timeout_seconds,
        analytics=analytics,
    )

    return BookingContext(
        resolver=resolver,
        pricing=pricing_service,
        payments=payments,
        submitter=submitter,
        validator=validator,
        telemetry=telemetry,
        analytics=analytics,
        clock=clock,
        rate_limiters=rate_limiters,
    )


def build_flow(settings: Settings | None = None, **kwargs) -> BookingFlow:
    return BookingFlow(build_context(settings, **kwargs))
