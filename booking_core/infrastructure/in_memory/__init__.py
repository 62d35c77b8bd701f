"""In-memory providers for development and tests."""

from booking_core.infrastructure.in_memory.availability_provider import (
    DEFAULT_ROOMS,
    InMemoryAvailabilityProvider,
)
from booking_core.infrastructure.in_memory.booking_endpoint import InMemoryBookingEndpoint
from booking_core.infrastructure.in_memory.payment_processor import StubPaymentProcessor
from booking_core.infrastructure.in_memory.pricing_provider import InMemoryPricingProvider

__all__ = [
    "DEFAULT_ROOMS",
    "InMemoryAvailabilityProvider",
    "InMemoryBookingEndpoint",
    "InMemoryPricingProvider",
    "StubPaymentProcessor",
]
