from booking_core.application.interfaces.availability_provider import (
    AvailabilityProvider,
    AvailabilityResponse,
)
from booking_core.application.interfaces.booking_endpoint import (
    BookingEndpoint,
    BookingEndpointResult,
)
from booking_core.application.interfaces.cache import CachePort
from booking_core.application.interfaces.clock import Clock, FakeClock, SystemClock
from booking_core.application.interfaces.payment_processor import (
    PaymentConfirmationResult,
    PaymentIntentCreated,
    PaymentProcessor,
)
from booking_core.application.interfaces.pricing_provider import PricingProvider, PricingResponse
from booking_core.application.interfaces.transport import TransportSecurity

__all__ = [
    "AvailabilityProvider",
    "AvailabilityResponse",
    "BookingEndpoint",
    "BookingEndpointResult",
    "CachePort",
    "Clock",
    "FakeClock",
    "SystemClock",
    "PaymentConfirmationResult",
    "PaymentIntentCreated",
    "PaymentProcessor",
    "PricingProvider",
    "PricingResponse",
    "TransportSecurity",
]
