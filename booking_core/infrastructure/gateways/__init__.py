from booking_core.infrastructure.gateways.availability_http import HttpAvailabilityProvider
from booking_core.infrastructure.gateways.booking_http import HttpBookingEndpoint
from booking_core.infrastructure.gateways.pricing_http import HttpPricingProvider
from booking_core.infrastructure.gateways.stripe_payment_processor import StripePaymentProcessor

__all__ = [
    "HttpAvailabilityProvider",
    "HttpBookingEndpoint",
    "HttpPricingProvider",
    "StripePaymentProcessor",
]
