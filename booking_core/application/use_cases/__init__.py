from booking_core.application.use_cases.availability_resolver import (
    AvailabilityOutcome,
    AvailabilityResolver,
)
from booking_core.application.use_cases.booking_flow import BookingContext, BookingFlow
from booking_core.application.use_cases.booking_submission import (
    BookingSubmitter,
    SubmissionOutcome,
)
from booking_core.application.use_cases.payment_coordinator import (
    PaymentConfirmationOutcome,
    PaymentCoordinator,
    PaymentIntentOutcome,
    map_payment_error,
)
from booking_core.application.use_cases.pricing_service import PricingOutcome, PricingService

__all__ = [
    "AvailabilityOutcome",
    "AvailabilityResolver",
    "BookingContext",
    "BookingFlow",
    "BookingSubmitter",
    "SubmissionOutcome",
    "PaymentConfirmationOutcome",
    "PaymentCoordinator",
    "PaymentIntentOutcome",
    "map_payment_error",
    "PricingOutcome",
    "PricingService",
]
