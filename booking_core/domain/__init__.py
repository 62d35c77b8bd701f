"""
Domain layer - hotel booking flow.

Pure business logic with no framework dependencies.

Structure:
- entities/: BookingDraft, availability, pricing, payment and telemetry records
- value_objects/: Money, StayDates
- errors.py: domain exceptions
- constants.py: outcomes, statuses and user-facing messages
"""

from booking_core.domain.entities import (
    AvailabilityQuery,
    AvailabilityResult,
    BookingConfirmation,
    BookingDraft,
    BookingRequest,
    BookingStep,
    ErrorContext,
    ErrorRecord,
    ErrorStats,
    FunnelEvent,
    PaymentIntentHandle,
    PaymentState,
    PricingQuote,
    RoomOption,
    Severity,
)
from booking_core.domain.errors import (
    AvailabilityError,
    BookingInProgressError,
    BookingSubmissionError,
    CancellationNotAllowedError,
    DomainError,
    InsecureTransportError,
    InvalidDateRangeError,
    InvalidMoneyError,
    InvalidPaymentAmountError,
    InvalidStepTransitionError,
    NoActiveBookingError,
    PaymentAlreadyConfirmedError,
    PaymentDeclinedError,
    PaymentIncompleteError,
    PaymentIntentError,
    PricingError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitExceededError,
    RoomNotAvailableError,
    StalePaymentIntentError,
    ValidationError,
)
from booking_core.domain.value_objects import Money, StayDates

__all__ = [
    # Entities
    "AvailabilityQuery",
    "AvailabilityResult",
    "BookingConfirmation",
    "BookingDraft",
    "BookingRequest",
    "BookingStep",
    "ErrorContext",
    "ErrorRecord",
    "ErrorStats",
    "FunnelEvent",
    "PaymentIntentHandle",
    "PaymentState",
    "PricingQuote",
    "RoomOption",
    "Severity",
    # Value Objects
    "Money",
    "StayDates",
    # Errors
    "DomainError",
    "AvailabilityError",
    "BookingInProgressError",
    "BookingSubmissionError",
    "CancellationNotAllowedError",
    "InsecureTransportError",
    "InvalidDateRangeError",
    "InvalidMoneyError",
    "InvalidPaymentAmountError",
    "InvalidStepTransitionError",
    "NoActiveBookingError",
    "PaymentAlreadyConfirmedError",
    "PaymentDeclinedError",
    "PaymentIncompleteError",
    "PaymentIntentError",
    "PricingError",
    "ProviderError",
    "ProviderTimeoutError",
    "RateLimitExceededError",
    "RoomNotAvailableError",
    "StalePaymentIntentError",
    "ValidationError",
]
