"""Domain entities."""

from booking_core.domain.entities.availability import (
    AvailabilityQuery,
    AvailabilityResult,
    RoomOption,
)
from booking_core.domain.entities.booking import BookingConfirmation, BookingRequest
from booking_core.domain.entities.booking_draft import (
    REQUIRED_GUEST_FIELDS,
    STEP_ORDER,
    BookingDraft,
    BookingStep,
)
from booking_core.domain.entities.payment import PaymentIntentHandle, PaymentState
from booking_core.domain.entities.pricing import PriceLine, PricingQuote
from booking_core.domain.entities.telemetry import (
    ErrorContext,
    ErrorRecord,
    ErrorStats,
    FunnelEvent,
    Severity,
)

__all__ = [
    "AvailabilityQuery",
    "AvailabilityResult",
    "RoomOption",
    "BookingConfirmation",
    "BookingRequest",
    "BookingDraft",
    "BookingStep",
    "STEP_ORDER",
    "REQUIRED_GUEST_FIELDS",
    "PaymentIntentHandle",
    "PaymentState",
    "PriceLine",
    "PricingQuote",
    "ErrorContext",
    "ErrorRecord",
    "ErrorStats",
    "FunnelEvent",
    "Severity",
]
