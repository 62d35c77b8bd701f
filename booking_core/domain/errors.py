"""Domain exceptions for the booking flow."""


class DomainError(Exception):
    """Base class for every booking domain error."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Flow errors ===


class NoActiveBookingError(DomainError):
    """There is no live booking draft."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Cannot {operation}: no active booking",
            code="NO_ACTIVE_BOOKING",
        )
        self.operation = operation


class BookingInProgressError(DomainError):
    """A booking is in processing and must reach a terminal outcome first."""

    def __init__(self, hotel_id: str):
        super().__init__(
            message=f"Booking for hotel {hotel_id} is being processed; wait for it to finish",
            code="BOOKING_IN_PROGRESS",
        )
        self.hotel_id = hotel_id


class InvalidStepTransitionError(DomainError):
    """The current step does not allow the requested transition."""

    def __init__(self, current_step: str, operation: str, reason: str | None = None):
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Cannot {operation} from step '{current_step}'{detail}",
            code="INVALID_STEP_TRANSITION",
        )
        self.current_step = current_step
        self.operation = operation
        self.reason = reason


class CancellationNotAllowedError(DomainError):
    """The booking cannot be cancelled once submission is in flight."""

    def __init__(self, current_step: str):
        super().__init__(
            message=f"Booking cannot be cancelled during '{current_step}'",
            code="CANCELLATION_NOT_ALLOWED",
        )
        self.current_step = current_step


class RoomNotAvailableError(DomainError):
    """The room is not part of the current availability result."""

    def __init__(self, room_id: str):
        super().__init__(
            message=f"Room not available for the selected dates: {room_id}",
            code="ROOM_NOT_AVAILABLE",
        )
        self.room_id = room_id


# === Provider errors ===


class ProviderError(DomainError):
    """An external provider call failed."""

    def __init__(self, provider: str, message: str, code: str | None = None):
        super().__init__(message=message, code=code or "PROVIDER_ERROR")
        self.provider = provider


class ProviderTimeoutError(ProviderError):
    """An external provider did not answer within its timeout budget."""

    def __init__(self, provider: str, timeout_seconds: float):
        super().__init__(
            provider=provider,
            message=f"Timeout of {timeout_seconds}s calling {provider}",
            code="PROVIDER_TIMEOUT",
        )
        self.timeout_seconds = timeout_seconds


class AvailabilityError(ProviderError):
    def __init__(self, message: str):
        super().__init__(provider="availability", message=message, code="AVAILABILITY_ERROR")


class PricingError(ProviderError):
    def __init__(self, message: str):
        super().__init__(provider="pricing", message=message, code="PRICING_ERROR")


class BookingSubmissionError(ProviderError):
    def __init__(self, message: str):
        super().__init__(provider="booking", message=message, code="BOOKING_SUBMISSION_ERROR")


class RateLimitExceededError(DomainError):
    """Too many requests for the given limiter window."""

    def __init__(self, identifier: str, retry_after: int, reset_at: float):
        minutes = max(1, -(-retry_after // 60))
        plural = "s" if minutes != 1 else ""
        super().__init__(
            message=f"Rate limit exceeded. Please try again in {minutes} minute{plural}.",
            code="RATE_LIMIT_EXCEEDED",
        )
        self.identifier = identifier
        self.retry_after = retry_after
        self.reset_at = reset_at


# === Payment errors ===


class InsecureTransportError(DomainError):
    """Payment operations were attempted over an insecure transport."""

    def __init__(self):
        super().__init__(
            message="Payment operations require a secure HTTPS connection.",
            code="INSECURE_TRANSPORT",
        )


class InvalidPaymentAmountError(DomainError):
    def __init__(self, amount: int):
        super().__init__(
            message=f"Invalid payment amount: {amount}",
            code="INVALID_PAYMENT_AMOUNT",
        )
        self.amount = amount


class PaymentIntentError(DomainError):
    """The processor refused to create a payment intent."""

    def __init__(self, message: str):
        super().__init__(message=message, code="PAYMENT_INTENT_ERROR")


class StalePaymentIntentError(DomainError):
    """The payment intent no longer matches the current quote."""

    def __init__(self, intent_amount: int, quote_amount: int | None):
        super().__init__(
            message=(
                f"Payment intent for {intent_amount} minor units is stale "
                f"(current quote: {quote_amount})"
            ),
            code="STALE_PAYMENT_INTENT",
        )
        self.intent_amount = intent_amount
        self.quote_amount = quote_amount


class PaymentDeclinedError(DomainError):
    """The processor rejected the payment."""

    def __init__(self, processor_code: str | None, message: str):
        super().__init__(message=message, code="PAYMENT_DECLINED")
        self.processor_code = processor_code


class PaymentIncompleteError(DomainError):
    """The processor answered with a status that is neither success nor an error."""

    def __init__(self, status: str | None):
        super().__init__(
            message=f"Payment ended in unexpected status: {status}",
            code="PAYMENT_REQUIRES_CONTACT",
        )
        self.status = status


class PaymentAlreadyConfirmedError(DomainError):
    """The payment intent was already sent for confirmation."""

    def __init__(self, intent_id: str):
        super().__init__(
            message=f"Payment intent already confirmed: {intent_id}",
            code="PAYMENT_ALREADY_CONFIRMED",
        )
        self.intent_id = intent_id


# === Validation errors ===


class ValidationError(DomainError):
    """Invalid input data."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation failed on '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidDateRangeError(DomainError):
    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class InvalidMoneyError(DomainError):
    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_MONEY")
