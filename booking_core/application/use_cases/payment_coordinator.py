import logging
from typing import Any

from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.application.interfaces.payment_processor import PaymentProcessor
from booking_core.application.interfaces.transport import TransportSecurity
from booking_core.application.payment_security import (
    DEFAULT_THREE_D_SECURE_THRESHOLD,
    enforce_secure_transport,
    is_valid_payment_token,
    log_security_event,
    requires_three_d_secure,
    validate_payment_amount,
    validate_payment_metadata,
)
from booking_core.application.results import Outcome
from booking_core.application.telemetry import ErrorTelemetry
from booking_core.domain.constants import (
    ERROR_MESSAGES,
    PAYMENT_ERROR_FALLBACK_MESSAGE,
    PAYMENT_ERROR_MESSAGES,
    PAYMENT_STATUS_SUCCEEDED,
)
from booking_core.domain.entities.payment import PaymentIntentHandle, PaymentState
from booking_core.domain.entities.pricing import PricingQuote
from booking_core.domain.errors import (
    DomainError,
    InsecureTransportError,
    InvalidStepTransitionError,
    PaymentAlreadyConfirmedError,
    PaymentDeclinedError,
    PaymentIncompleteError,
    PaymentIntentError,
    StalePaymentIntentError,
    ValidationError,
)

PaymentIntentOutcome = Outcome[PaymentIntentHandle]
PaymentConfirmationOutcome = Outcome[str]


def map_payment_error(error_code: str | None, error_message: str | None) -> str:
    """
    User-facing message for a processor error.

    Exact code match first, then a code mentioned in the processor's message,
    then the generic fallback.
    """
    if error_code and error_code in PAYMENT_ERROR_MESSAGES:
        return PAYMENT_ERROR_MESSAGES[error_code]
    lowered = (error_message or "").lower()
    for code, message in PAYMENT_ERROR_MESSAGES.items():
        if code in lowered or code.replace("_", " ") in lowered:
            return message
    return PAYMENT_ERROR_FALLBACK_MESSAGE


class PaymentCoordinator:
    """
    Payment lifecycle for one booking attempt.

    uninitialized -> intent-creating -> intent-ready -> confirming -> succeeded | failed

    Only opaque handles and tokens pass through here. Each handle is bound to
    the quote it was created for and is confirmed at most once.
    """

    def __init__(
        self,
        processor: PaymentProcessor,
        transport: TransportSecurity,
        telemetry: ErrorTelemetry | None = None,
        clock: Clock | None = None,
        require_secure_transport: bool = True,
        three_d_secure_threshold: int = DEFAULT_THREE_D_SECURE_THRESHOLD,
    ) -> None:
        self._processor = processor
        self._transport = transport
        self._telemetry = telemetry
        self._clock = clock or SystemClock()
        self._require_secure_transport = require_secure_transport
        self._three_d_secure_threshold = three_d_secure_threshold
        self._logger = logging.getLogger(__name__)
        self._confirmed_intents: set[str] = set()

        self.state = PaymentState.UNINITIALIZED
        self.handle: PaymentIntentHandle | None = None
        self.confirmation_id: str | None = None
        self.error: str | None = None

    async def create_intent(
        self, quote: PricingQuote, metadata: dict[str, Any] | None = None
    ) -> PaymentIntentOutcome:
        """Creates a handle for the quote total, replacing any unconfirmed one."""
        if self.state in (PaymentState.CONFIRMING, PaymentState.SUCCEEDED):
            raise InvalidStepTransitionError(self.state.value, "create a payment intent")

        self.state = PaymentState.INTENT_CREATING
        self.handle = None
        self.error = None

        try:
            enforce_secure_transport(self._transport, self._require_secure_transport)
            amount = validate_payment_amount(quote.total.to_minor_units())
            currency = quote.currency.lower()
            safe_metadata = validate_payment_metadata(metadata or {})

            log_security_event("payment_initiated", safe_metadata)
            if requires_three_d_secure(amount, self._three_d_secure_threshold):
                log_security_event("3ds_required", safe_metadata)

            created = await self._processor.create_intent(
                amount_minor_units=amount,
                currency=currency,
                metadata=safe_metadata,
            )
            if not is_valid_payment_token(created.client_secret):
                raise PaymentIntentError("Processor returned an invalid client secret")
            if created.amount != amount:
                raise PaymentIntentError(
                    f"Processor created intent for {created.amount}, expected {amount}"
                )
        except DomainError as exc:
            return self._intent_failed(exc, quote)
        except Exception as exc:
            self._logger.exception("Unexpected error creating payment intent")
            return self._intent_failed(PaymentIntentError(str(exc) or type(exc).__name__), quote)

        self.handle = PaymentIntentHandle(
            intent_id=created.intent_id,
            client_secret=created.client_secret,
            amount_minor_units=amount,
            currency=currency,
            quote_fingerprint=quote.fingerprint,
            created_at=self._clock.now(),
        )
        self.state = PaymentState.INTENT_READY
        log_security_event("token_created", safe_metadata)
        self._logger.info(
            "Payment intent created",
            extra={"intent_id": created.intent_id, "amount": amount, "currency": currency},
        )
        return Outcome.success(self.handle)

    def _intent_failed(self, error: DomainError, quote: PricingQuote) -> PaymentIntentOutcome:
        self.state = PaymentState.FAILED
        self.handle = None
        if isinstance(error, InsecureTransportError):
            self.error = error.message
        else:
            self.error = ERROR_MESSAGES["PAYMENT_SETUP_FAILED"]
        if self._telemetry is not None:
            self._telemetry.log_booking_error(
                error,
                step="payment",
                component="PaymentCoordinator",
                metadata={"hotel_id": quote.hotel_id, "room_id": quote.room_id},
            )
        return Outcome.failure(error, self.error)

    async def confirm(
        self,
        current_quote: PricingQuote | None,
        payment_method_token: str | None = None,
    ) -> PaymentConfirmationOutcome:
        """
        Confirms the live handle against the processor.

        Returns a failure outcome without calling the processor when the
        handle no longer matches `current_quote`.

        Raises:
            PaymentAlreadyConfirmedError: The handle was already sent for confirmation.
            InvalidStepTransitionError: No handle is ready.
        """
        handle = self.handle
        if handle is not None and handle.intent_id in self._confirmed_intents:
            raise PaymentAlreadyConfirmedError(handle.intent_id)
        if handle is None or self.state != PaymentState.INTENT_READY:
            raise InvalidStepTransitionError(
                self.state.value, "confirm payment", "no payment intent is ready"
            )

        if current_quote is None or current_quote.fingerprint != handle.quote_fingerprint:
            error = StalePaymentIntentError(
                intent_amount=handle.amount_minor_units,
                quote_amount=current_quote.total.to_minor_units() if current_quote else None,
            )
            self._logger.warning(
                "Refusing to confirm stale payment intent",
                extra={"intent_id": handle.intent_id},
            )
            self.handle = None
            self.state = PaymentState.FAILED
            self.error = ERROR_MESSAGES["PAYMENT_SETUP_FAILED"]
            if self._telemetry is not None:
                self._telemetry.log_payment_error(
                    error,
                    payment_intent_id=handle.intent_id,
                    metadata={"error_code": error.code},
                )
            return Outcome.failure(error, self.error)

        if payment_method_token is not None and not is_valid_payment_token(payment_method_token):
            error = ValidationError(field="payment_method", message="Invalid payment method token")
            self.error = ERROR_MESSAGES["VALIDATION_ERROR"]
            return Outcome.failure(error, self.error)

        try:
            enforce_secure_transport(self._transport, self._require_secure_transport)
        except InsecureTransportError as exc:
            self.error = exc.message
            return Outcome.failure(exc, exc.message)

        self._confirmed_intents.add(handle.intent_id)
        self.state = PaymentState.CONFIRMING

        try:
            result = await self._processor.confirm(
                client_secret=handle.client_secret,
                payment_method_token=payment_method_token,
            )
        except Exception as exc:
            self._logger.exception("Payment confirmation call failed")
            return self._confirmation_failed(
                PaymentDeclinedError("processing_error", str(exc) or type(exc).__name__),
                map_payment_error("processing_error", None),
                handle,
            )

        if result.is_error:
            message = map_payment_error(result.error_code, result.error_message)
            return self._confirmation_failed(
                PaymentDeclinedError(result.error_code, result.error_message or message),
                message,
                handle,
            )

        if result.status != PAYMENT_STATUS_SUCCEEDED:
            return self._confirmation_failed(
                PaymentIncompleteError(result.status),
                ERROR_MESSAGES["PAYMENT_REQUIRES_CONTACT"],
                handle,
            )

        self.state = PaymentState.SUCCEEDED
        self.confirmation_id = result.confirmation_id
        self.error = None
        log_security_event("payment_completed", {})
        self._logger.info(
            "Payment confirmed",
            extra={"intent_id": handle.intent_id, "confirmation_id": result.confirmation_id},
        )
        return Outcome.success(result.confirmation_id)

    def _confirmation_failed(
        self, error: DomainError, message: str, handle: PaymentIntentHandle
    ) -> PaymentConfirmationOutcome:
        self.state = PaymentState.FAILED
        self.error = message
        log_security_event("payment_failed", {})
        if self._telemetry is not None:
            self._telemetry.log_payment_error(
                error,
                payment_intent_id=handle.intent_id,
                metadata={"error_code": error.code},
            )
        return Outcome.failure(error, message)

    def abandon_intent(self) -> None:
        """
        Drops the live handle so it can never be confirmed.

        Raises:
            PaymentAlreadyConfirmedError: Confirmation was already sent.
        """
        if self.state in (PaymentState.CONFIRMING, PaymentState.SUCCEEDED):
            raise PaymentAlreadyConfirmedError(self.handle.intent_id if self.handle else "")
        if self.handle is not None:
            self._logger.info("Payment intent abandoned", extra={"intent_id": self.handle.intent_id})
        self.handle = None
        self.state = PaymentState.UNINITIALIZED
        self.error = None

    def reset(self) -> None:
        """Forgets everything about the current attempt (new booking)."""
        self.state = PaymentState.UNINITIALIZED
        self.handle = None
        self.confirmation_id = None
        self.error = None
