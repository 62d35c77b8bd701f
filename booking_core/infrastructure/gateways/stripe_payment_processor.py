import logging
from typing import Any

import stripe

from booking_core.application.interfaces.payment_processor import (
    PaymentConfirmationResult,
    PaymentIntentCreated,
    PaymentProcessor,
)
from booking_core.application.payment_security import DEFAULT_THREE_D_SECURE_THRESHOLD
from booking_core.domain.errors import PaymentIntentError
from booking_core.infrastructure.circuit_breaker import CircuitBreakerError, payment_breaker

logger = logging.getLogger(__name__)

# Declines are the customer's problem, not the processor's.
payment_breaker.add_excluded_exception(stripe.CardError)


def intent_id_from_secret(client_secret: str) -> str:
    return client_secret.split("_secret_")[0]


class StripePaymentProcessor(PaymentProcessor):
    def __init__(
        self,
        api_key: str,
        three_d_secure_threshold: int = DEFAULT_THREE_D_SECURE_THRESHOLD,
    ) -> None:
        stripe.api_key = api_key
        stripe.max_network_retries = 2
        self._three_d_secure_threshold = three_d_secure_threshold

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: dict[str, Any],
    ) -> PaymentIntentCreated:
        """
        Create a PaymentIntent, protected by Circuit Breaker.

        Raises:
            PaymentIntentError: Circuit open or Stripe rejected the request.
        """
        params: dict[str, Any] = {
            "amount": amount_minor_units,
            "currency": currency.lower(),
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if amount_minor_units >= self._three_d_secure_threshold:
            params["payment_method_options"] = {"card": {"request_three_d_secure": "any"}}

        try:
            # stripe does not have async client; run sync call
            intent = payment_breaker.call(stripe.PaymentIntent.create, **params)
        except CircuitBreakerError as exc:
            logger.error(
                "Stripe circuit breaker is open - service unavailable",
                extra={"circuit_state": str(exc)},
            )
            raise PaymentIntentError("Payment service temporarily unavailable") from exc
        except stripe.StripeError as exc:
            logger.error("Stripe API error creating intent", exc_info=exc)
            raise PaymentIntentError(exc.user_message or str(exc)) from exc

        return PaymentIntentCreated(
            client_secret=intent.client_secret,
            intent_id=intent.id,
            amount=intent.amount,
            currency=intent.currency,
            status=intent.status,
        )

    async def confirm(
        self,
        client_secret: str,
        payment_method_token: str | None = None,
    ) -> PaymentConfirmationResult:
        """
        Confirm with the given payment method, or read back the status when
        the payment UI already confirmed client-side.
        """
        intent_id = intent_id_from_secret(client_secret)
        try:
            if payment_method_token:
                intent = payment_breaker.call(
                    stripe.PaymentIntent.confirm, intent_id, payment_method=payment_method_token
                )
            else:
                intent = payment_breaker.call(stripe.PaymentIntent.retrieve, intent_id)
        except stripe.CardError as exc:
            logger.warning(
                "Stripe card error",
                extra={"intent_id": intent_id, "decline_code": exc.code},
            )
            return PaymentConfirmationResult(
                error_code=exc.code,
                error_message=exc.user_message or str(exc),
            )
        except CircuitBreakerError as exc:
            logger.error(
                "Stripe circuit breaker is open - service unavailable",
                extra={"circuit_state": str(exc)},
            )
            return PaymentConfirmationResult(
                error_code="processing_error",
                error_message="Payment service temporarily unavailable",
            )
        except stripe.StripeError as exc:
            logger.error("Stripe API error confirming intent", exc_info=exc, extra={"intent_id": intent_id})
            return PaymentConfirmationResult(
                error_code=exc.code or "processing_error",
                error_message=exc.user_message or str(exc),
            )

        last_error = getattr(intent, "last_payment_error", None)
        if last_error:
            return PaymentConfirmationResult(
                status=intent.status,
                error_code=last_error.get("code"),
                error_message=last_error.get("message"),
            )
        return PaymentConfirmationResult(status=intent.status, confirmation_id=intent.id)
