from typing import Any
from uuid import uuid4

from booking_core.application.interfaces.payment_processor import (
    PaymentConfirmationResult,
    PaymentIntentCreated,
    PaymentProcessor,
)
from booking_core.domain.constants import PAYMENT_STATUS_SUCCEEDED


class StubPaymentProcessor(PaymentProcessor):
    """
    Issues fake intents and confirms them as succeeded.

    Queue scripted results with `script_confirmation` to simulate declines.
    """

    def __init__(self):
        self.intents: dict[str, PaymentIntentCreated] = {}
        self.confirmed_secrets: list[str] = []
        self._scripted: list[PaymentConfirmationResult] = []
        self.fail_next_intent: Exception | None = None

    def script_confirmation(self, result: PaymentConfirmationResult) -> None:
        self._scripted.append(result)

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: dict[str, Any],
    ) -> PaymentIntentCreated:
        if self.fail_next_intent is not None:
            error, self.fail_next_intent = self.fail_next_intent, None
            raise error
        intent_id = f"pi_{uuid4().hex[:14]}"
        created = PaymentIntentCreated(
            client_secret=f"{intent_id}_secret_{uuid4().hex[:10]}",
            intent_id=intent_id,
            amount=amount_minor_units,
            currency=currency,
        )
        self.intents[intent_id] = created
        return created

    async def confirm(
        self,
        client_secret: str,
        payment_method_token: str | None = None,
    ) -> PaymentConfirmationResult:
        self.confirmed_secrets.append(client_secret)
        if self._scripted:
            return self._scripted.pop(0)
        intent_id = client_secret.split("_secret_")[0]
        return PaymentConfirmationResult(status=PAYMENT_STATUS_SUCCEEDED, confirmation_id=intent_id)
