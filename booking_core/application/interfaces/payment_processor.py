from dataclasses import dataclass
from typing import Any


@dataclass
class PaymentIntentCreated:
    client_secret: str
    intent_id: str
    amount: int
    currency: str
    status: str = "requires_payment_method"


@dataclass
class PaymentConfirmationResult:
    status: str | None = None
    confirmation_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error_code is not None or self.error_message is not None


class PaymentProcessor:
    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: dict[str, Any],
    ) -> PaymentIntentCreated:
        raise NotImplementedError

    async def confirm(
        self,
        client_secret: str,
        payment_method_token: str | None = None,
    ) -> PaymentConfirmationResult:
        raise NotImplementedError
