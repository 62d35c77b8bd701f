"""Payment intent handle and coordinator states."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PaymentState(str, Enum):
    """Per-attempt payment lifecycle."""

    UNINITIALIZED = "uninitialized"
    INTENT_CREATING = "intent-creating"
    INTENT_READY = "intent-ready"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentIntentHandle:
    """
    Opaque processor reference bound to one amount and currency.

    Only tokens cross this boundary; raw card data never does.
    """

    intent_id: str
    client_secret: str
    amount_minor_units: int
    currency: str
    quote_fingerprint: tuple
    created_at: datetime

    def __repr__(self) -> str:
        return (
            f"PaymentIntentHandle(intent_id={self.intent_id!r}, "
            f"amount_minor_units={self.amount_minor_units}, currency={self.currency!r})"
        )
