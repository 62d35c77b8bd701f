"""Payment security rules enforced before anything reaches the processor."""

import json
import logging
import re
from typing import Any, Mapping

from booking_core.application.interfaces.transport import TransportSecurity
from booking_core.domain.errors import (
    InsecureTransportError,
    InvalidPaymentAmountError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_PAYMENT_AMOUNT_MINOR_UNITS = 100_000_000
DEFAULT_THREE_D_SECURE_THRESHOLD = 50_000

ALLOWED_METADATA_FIELDS = (
    "bookingId",
    "hotelId",
    "userId",
    "guestName",
    "checkInDate",
    "checkOutDate",
    "roomType",
)

VALID_TOKEN_PREFIXES = ("pm_", "pi_", "tok_", "card_", "src_", "seti_")
CLIENT_SECRET_MARKER = "_secret_"

SECURITY_EVENTS = (
    "payment_initiated",
    "payment_completed",
    "payment_failed",
    "3ds_required",
    "token_created",
)

_CARD_NUMBER_RE = re.compile(r"\b\d{13,19}\b")


def enforce_secure_transport(transport: TransportSecurity, required: bool = True) -> None:
    """
    Raises:
        InsecureTransportError: The active transport is not secure.
    """
    if required and not transport.is_secure():
        logger.error("Refusing payment operation over insecure transport")
        raise InsecureTransportError()


def is_valid_payment_amount(amount: Any) -> bool:
    if isinstance(amount, bool) or not isinstance(amount, int):
        return False
    return 0 < amount <= MAX_PAYMENT_AMOUNT_MINOR_UNITS


def validate_payment_amount(amount: Any) -> int:
    if not is_valid_payment_amount(amount):
        raise InvalidPaymentAmountError(amount)
    return amount


def requires_three_d_secure(
    amount_minor_units: int, threshold: int = DEFAULT_THREE_D_SECURE_THRESHOLD
) -> bool:
    return amount_minor_units >= threshold


def contains_card_number(data: Any) -> bool:
    """True when the serialized data holds a 13-19 digit run."""
    serialized = json.dumps(data, default=str)
    return bool(_CARD_NUMBER_RE.search(serialized))


def sanitize_payment_metadata(metadata: Mapping[str, Any]) -> dict[str, str]:
    """Keeps only allow-listed keys, stringified."""
    return {
        key: str(metadata[key])
        for key in ALLOWED_METADATA_FIELDS
        if metadata.get(key) is not None
    }


def validate_payment_metadata(metadata: Mapping[str, Any]) -> dict[str, str]:
    """
    Reduces metadata to the allow-list and rejects anything card-number shaped.

    Raises:
        ValidationError: The metadata carries a potential card number.
    """
    sanitized = sanitize_payment_metadata(metadata)
    if contains_card_number(sanitized):
        logger.critical("Potential card number detected in payment metadata")
        raise ValidationError(field="metadata", message="Potential card number detected")
    return sanitized


def is_valid_payment_token(token: str | None) -> bool:
    if not token:
        return False
    return token.startswith(VALID_TOKEN_PREFIXES) or CLIENT_SECRET_MARKER in token


def mask_card_number(card_number: str | None) -> str:
    if not card_number or len(card_number) < 4:
        return "****"
    return f"**** **** **** {card_number[-4:]}"


def log_security_event(event: str, details: Mapping[str, Any]) -> None:
    """Audit log entry; details are reduced to the metadata allow-list."""
    if event not in SECURITY_EVENTS:
        raise ValueError(f"Unknown payment security event: {event}")
    logger.info(
        "Payment security event: %s",
        event,
        extra={"security_event": event, "details": sanitize_payment_metadata(details)},
    )
