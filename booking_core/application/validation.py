"""Guest-info validation: advisory per-field checks and the authoritative pass."""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from booking_core.application.schemas import EMAIL_FORMAT_MESSAGE, FIELD_LABELS, GuestInfoInput
from booking_core.domain.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class GuestInfoValidation:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)
    data: GuestInfoInput | None = None


def _error_message(error: Mapping[str, Any]) -> str:
    """User-facing message for one pydantic error entry."""
    field_name = str(error["loc"][0]) if error.get("loc") else ""
    label = FIELD_LABELS.get(field_name, field_name)
    raw = error.get("input")

    if error["type"] == "missing" or (isinstance(raw, str) and not raw.strip()):
        return f"{label} is required"

    ctx = error.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    if field_name == "email":
        return EMAIL_FORMAT_MESSAGE
    return error["msg"]


def _collect_errors(exc: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        field_name = str(error["loc"][0]) if error.get("loc") else "__root__"
        errors.setdefault(field_name, _error_message(error))
    return errors


class InputValidator:
    """
    Validates guest-supplied records.

    `validate_field` is the advisory on-blur check; `validate_guest_info`
    is the authoritative pass that gates progression.
    """

    def validate_guest_info(self, guest_info: Mapping[str, Any]) -> GuestInfoValidation:
        try:
            data = GuestInfoInput.model_validate(dict(guest_info))
        except PydanticValidationError as exc:
            errors = _collect_errors(exc)
            logger.debug("Guest info rejected", extra={"fields": sorted(errors)})
            return GuestInfoValidation(valid=False, errors=errors)
        return GuestInfoValidation(valid=True, data=data)

    def validate_field(
        self, field_name: str, value: Any, guest_info: Mapping[str, Any] | None = None
    ) -> str | None:
        """Error message for a single field, or None when it is valid."""
        record = {**(guest_info or {}), field_name: value}
        result = self.validate_guest_info(record)
        return result.errors.get(field_name)

    def require_valid_guest_info(self, guest_info: Mapping[str, Any]) -> GuestInfoInput:
        """
        Authoritative validation.

        Raises:
            ValidationError: For the first invalid field.
        """
        result = self.validate_guest_info(guest_info)
        if not result.valid:
            field_name, message = next(iter(result.errors.items()))
            raise ValidationError(field=field_name, message=message)
        return result.data
