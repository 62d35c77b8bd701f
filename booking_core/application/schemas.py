import re
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, ValidationInfo, field_validator

from booking_core.application.sanitization import (
    INVALID_CHARACTERS_MESSAGE,
    detect_injection,
    sanitize_email,
    sanitize_name,
)
from booking_core.domain.constants import COUNTRIES

PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")

EMAIL_FORMAT_MESSAGE = "Please enter a valid email address"

FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone number",
    "country": "Country",
    "special_requests": "Special requests",
    "arrival_time": "Arrival time",
}


class GuestInfoInput(BaseModel):
    """Guest details captured at the guest-info step."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    country: str
    special_requests: str | None = None
    arrival_time: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_injection(cls, value: Any) -> Any:
        if detect_injection(value):
            raise ValueError(INVALID_CHARACTERS_MESSAGE)
        return value

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str, info: ValidationInfo) -> str:
        label = FIELD_LABELS[info.field_name]
        if not value:
            raise ValueError(f"{label} is required")
        if len(value) < 2:
            raise ValueError(f"{label} must be at least 2 characters")
        if len(value) > 50:
            raise ValueError(f"{label} must be less than 50 characters")
        if not sanitize_name(value):
            raise ValueError(INVALID_CHARACTERS_MESSAGE)
        return value

    @field_validator("email")
    @classmethod
    def validate_email_survives_sanitizing(cls, value: str) -> str:
        # Submission sends the sanitized address; reject anything it would blank.
        if not sanitize_email(value):
            raise ValueError(EMAIL_FORMAT_MESSAGE)
        return value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        if not value:
            raise ValueError("Phone number is required")
        if not PHONE_PATTERN.match(value):
            raise ValueError(
                "Please enter a valid phone number (digits, spaces, +, -, (, ) only)"
            )
        if len(value) < 10:
            raise ValueError("Phone number must be at least 10 characters")
        return value

    @field_validator("country")
    @classmethod
    def validate_country(cls, value: str) -> str:
        if not value:
            raise ValueError("Country is required")
        if value not in COUNTRIES:
            raise ValueError("Please select a valid country")
        return value

    @field_validator("special_requests")
    @classmethod
    def validate_special_requests(cls, value: str | None) -> str | None:
        if not value:
            return None
        if len(value) > 500:
            raise ValueError("Special requests must be less than 500 characters")
        return value

    @field_validator("arrival_time")
    @classmethod
    def empty_arrival_time(cls, value: str | None) -> str | None:
        return value or None
