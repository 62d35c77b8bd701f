"""Injection detection and sanitizers for guest-supplied text."""

import re
from typing import Any, Mapping

INVALID_CHARACTERS_MESSAGE = "Invalid characters detected"

INJECTION_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
    re.compile(r"<object", re.IGNORECASE),
    re.compile(r"<embed", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
    re.compile(r"expression\(", re.IGNORECASE),
)

_TAG_RE = re.compile(r"<[^>]*>")
_SCRIPT_BLOCK_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"""on\w+\s*=\s*["'][^"']*["']""", re.IGNORECASE)
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_NAME_DISALLOWED_RE = re.compile(r"[^a-zA-Z\s\-']")
_PHONE_DISALLOWED_RE = re.compile(r"[^\d\s+\-()]")
_EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$")


def detect_injection(value: Any) -> bool:
    """True when a string matches any known script-injection pattern."""
    if not isinstance(value, str):
        return False
    return any(pattern.search(value) for pattern in INJECTION_PATTERNS)


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    sanitized = _SCRIPT_BLOCK_RE.sub("", value)
    sanitized = _TAG_RE.sub("", sanitized)
    sanitized = _EVENT_HANDLER_RE.sub("", sanitized)
    sanitized = _JS_PROTOCOL_RE.sub("", sanitized)
    return sanitized.strip()


def sanitize_name(value: Any) -> str:
    """Strips tags and non-name characters, then title-cases each word."""
    if not isinstance(value, str):
        return ""
    sanitized = _TAG_RE.sub("", value)
    sanitized = _NAME_DISALLOWED_RE.sub("", sanitized).strip()
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), sanitized)


def sanitize_email(value: Any) -> str:
    """Lower-cased address, or an empty string when it is not address-shaped."""
    if not isinstance(value, str):
        return ""
    sanitized = _TAG_RE.sub("", value.strip().lower())
    return sanitized if _EMAIL_RE.match(sanitized) else ""


def sanitize_phone(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    sanitized = _TAG_RE.sub("", value)
    return _PHONE_DISALLOWED_RE.sub("", sanitized).strip()


def sanitize_text(value: Any, max_length: int = 500) -> str:
    if not isinstance(value, str):
        return ""
    sanitized = _SCRIPT_BLOCK_RE.sub("", value)
    sanitized = _TAG_RE.sub("", sanitized).strip()
    return sanitized[:max_length]


def sanitize_guest_info(guest_info: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitized copy of a guest-info record, field by field."""
    arrival_time = guest_info.get("arrival_time")
    return {
        "first_name": sanitize_name(guest_info.get("first_name") or ""),
        "last_name": sanitize_name(guest_info.get("last_name") or ""),
        "email": sanitize_email(guest_info.get("email") or ""),
        "phone": sanitize_phone(guest_info.get("phone") or ""),
        "country": sanitize_string(guest_info.get("country") or ""),
        "special_requests": sanitize_text(guest_info.get("special_requests") or "", 500),
        "arrival_time": sanitize_string(arrival_time) if arrival_time else None,
    }
