"""Booking request and confirmation records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class BookingRequest:
    hotel_id: str
    room_id: str
    check_in: date
    check_out: date
    guest_info: dict[str, Any]
    payment_confirmation_id: str
    user_id: str | None = None
    special_requests: str | None = None


@dataclass(frozen=True)
class BookingConfirmation:
    booking_id: str
    request: BookingRequest
    status: str = "confirmed"
    reference_number: str | None = None
    created_at: datetime | None = None
    payload: dict[str, Any] = field(default_factory=dict)
