"""Builders for test data."""

from datetime import date
from decimal import Decimal

from booking_core.domain.entities.pricing import PricingQuote
from booking_core.domain.value_objects.money import Money

VALID_GUEST = {
    "first_name": "Ana",
    "last_name": "Lee",
    "email": "ana.lee@example.com",
    "phone": "+1 555 123 4567",
    "country": "United States",
}


def make_quote(
    total: str = "450.00",
    room_id: str = "deluxe-1",
    hotel_id: str = "42",
    currency: str = "USD",
    check_in: date = date(2024, 6, 1),
    check_out: date = date(2024, 6, 4),
) -> PricingQuote:
    amount = Money(Decimal(total), currency)
    return PricingQuote(
        hotel_id=hotel_id,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        subtotal=amount,
        taxes=Money.zero(currency),
        total=amount,
    )
