"""Pricing quote derived from a committed room and date range."""

from dataclasses import dataclass, field
from datetime import date

from booking_core.domain.value_objects.money import Money


@dataclass(frozen=True)
class PriceLine:
    name: str
    amount: Money


@dataclass(frozen=True)
class PricingQuote:
    hotel_id: str
    room_id: str
    check_in: date
    check_out: date
    subtotal: Money
    taxes: Money
    total: Money
    fees: Money | None = None
    breakdown: tuple[PriceLine, ...] = field(default_factory=tuple)

    @property
    def currency(self) -> str:
        return self.total.currency_code

    @property
    def fingerprint(self) -> tuple[str, str, date, date, int, str]:
        """Identity of the quote; a payment intent is bound to it."""
        return (
            self.hotel_id,
            self.room_id,
            self.check_in,
            self.check_out,
            self.total.to_minor_units(),
            self.currency,
        )

    def applies_to(self, room_id: str | None, check_in: date | None, check_out: date | None) -> bool:
        return (
            self.room_id == room_id
            and self.check_in == check_in
            and self.check_out == check_out
        )
