"""Value Object Money - a monetary amount with its currency."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from booking_core.domain.errors import InvalidMoneyError


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary amount.

    Attributes:
        amount: Decimal amount (two decimal places).
        currency_code: ISO 4217 currency code (e.g. USD, EUR).
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        object.__setattr__(self, "currency_code", self.currency_code.upper())

        if len(self.currency_code) != 3:
            raise InvalidMoneyError(f"currency_code must be 3 characters: {self.currency_code}")

        if self.amount < 0:
            raise InvalidMoneyError(f"amount cannot be negative: {self.amount}")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money and {type(other)}")
        if self.currency_code != other.currency_code:
            raise InvalidMoneyError(
                f"Cannot add amounts in different currencies: "
                f"{self.currency_code} vs {other.currency_code}"
            )
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def __mul__(self, factor: int) -> "Money":
        return Money(amount=self.amount * factor, currency_code=self.currency_code)

    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    @classmethod
    def zero(cls, currency_code: str = "USD") -> "Money":
        return cls(amount=Decimal("0"), currency_code=currency_code)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency_code: str) -> "Money":
        """Build from the processor's integer representation (cents)."""
        return cls(amount=Decimal(minor_units) / 100, currency_code=currency_code)

    def to_minor_units(self) -> int:
        """Integer minor units, rounded half-up (450.00 USD -> 45000)."""
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
