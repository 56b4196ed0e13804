"""Money value object with exact decimal semantics.

Amounts are kept as canonical decimal text so no binary float ever touches a
price. Arithmetic happens on ``decimal.Decimal``; rounding is left to display.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from eyecart.domain import eyecart
from eyecart.settings import DEFAULT_CURRENCY

ZERO = Decimal("0")

# Currencies without a minor unit
_ZERO_DECIMAL_CURRENCIES = frozenset({"VND", "JPY", "KRW"})


def to_decimal(value) -> Decimal:
    """Coerce str/int/Decimal (and floats via their text form) into a Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid monetary amount: {value!r}") from None


def format_amount(value) -> str:
    """Canonical fixed-point text for an amount (never scientific notation)."""
    return format(to_decimal(value), "f")


def quantize_for_display(value, currency: str) -> Decimal:
    exponent = Decimal("1") if currency in _ZERO_DECIMAL_CURRENCIES else Decimal("0.01")
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


@eyecart.value_object
class Money:
    """A non-negative amount in a single currency."""

    amount: String(required=True, max_length=32)
    currency: String(max_length=3, default=DEFAULT_CURRENCY)

    @invariant.post
    def amount_must_be_a_non_negative_decimal(self):
        try:
            value = Decimal(self.amount)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError({"amount": [f"Invalid monetary amount: {self.amount!r}"]}) from None
        if not value.is_finite() or value < 0:
            raise ValidationError({"amount": ["Amount must be a finite, non-negative decimal"]})

    @invariant.post
    def currency_must_be_a_three_letter_code(self):
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValidationError({"currency": [f"Invalid currency code: {self.currency!r}"]})

    @classmethod
    def of(cls, amount, currency=DEFAULT_CURRENCY):
        return cls(amount=format_amount(amount), currency=currency)

    @classmethod
    def zero(cls, currency=DEFAULT_CURRENCY):
        return cls(amount="0", currency=currency)

    def to_decimal(self) -> Decimal:
        return Decimal(self.amount)

    def is_zero(self) -> bool:
        return self.to_decimal() == ZERO
