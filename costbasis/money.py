# coding: utf-8
"""
Exact money arithmetic.

Money is a Decimal amount tagged with an ISO 4217 currency code.  Amounts in
different currencies never mix: adding, subtracting or ordering Money of two
currencies raises CurrencyMismatch.  The only way across currencies is an
explicit Money.convert() at a stated exchange rate.

Division by zero yields zero, not an error.  This is a deliberate policy for
ratios over empty aggregates (e.g. average cost of zero shares); callers must not
treat a zero quotient as a signal that something went wrong.

Nothing here rounds.  Rounding belongs to presentation (cf. Money.rounded() and
utils.round_decimal()) and happens once, after all aggregation is done.
"""

__all__ = [
    "USD",
    "GBP",
    "CurrencyMismatch",
    "safe_divide",
    "validate_currency",
    "to_decimal",
    "Money",
]


# stdlib imports
from decimal import Decimal
from dataclasses import dataclass
import functools
from typing import Union


# 3rd party imports
from ofxtools.models.i18n import CURRENCY_CODES


# local imports
from costbasis import utils


USD = "USD"
GBP = "GBP"


Number = Union[int, Decimal]


class CurrencyMismatch(ValueError):
    """Exception raised by arithmetic or ordering between different currencies.

    Args:
        left: currency code of the left operand.
        right: currency code of the right operand.
    """

    def __init__(self, left: str, right: str) -> None:
        self.left = left
        self.right = right
        super(CurrencyMismatch, self).__init__(
            f"Can't combine {left} with {right} without explicit conversion"
        )


def safe_divide(dividend: Number, divisor: Number) -> Decimal:
    """Divide, returning zero when the divisor is zero.

    Reserved for ratios whose denominator can legitimately be zero, such as average
    cost over zero shares.  A zero result does not indicate an error.
    """
    if divisor == 0:
        return Decimal(0)
    return Decimal(dividend) / Decimal(divisor)


def validate_currency(code: str) -> str:
    """Return `code` if it is an ISO 4217 currency code, else raise ValueError."""
    if code not in CURRENCY_CODES:
        raise ValueError(f"'{code}' is not an ISO 4217 currency code")
    return code


def to_decimal(value) -> Decimal:
    if isinstance(value, float):
        raise TypeError(
            f"Money amounts must be exact; got float {value!r} (use Decimal or str)"
        )
    return Decimal(value)


@functools.total_ordering
@dataclass(frozen=True)
class Money:
    """Currency-tagged exact decimal amount.

    Attributes:
        amount: Decimal money amount (int and str are converted; float is rejected).
        currency: ISO 4217 currency code.
    """

    amount: Decimal
    currency: str = USD

    def __post_init__(self):
        validate_currency(self.currency)
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str = USD) -> "Money":
        return cls(Decimal(0), currency)

    def _check(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatch(self.currency, other.currency)

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __radd__(self, other):
        # Lets sum() start from its default int 0.
        if isinstance(other, int) and other == 0:
            return self
        return NotImplemented

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self):
        return Money(-self.amount, self.currency)

    def __abs__(self):
        return Money(abs(self.amount), self.currency)

    def __mul__(self, other):
        if isinstance(other, (Money, float)):
            return NotImplemented
        return Money(self.amount * Decimal(other), self.currency)

    __rmul__ = __mul__

    def __truediv__(self, other):
        """Zero-safe: Money / 0 is zero Money of the same currency."""
        if isinstance(other, (Money, float)):
            return NotImplemented
        return Money(safe_divide(self.amount, other), self.currency)

    def __lt__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount < other.amount

    def convert(self, rate: Number, currency: str) -> "Money":
        """Translate into another currency.

        Args:
            rate: units of `currency` per unit of this Money's currency.
            currency: destination currency code.
        """
        return Money(self.amount * to_decimal(rate), currency)

    def rounded(self, places: int = 2) -> "Money":
        """Round for display.  Never use the result in further aggregation."""
        return Money(utils.round_decimal(self.amount, power=-places), self.currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def __str__(self):
        return f"{self.amount} {self.currency}"
