"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- TimeSlot: Represents a [start, end) time window on a single day
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import List

SUPPORTED_CURRENCIES = ('EUR', 'USD', 'GBP', 'MAD', 'KZT')

CENT = Decimal('0.01')


@dataclass(frozen=True)
class Money:
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'EUR'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency.upper() not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")
        object.__setattr__(self, 'currency', self.currency.upper())

    @classmethod
    def zero(cls, currency: str = 'EUR') -> 'Money':
        return cls(Decimal('0'), currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def rounded(self) -> 'Money':
        """Round to the currency minor unit (2 decimal places)"""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def split(self, parts: int) -> List['Money']:
        """
        Split into `parts` shares that sum exactly to this amount.

        Every share is the amount divided evenly and rounded down to the
        minor unit; the leftover cents are carried by the first share.
        """
        if parts < 1:
            raise ValueError("Cannot split into fewer than one part")
        total = self.rounded().amount
        base = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
        remainder = total - base * parts
        shares = [Money(base, self.currency) for _ in range(parts)]
        shares[0] = Money(base + remainder, self.currency)
        return shares

    @property
    def minor_units(self) -> int:
        """Amount in cents, as payment providers expect it"""
        return int((self.rounded().amount * 100).to_integral_value())

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeSlot:
    """
    Time slot value object

    Represents a window from start_time (inclusive) to end_time (exclusive)
    on a given day. Used for pitch sessions and overlap checks.
    """
    day: date
    start_time: time
    end_time: time

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Start time ({self.start_time}) must be before end time ({self.end_time})"
            )

    def overlaps_with(self, other: 'TimeSlot') -> bool:
        """
        Check if this slot overlaps with another

        Slots on different days never overlap. End time is exclusive,
        so back-to-back slots (18:00-19:00, 19:00-20:00) do not overlap.
        """
        if not isinstance(other, TimeSlot):
            raise TypeError("Can only check overlap with another TimeSlot")
        if self.day != other.day:
            return False
        return self.start_time < other.end_time and self.end_time > other.start_time

    def __str__(self):
        return f"{self.day.isoformat()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def __repr__(self):
        return f"TimeSlot({self.day}, {self.start_time}, {self.end_time})"
