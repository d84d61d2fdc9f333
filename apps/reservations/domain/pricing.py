"""Pricing and bill-splitting rules. Pure functions, no I/O."""

from decimal import Decimal
from typing import Iterable, List

from shared.domain.errors import ValidationError
from shared.domain.value_objects import Money


def compute_total(sessions: Iterable, currency: str = 'EUR') -> Money:
    """Sum of the prices of the given sessions."""
    sessions = list(sessions)
    if not sessions:
        raise ValidationError("At least one session is required to compute a price.")

    total = Money.zero(currency)
    for session in sessions:
        total = total + Money(Decimal(str(session.price)), currency)
    return total.rounded()


def split_shares(total: Money, participant_count: int) -> List[Money]:
    """
    Per-person shares of `total`, organizer first.

    Shares are rounded to the cent; the rounding remainder goes to the
    organizer so that sum(shares) == total.
    """
    if participant_count < 1:
        raise ValidationError("Participant count must be at least 1.")
    return total.split(participant_count)


def compute_share(total: Money, participant_count: int) -> Money:
    """The share owed by each invited participant (the organizer may owe a few cents more)."""
    return split_shares(total, participant_count)[-1]
