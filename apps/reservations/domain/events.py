"""
Reservation Domain Events

Events that represent things that have happened in the reservation domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class ReservationCreated(DomainEvent):
    """
    Event: A new reservation was created and its sessions were claimed

    Triggers:
    - Send "reservation created" email to the organizer
    """
    reservation_id: UUID
    booking_reference: str
    organizer_id: int
    is_split_payment: bool
    total_price: Decimal
    currency: str


@dataclass(kw_only=True)
class ParticipantInvited(DomainEvent):
    """
    Event: A player was invited to a reservation

    `user_id` is None for players who have no account yet.

    Triggers:
    - Send invitation email (pay-your-share or fully covered)
    """
    reservation_id: UUID
    email: str
    user_id: int | None
    payment_required: bool
    share_amount: Decimal | None


@dataclass(kw_only=True)
class PaymentRecorded(DomainEvent):
    """
    Event: A payer's payment was recorded for the first time

    Triggers:
    - Send payment confirmation email to the payer
    """
    reservation_id: UUID
    payer_id: int
    amount_paid: Decimal
    fully_confirmed: bool
    pending_count: int


@dataclass(kw_only=True)
class ReservationConfirmed(DomainEvent):
    """
    Event: Every required payer has paid (PENDING -> CONFIRMED)

    Fired exactly once per reservation by the payment that completed it.

    Triggers:
    - Send "reservation confirmed" email to every registered participant
    """
    reservation_id: UUID
    booking_reference: str


@dataclass(kw_only=True)
class ReservationStatusChanged(DomainEvent):
    """Event: An administrator overrode the reservation status"""
    reservation_id: UUID
    old_status: str
    new_status: str
    session_ids: Tuple[UUID, ...] = ()


@dataclass(kw_only=True)
class UserRegistered(DomainEvent):
    """
    Event: A user account was created

    Triggers:
    - Replace e-mail placeholders in reservations with the new user id
    """
    user_id: int
    email: str
