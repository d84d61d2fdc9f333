"""
Reservation Domain Entities

Core business entities for the reservation domain:
- Reservation: Aggregate root tying organizer, venue, sessions and payers together
- ReservationStatus: FSM states for the reservation lifecycle
- RegisteredParticipant / PendingParticipant: the two kinds of invited player
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Set, Tuple, Union
from uuid import UUID

from shared.domain.base import Aggregate
from shared.domain.errors import ConflictError, ValidationError
from shared.domain.value_objects import Money

from apps.reservations.domain.events import (
    ParticipantInvited,
    PaymentRecorded,
    ReservationConfirmed,
    ReservationStatusChanged,
)
from apps.reservations.domain.pricing import split_shares


class ReservationStatus(Enum):
    """
    Reservation Status Finite State Machine

    Automatic transitions:
    - PENDING -> CONFIRMED (every required payer paid)
    - PENDING -> CANCELLED (explicit action)

    Administrators may override the status to any value from any state.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class RegisteredParticipant:
    """An invited player with an account; can be billed."""
    user_id: int
    email: str = ''


@dataclass(frozen=True)
class PendingParticipant:
    """An invited player known only by e-mail; never billed, never blocks confirmation."""
    email: str


Participant = Union[RegisteredParticipant, PendingParticipant]


@dataclass(frozen=True)
class PaymentOutcome:
    """Result of recording one payer's payment."""
    newly_paid: bool
    fully_confirmed: bool
    became_confirmed: bool
    pending_count: int
    amount_paid: Money


@dataclass(kw_only=True, eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    Key invariants:
    - At least one session, no duplicates
    - total_price is fixed at creation
    - paid_participant_ids only ever contains required payers
    - CONFIRMED is reached automatically once every required payer has paid,
      and record_payment never moves it back to PENDING
    """

    booking_reference: str
    organizer_id: int
    venue_id: UUID
    session_ids: Tuple[UUID, ...]
    total_price: Money
    participants: List[Participant] = field(default_factory=list)
    is_split_payment: bool = False
    paid_participant_ids: Set[int] = field(default_factory=set)
    status: ReservationStatus = ReservationStatus.PENDING

    def __post_init__(self):
        if not self.session_ids:
            raise ValidationError("A reservation needs at least one session.")
        if len(set(self.session_ids)) != len(self.session_ids):
            raise ValidationError("A session cannot be reserved twice in the same reservation.")
        self.session_ids = tuple(self.session_ids)

    # ----- participants -----

    @property
    def registered_participant_ids(self) -> List[int]:
        ids: List[int] = []
        for participant in self.participants:
            match participant:
                case RegisteredParticipant(user_id=user_id):
                    if user_id not in ids:
                        ids.append(user_id)
                case PendingParticipant():
                    continue
        return ids

    @property
    def pending_emails(self) -> List[str]:
        emails: List[str] = []
        for participant in self.participants:
            match participant:
                case PendingParticipant(email=email):
                    emails.append(email)
                case RegisteredParticipant():
                    continue
        return emails

    @property
    def participant_count(self) -> int:
        """Organizer plus every invited player, registered or not"""
        return 1 + len(self.participants)

    @property
    def required_payer_ids(self) -> List[int]:
        """
        Who has to confirm before the reservation is confirmed

        The organizer and every registered participant, whatever the payment
        mode. E-mail placeholders never count until they resolve.
        """
        return [self.organizer_id] + [
            user_id for user_id in self.registered_participant_ids
            if user_id != self.organizer_id
        ]

    @property
    def billed_payer_ids(self) -> List[int]:
        """Who gets charged: the organizer alone under full payment"""
        if not self.is_split_payment:
            return [self.organizer_id]
        return self.required_payer_ids

    def involves(self, user_id: int) -> bool:
        return user_id == self.organizer_id or user_id in self.registered_participant_ids

    def invite(self, participants: Iterable[Participant]) -> List[Participant]:
        """
        Add invited players, skipping the organizer and duplicates

        Returns the participants actually added.
        Events: ParticipantInvited (one per added participant)
        """
        if self.status != ReservationStatus.PENDING:
            raise ConflictError(
                f"Cannot invite players to a {self.status.value} reservation."
            )

        added: List[Participant] = []
        for participant in participants:
            if self._already_present(participant, added):
                continue
            added.append(participant)

        if added and self.is_split_payment and self.paid_participant_ids:
            # Shares already charged would no longer add up.
            raise ConflictError(
                "Cannot invite players to a split reservation once payments were recorded."
            )
        self.participants.extend(added)

        share = self.share_for_participant() if self.is_split_payment else None
        for participant in added:
            match participant:
                case RegisteredParticipant(user_id=user_id, email=email):
                    invited_user_id = user_id
                case PendingParticipant(email=email):
                    invited_user_id = None
            self.add_event(ParticipantInvited(
                aggregate_id=self.id,
                reservation_id=self.id,
                email=email,
                user_id=invited_user_id,
                payment_required=self.is_split_payment,
                share_amount=share.amount if share else None,
            ))
        return added

    def resolve_participant(self, email: str, user_id: int) -> bool:
        """
        Turn the PendingParticipant(email) placeholder into RegisteredParticipant(user_id)

        If the user already takes part, the placeholder is dropped instead.
        Returns True if anything changed.
        """
        normalized = email.strip().lower()
        changed = False
        already_in = self.involves(user_id)
        resolved: List[Participant] = []
        for participant in self.participants:
            match participant:
                case PendingParticipant(email=pending_email) if pending_email.lower() == normalized:
                    changed = True
                    if not already_in:
                        resolved.append(RegisteredParticipant(user_id=user_id, email=pending_email))
                        already_in = True
                case _:
                    resolved.append(participant)
        self.participants = resolved
        return changed

    def _already_present(self, participant: Participant, pending: Iterable[Participant] = ()) -> bool:
        pool = list(self.participants) + list(pending)
        match participant:
            case RegisteredParticipant(user_id=user_id):
                return user_id == self.organizer_id or any(
                    isinstance(other, RegisteredParticipant) and other.user_id == user_id
                    for other in pool
                )
            case PendingParticipant(email=email):
                return any(
                    isinstance(other, PendingParticipant) and other.email.lower() == email.lower()
                    for other in pool
                )
        return False

    # ----- pricing -----

    def shares(self) -> List[Money]:
        """Per-person shares, organizer first (split payment only)"""
        return split_shares(self.total_price, self.participant_count)

    def share_for_participant(self) -> Money:
        return self.shares()[-1]

    def amount_due(self, payer_id: int) -> Money:
        """What `payer_id` owes: the full price or nothing under full payment, a share otherwise"""
        if not self.is_split_payment:
            if payer_id == self.organizer_id:
                return self.total_price
            return Money.zero(self.total_price.currency)
        shares = self.shares()
        return shares[0] if payer_id == self.organizer_id else shares[-1]

    # ----- payments -----

    def is_fully_paid(self) -> bool:
        return all(payer_id in self.paid_participant_ids for payer_id in self.required_payer_ids)

    @property
    def pending_payer_ids(self) -> List[int]:
        return [payer_id for payer_id in self.required_payer_ids if payer_id not in self.paid_participant_ids]

    def record_payment(self, payer_id: int) -> PaymentOutcome:
        """
        Record that `payer_id` paid (idempotent)

        Any registered participant may confirm, whatever the payment mode.
        Flips PENDING -> CONFIRMED once the organizer and every registered
        participant confirmed.
        Events: PaymentRecorded (first time only), ReservationConfirmed (on the flip)
        """
        if self.status == ReservationStatus.CANCELLED:
            raise ConflictError("Cannot record a payment for a cancelled reservation.")
        if payer_id not in self.required_payer_ids:
            raise ValidationError("This user is not a payer of this reservation.")

        newly_paid = payer_id not in self.paid_participant_ids
        if newly_paid:
            self.paid_participant_ids.add(payer_id)

        became_confirmed = False
        if self.status == ReservationStatus.PENDING and self.is_fully_paid():
            self.status = ReservationStatus.CONFIRMED
            became_confirmed = True

        outcome = PaymentOutcome(
            newly_paid=newly_paid,
            fully_confirmed=self.status == ReservationStatus.CONFIRMED,
            became_confirmed=became_confirmed,
            pending_count=len(self.pending_payer_ids),
            amount_paid=self.amount_due(payer_id),
        )

        if newly_paid:
            self.add_event(PaymentRecorded(
                aggregate_id=self.id,
                reservation_id=self.id,
                payer_id=payer_id,
                amount_paid=outcome.amount_paid.amount,
                fully_confirmed=outcome.fully_confirmed,
                pending_count=outcome.pending_count,
            ))
        if became_confirmed:
            self.add_event(ReservationConfirmed(
                aggregate_id=self.id,
                reservation_id=self.id,
                booking_reference=self.booking_reference,
            ))
        return outcome

    # ----- administration -----

    def change_status(self, new_status: ReservationStatus):
        """
        Administrative override, allowed from any state

        Events: ReservationStatusChanged
        """
        if new_status == self.status:
            return
        old_status = self.status
        self.status = new_status
        self.add_event(ReservationStatusChanged(
            aggregate_id=self.id,
            reservation_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            session_ids=self.session_ids,
        ))

    def change_split_mode(self, is_split_payment: bool):
        if is_split_payment == self.is_split_payment:
            return
        if self.paid_participant_ids:
            raise ConflictError("Cannot change the payment mode once payments were recorded.")
        if self.status != ReservationStatus.PENDING:
            raise ConflictError(f"Cannot change the payment mode of a {self.status.value} reservation.")
        self.is_split_payment = is_split_payment

    def __str__(self):
        return f"Reservation {self.booking_reference} ({self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, booking_reference={self.booking_reference}, "
            f"status={self.status.value}, sessions={len(self.session_ids)})"
        )
