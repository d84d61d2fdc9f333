"""
Reservation Command Handlers

These are the use cases for the reservation domain.
They orchestrate domain operations within transactions.

Commands:
- CreateReservationCommand: Claim sessions and create a pending reservation
- RecordPaymentCommand: Mark one payer as paid, confirming when everyone has
- UpdateReservationCommand: Change payment mode or invite more players
- SetReservationStatusCommand: Administrative status override
- DeleteReservationCommand: Remove a reservation
- ResolveParticipantCommand: Upgrade e-mail placeholders after registration
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from uuid import UUID
import logging
import secrets
import string

from django.conf import settings

from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import NotFoundError, ValidationError
from apps.reservations.domain.entities import (
    Participant,
    PaymentOutcome,
    PendingParticipant,
    RegisteredParticipant,
    Reservation,
    ReservationStatus,
)
from apps.reservations.domain.events import ReservationCreated
from apps.reservations.domain.pricing import compute_total

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8

RELEASE_NEVER = 'never'
RELEASE_ON_DELETE = 'on_delete'
RELEASE_ON_DELETE_OR_CANCEL = 'on_delete_or_cancel'


def generate_booking_reference() -> str:
    """Short, uppercase, URL-safe code such as GT-7K2M9QXA"""
    prefix = getattr(settings, 'BOOKING_REFERENCE_PREFIX', 'GT-')
    code = ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
    return f"{prefix}{code}"


def release_policy() -> str:
    return getattr(settings, 'RESERVATION_SESSION_RELEASE_POLICY', RELEASE_NEVER)


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to create a new reservation

    This is the primary entry point for booking sessions.
    """
    organizer_id: int
    venue_id: UUID
    session_ids: Sequence[UUID]
    invitee_emails: Sequence[str] = field(default_factory=list)
    participant_ids: Sequence[int] = field(default_factory=list)
    is_split_payment: bool = False


@dataclass
class RecordPaymentCommand:
    """Command to record a confirmed payment for one payer"""
    reservation_id: UUID
    payer_id: int


@dataclass
class UpdateReservationCommand:
    """Command to patch the mutable fields of a reservation"""
    reservation_id: UUID
    is_split_payment: Optional[bool] = None
    invitee_emails: Sequence[str] = field(default_factory=list)


@dataclass
class SetReservationStatusCommand:
    """Command to override the status (administrators only)"""
    reservation_id: UUID
    status: ReservationStatus


@dataclass
class DeleteReservationCommand:
    """Command to delete a reservation"""
    reservation_id: UUID


@dataclass
class ResolveParticipantCommand:
    """Command to turn e-mail placeholders into a registered user"""
    email: str
    user_id: int


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Strategy:
    1. Start database transaction (atomic)
    2. Load sessions and check they belong to the venue
    3. Compute the total from the session prices
    4. Resolve invitees to users where an account exists
    5. Claim the sessions (all-or-nothing, row locks + conditional UPDATE)
    6. Build the Reservation aggregate and its events
    7. Save, commit, then publish events (notifications run after commit)

    Any failure rolls back the claim, so no session stays booked without a reservation.
    """

    def __init__(self, reservation_repo, session_store, user_directory):
        self.reservation_repo = reservation_repo
        self.session_store = session_store
        self.user_directory = user_directory

    def handle(self, command: CreateReservationCommand) -> Reservation:
        logger.info(
            f"Creating reservation for organizer {command.organizer_id}, "
            f"venue {command.venue_id}, {len(command.session_ids)} session(s)"
        )

        if not command.session_ids:
            raise ValidationError("At least one session is required.")

        currency = getattr(settings, 'PAYMENT_CURRENCY', 'EUR')

        with DjangoUnitOfWork() as uow:
            if not self.session_store.venue_exists(command.venue_id):
                raise NotFoundError(f"Venue {command.venue_id} not found.")

            sessions = self.session_store.get_many(command.session_ids)

            foreign = [str(session.pk) for session in sessions if session.venue_id != command.venue_id]
            if foreign:
                raise ValidationError(
                    f"Session(s) {', '.join(foreign)} do not belong to venue {command.venue_id}."
                )

            total_price = compute_total(sessions, currency)
            if total_price.amount <= 0:
                raise ValidationError("Reservation total must be greater than zero.")

            participants = self._resolve_participants(command)

            claimed = self.session_store.claim([session.pk for session in sessions])

            reservation = Reservation(
                booking_reference=self._generate_reference(),
                organizer_id=command.organizer_id,
                venue_id=command.venue_id,
                session_ids=tuple(session.pk for session in claimed),
                total_price=total_price,
                is_split_payment=command.is_split_payment,
            )

            reservation.add_event(ReservationCreated(
                aggregate_id=reservation.id,
                reservation_id=reservation.id,
                booking_reference=reservation.booking_reference,
                organizer_id=reservation.organizer_id,
                is_split_payment=reservation.is_split_payment,
                total_price=total_price.amount,
                currency=total_price.currency,
            ))
            reservation.invite(participants)

            uow.collect_events(reservation)
            self.reservation_repo.save(reservation)
            # Events: ReservationCreated, ParticipantInvited (per invitee)

        logger.info(
            f"Reservation created successfully: {reservation.booking_reference} "
            f"(ID: {reservation.id}, total {total_price.amount} {total_price.currency})"
        )
        return reservation

    def _resolve_participants(self, command: CreateReservationCommand) -> List[Participant]:
        participants: List[Participant] = []

        if command.participant_ids:
            missing = self.user_directory.missing_ids(command.participant_ids)
            if missing:
                raise NotFoundError(f"User(s) not found: {', '.join(str(i) for i in missing)}")
            for user_id in command.participant_ids:
                participants.append(RegisteredParticipant(
                    user_id=user_id,
                    email=self.user_directory.get_email(user_id),
                ))

        participants.extend(resolve_invitees(command.invitee_emails, self.user_directory))
        return participants

    def _generate_reference(self) -> str:
        # Advisory only: the unique constraint on booking_reference is authoritative.
        for _ in range(5):
            reference = generate_booking_reference()
            if not self.reservation_repo.reference_exists(reference):
                return reference
        return generate_booking_reference()


def resolve_invitees(emails: Sequence[str], user_directory) -> List[Participant]:
    """Registered participant when an account has this e-mail, placeholder otherwise"""
    participants: List[Participant] = []
    for raw_email in emails:
        email = (raw_email or '').strip()
        if not email:
            continue
        user_id = user_directory.find_id_by_email(email)
        if user_id is None:
            participants.append(PendingParticipant(email=email.lower()))
        else:
            participants.append(RegisteredParticipant(user_id=user_id, email=email))
    return participants


class RecordPaymentHandler:
    """
    Handler for recording a payment

    The reservation row is locked for the read-modify-write so that two
    payers confirming at the same time cannot both miss the final flip.
    """

    def __init__(self, reservation_repo):
        self.reservation_repo = reservation_repo

    def handle(self, command: RecordPaymentCommand) -> PaymentOutcome:
        logger.info(f"Recording payment of user {command.payer_id} for reservation {command.reservation_id}")

        with DjangoUnitOfWork() as uow:
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)

            outcome = reservation.record_payment(command.payer_id)

            if outcome.newly_paid or outcome.became_confirmed:
                uow.collect_events(reservation)
                self.reservation_repo.save(reservation)
                # Events: PaymentRecorded, ReservationConfirmed (on the last payer)

        if not outcome.newly_paid:
            logger.info(
                f"Payment of user {command.payer_id} for {reservation.booking_reference} "
                f"was already recorded"
            )
        elif outcome.became_confirmed:
            logger.info(f"Reservation {reservation.booking_reference} fully paid and confirmed")
        else:
            logger.info(
                f"Payment recorded for {reservation.booking_reference}, "
                f"{outcome.pending_count} payer(s) pending"
            )
        return outcome


class UpdateReservationHandler:
    """Handler for patching payment mode and invitees"""

    def __init__(self, reservation_repo, user_directory):
        self.reservation_repo = reservation_repo
        self.user_directory = user_directory

    def handle(self, command: UpdateReservationCommand) -> Reservation:
        logger.info(f"Updating reservation {command.reservation_id}")

        with DjangoUnitOfWork() as uow:
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)

            if command.is_split_payment is not None:
                reservation.change_split_mode(command.is_split_payment)

            if command.invitee_emails:
                reservation.invite(resolve_invitees(command.invitee_emails, self.user_directory))

            uow.collect_events(reservation)
            self.reservation_repo.save(reservation)

        logger.info(f"Reservation {reservation.booking_reference} updated")
        return reservation


class SetReservationStatusHandler:
    """Handler for the administrative status override"""

    def __init__(self, reservation_repo, session_store):
        self.reservation_repo = reservation_repo
        self.session_store = session_store

    def handle(self, command: SetReservationStatusCommand) -> Reservation:
        logger.info(f"Setting status of reservation {command.reservation_id} to {command.status.value}")

        with DjangoUnitOfWork() as uow:
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)
            previous = reservation.status

            reservation.change_status(command.status)

            if (
                command.status == ReservationStatus.CANCELLED
                and previous != ReservationStatus.CANCELLED
                and release_policy() == RELEASE_ON_DELETE_OR_CANCEL
            ):
                self.session_store.release(reservation.session_ids)

            uow.collect_events(reservation)
            self.reservation_repo.save(reservation)
            # Event: ReservationStatusChanged

        logger.info(f"Reservation {reservation.booking_reference} status: {previous.value} -> {command.status.value}")
        return reservation


class DeleteReservationHandler:
    """Handler for deleting a reservation"""

    def __init__(self, reservation_repo, session_store):
        self.reservation_repo = reservation_repo
        self.session_store = session_store

    def handle(self, command: DeleteReservationCommand):
        logger.info(f"Deleting reservation {command.reservation_id}")

        with DjangoUnitOfWork():
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)

            if release_policy() in (RELEASE_ON_DELETE, RELEASE_ON_DELETE_OR_CANCEL):
                self.session_store.release(reservation.session_ids)

            self.reservation_repo.delete(reservation.id)

        logger.info(f"Reservation {reservation.booking_reference} deleted")


class ResolveParticipantHandler:
    """
    Handler for upgrading e-mail placeholders once their owner registers

    Idempotent: a second run finds no placeholder and touches nothing.
    Returns the number of reservations changed.
    """

    def __init__(self, reservation_repo):
        self.reservation_repo = reservation_repo

    def handle(self, command: ResolveParticipantCommand) -> int:
        email = (command.email or '').strip()
        if not email:
            return 0

        touched = 0
        with DjangoUnitOfWork():
            for reservation_id in self.reservation_repo.find_ids_with_pending_email(email):
                reservation = self.reservation_repo.get_by_id(reservation_id, lock=True)
                if reservation.resolve_participant(email, command.user_id):
                    self.reservation_repo.save(reservation)
                    touched += 1

        if touched:
            logger.info(f"Resolved placeholder {email} to user {command.user_id} in {touched} reservation(s)")
        return touched

