"""Reservation repository: maps the Reservation aggregate to ORM rows and back."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from uuid import UUID

from django.contrib.auth import get_user_model  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from shared.domain.errors import ConflictError, NotFoundError
from shared.domain.value_objects import Money
from shared.infrastructure.locking import lock_for_update

from .domain.entities import (
    Participant,
    PendingParticipant,
    RegisteredParticipant,
    Reservation,
    ReservationStatus,
)
from .models import Reservation as ReservationModel
from .models import ReservationParticipant

logger = logging.getLogger(__name__)


class ReservationRepository(ABC):
    """Interface for reservation persistence operations."""

    @abstractmethod
    def get_by_id(self, reservation_id: UUID, lock: bool = False) -> Reservation:
        """Load a reservation, NotFoundError if it does not exist."""
        ...

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        ...

    @abstractmethod
    def delete(self, reservation_id: UUID) -> None:
        ...

    @abstractmethod
    def reference_exists(self, booking_reference: str) -> bool:
        ...

    @abstractmethod
    def find_ids_with_pending_email(self, email: str) -> List[UUID]:
        """Reservations holding an e-mail placeholder for `email` (case-insensitive)."""
        ...


class DjangoReservationRepository(ReservationRepository):
    """Database-backed reservation repository using the Django ORM."""

    def get_by_id(self, reservation_id: UUID, lock: bool = False) -> Reservation:
        queryset = ReservationModel.objects.filter(pk=reservation_id)
        if lock:
            queryset = lock_for_update(queryset)
        try:
            model = queryset.get()
        except (ReservationModel.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Reservation {reservation_id} not found.")
        return self._to_domain(model)

    def save(self, reservation: Reservation) -> None:
        try:
            with transaction.atomic():
                model, created = ReservationModel.objects.update_or_create(
                    pk=reservation.id,
                    defaults={
                        "booking_reference": reservation.booking_reference,
                        "organizer_id": reservation.organizer_id,
                        "venue_id": reservation.venue_id,
                        "total_price": reservation.total_price.amount,
                        "currency": reservation.total_price.currency,
                        "is_split_payment": reservation.is_split_payment,
                        "status": reservation.status.value,
                    },
                )
                if created:
                    model.sessions.set(reservation.session_ids)
                self._sync_participants(model, reservation.participants)
                model.paid_participants.set(reservation.paid_participant_ids)
        except IntegrityError as exc:
            logger.warning(f"Integrity error saving reservation {reservation.id}: {exc}")
            raise ConflictError("Reservation conflicts with existing data (booking reference already used).")

    def delete(self, reservation_id: UUID) -> None:
        deleted, _ = ReservationModel.objects.filter(pk=reservation_id).delete()
        if not deleted:
            raise NotFoundError(f"Reservation {reservation_id} not found.")

    def reference_exists(self, booking_reference: str) -> bool:
        return ReservationModel.objects.filter(booking_reference=booking_reference).exists()

    def find_ids_with_pending_email(self, email: str) -> List[UUID]:
        return list(
            ReservationParticipant.objects.filter(user__isnull=True, email__iexact=email)
            .values_list("reservation_id", flat=True)
            .distinct()
        )

    def _sync_participants(self, model: ReservationModel, participants: Iterable[Participant]):
        # Participant lists are short; rewriting them keeps order and placeholder state exact.
        model.participants.all().delete()
        rows = []
        for position, participant in enumerate(participants):
            match participant:
                case RegisteredParticipant(user_id=user_id, email=email):
                    rows.append(ReservationParticipant(
                        reservation=model, user_id=user_id, email=email, position=position,
                    ))
                case PendingParticipant(email=email):
                    rows.append(ReservationParticipant(
                        reservation=model, user=None, email=email, position=position,
                    ))
        ReservationParticipant.objects.bulk_create(rows)

    def _to_domain(self, model: ReservationModel) -> Reservation:
        participants: List[Participant] = []
        for row in model.participants.all():
            if row.user_id is None:
                participants.append(PendingParticipant(email=row.email))
            else:
                participants.append(RegisteredParticipant(user_id=row.user_id, email=row.email))

        return Reservation(
            id=model.pk,
            created_at=model.created_at,
            updated_at=model.updated_at,
            booking_reference=model.booking_reference,
            organizer_id=model.organizer_id,
            venue_id=model.venue_id,
            session_ids=tuple(model.sessions.order_by("date", "start_time").values_list("pk", flat=True)),
            total_price=Money(model.total_price, model.currency),
            participants=participants,
            is_split_payment=model.is_split_payment,
            paid_participant_ids=set(model.paid_participants.values_list("pk", flat=True)),
            status=ReservationStatus(model.status),
        )


class DjangoUserDirectory:
    """Read-only lookups against the auth user table."""

    @property
    def User(self):
        return get_user_model()

    def find_id_by_email(self, email: str) -> Optional[int]:
        return (
            self.User.objects.filter(email__iexact=email.strip())
            .order_by("pk")
            .values_list("pk", flat=True)
            .first()
        )

    def get_email(self, user_id: int) -> str:
        return self.User.objects.filter(pk=user_id).values_list("email", flat=True).first() or ""

    def missing_ids(self, user_ids: Iterable[int]) -> List[int]:
        user_ids = list(user_ids)
        existing = set(self.User.objects.filter(pk__in=user_ids).values_list("pk", flat=True))
        return [user_id for user_id in user_ids if user_id not in existing]


reservation_repository = DjangoReservationRepository()
user_directory = DjangoUserDirectory()
