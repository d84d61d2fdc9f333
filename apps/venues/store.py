"""Session store: lookup, creation and atomic claiming of bookable slots.

All status changes of a session go through this module. ``claim`` is the
single point of mutual exclusion in the booking flow: it flips every
requested slot from ``available`` to ``booked`` in one conditional UPDATE
inside a transaction, and aborts without touching anything if even one slot
is gone.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import date, time
from decimal import Decimal
from typing import Iterable, Sequence

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.errors import ConflictError, NotFoundError, ValidationError
from shared.domain.value_objects import TimeSlot
from shared.infrastructure.locking import lock_for_update

from .models import Session, Venue

logger = logging.getLogger(__name__)


def normalize_session_ids(session_ids: Iterable) -> list[uuid.UUID]:
    """Parse ids to UUIDs and drop duplicates, keeping the caller's order."""
    normalized: list[uuid.UUID] = []
    for raw in session_ids:
        try:
            value = raw if isinstance(raw, uuid.UUID) else uuid.UUID(str(raw))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid session id: {raw}")
        if value not in normalized:
            normalized.append(value)
    return normalized


class SessionStore(ABC):
    """Interface for session persistence operations."""

    @abstractmethod
    def find_available(
        self,
        venue_id=None,
        *,
        day: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = Session.Status.AVAILABLE,
    ) -> list[Session]:
        """Return sessions matching the filters, ordered by date and start time."""
        ...

    @abstractmethod
    def venue_exists(self, venue_id) -> bool:
        ...

    @abstractmethod
    def get_many(self, session_ids: Sequence) -> list[Session]:
        """Return sessions in the requested order, NotFoundError if any is missing."""
        ...

    @abstractmethod
    def claim(self, session_ids: Sequence) -> list[Session]:
        """Book every session or none of them."""
        ...

    @abstractmethod
    def release(self, session_ids: Sequence) -> int:
        """Return booked sessions to the available pool."""
        ...


class DjangoSessionStore(SessionStore):
    """Database-backed session store using the Django ORM."""

    def find_available(
        self,
        venue_id=None,
        *,
        day: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: str | None = Session.Status.AVAILABLE,
    ) -> list[Session]:
        queryset = Session.objects.select_related("venue")
        if venue_id is not None:
            queryset = queryset.filter(venue_id=venue_id)
        if day is not None:
            queryset = queryset.filter(date=day)
        if date_from is not None:
            queryset = queryset.filter(date__gte=date_from)
        if date_to is not None:
            queryset = queryset.filter(date__lte=date_to)
        if status:
            queryset = queryset.filter(status=status)
        return list(queryset.order_by("date", "start_time"))

    def venue_exists(self, venue_id) -> bool:
        return Venue.objects.filter(pk=venue_id).exists()

    def get_many(self, session_ids: Sequence) -> list[Session]:
        ids = normalize_session_ids(session_ids)
        if not ids:
            raise ValidationError("At least one session is required.")

        sessions = {session.pk: session for session in Session.objects.filter(pk__in=ids)}
        missing = [str(session_id) for session_id in ids if session_id not in sessions]
        if missing:
            raise NotFoundError(f"Session(s) not found: {', '.join(missing)}")
        return [sessions[session_id] for session_id in ids]

    def claim(self, session_ids: Sequence) -> list[Session]:
        """
        Atomically mark all sessions as booked.

        Raises:
            ValidationError: If no session id was given or an id is malformed.
            NotFoundError: If one or more sessions do not exist.
            ConflictError: If any session is not available. No session is modified.
        """
        ids = normalize_session_ids(session_ids)
        if not ids:
            raise ValidationError("At least one session is required.")

        with transaction.atomic():
            locked = list(lock_for_update(Session.objects.filter(pk__in=ids)))
            found = {session.pk for session in locked}
            missing = [str(session_id) for session_id in ids if session_id not in found]
            if missing:
                raise NotFoundError(f"Session(s) not found: {', '.join(missing)}")

            taken = [session for session in locked if session.status != Session.Status.AVAILABLE]
            if taken:
                raise ConflictError("One or more selected sessions are already booked.")

            # Conditional update: a concurrent claim that slipped past the lock
            # (databases without SELECT ... FOR UPDATE) shows up as a short count.
            updated = Session.objects.filter(
                pk__in=ids,
                status=Session.Status.AVAILABLE,
            ).update(status=Session.Status.BOOKED, updated_at=timezone.now())
            if updated != len(ids):
                raise ConflictError("One or more selected sessions are already booked.")

        logger.info(f"Claimed {len(ids)} session(s): {', '.join(str(i) for i in ids)}")
        for session in locked:
            session.status = Session.Status.BOOKED
        by_id = {session.pk: session for session in locked}
        return [by_id[session_id] for session_id in ids]

    def release(self, session_ids: Sequence) -> int:
        ids = normalize_session_ids(session_ids)
        if not ids:
            return 0
        released = Session.objects.filter(
            pk__in=ids,
            status=Session.Status.BOOKED,
        ).update(status=Session.Status.AVAILABLE, updated_at=timezone.now())
        logger.info(f"Released {released} session(s) back to available")
        return released

    def create_session(
        self,
        venue_id,
        day: date,
        start_time: time,
        end_time: time,
        price: Decimal,
    ) -> Session:
        """Create an available session, refusing overlaps on the same venue and day."""
        try:
            slot = TimeSlot(day, start_time, end_time)
        except ValueError as exc:
            raise ValidationError(str(exc))
        if price is None or Decimal(price) < 0:
            raise ValidationError("Price cannot be negative.")

        with transaction.atomic():
            venue = lock_for_update(Venue.objects.filter(pk=venue_id)).first()
            if venue is None:
                raise NotFoundError("Venue not found.")

            same_day = (
                Session.objects.filter(venue=venue, date=day)
                .exclude(status=Session.Status.CANCELED)
            )
            if any(existing.slot.overlaps_with(slot) for existing in same_day):
                raise ConflictError("Session overlaps with an existing one.")

            session = Session.objects.create(
                venue=venue,
                date=day,
                start_time=start_time,
                end_time=end_time,
                price=Decimal(price),
            )

        logger.info(f"Created session {session.pk} for venue {venue.pk}: {slot}")
        return session


session_store = DjangoSessionStore()
