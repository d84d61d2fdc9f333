"""
Unit of Work

Wraps one use case in a database transaction. Events raised by the
aggregates touched inside the block are held back and handed to the
message bus only once the outermost transaction has committed, so a
rolled back claim or payment never sends an e-mail.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Transaction boundary for a command handler

    Usage:
        with DjangoUnitOfWork() as uow:
            reservation = reservation_repo.get_by_id(reservation_id, lock=True)
            reservation.record_payment(payer_id)
            uow.collect_events(reservation)
            reservation_repo.save(reservation)
        # PaymentRecorded / ReservationConfirmed go out after COMMIT

    Nested units of work share the outer transaction: their events are
    queued with ``on_commit`` and fire together when the outer block commits.
    """

    def __init__(self, bus=None):
        self._bus = bus
        self._pending: List[DomainEvent] = []
        self._atomic = transaction.atomic()

    def __enter__(self):
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._schedule_publication()
        elif self._pending:
            logger.warning(
                f"{exc_type.__name__} inside unit of work, "
                f"dropping {len(self._pending)} unpublished event(s)"
            )
            self._pending = []
        return self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def collect_events(self, aggregate):
        """Take over the events recorded by `aggregate` since its last collection."""
        events = aggregate.events
        if not events:
            return
        aggregate.clear_events()
        self._pending.extend(events)
        logger.debug(
            f"Collected {len(events)} event(s) from "
            f"{aggregate.__class__.__name__} {aggregate.id}"
        )

    def _schedule_publication(self):
        if not self._pending:
            return
        events, self._pending = self._pending, []
        transaction.on_commit(lambda: self._publish(events))

    def _publish(self, events: List[DomainEvent]):
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        logger.info(f"Publishing {len(events)} domain event(s) after commit")
        try:
            bus.publish_events(events)
        except Exception as e:
            # The transaction is already committed; only side effects are lost.
            logger.error(f"Error publishing events: {e}", exc_info=True)
