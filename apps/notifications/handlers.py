"""
Notification Event Handlers

Turn committed reservation events into queued e-mail tasks. Queueing
failures are logged and dropped: a notification never affects the
booking or payment that triggered it.
"""

import logging

from shared.application.message_bus import message_bus
from apps.reservations.domain.events import (
    ParticipantInvited,
    PaymentRecorded,
    ReservationConfirmed,
    ReservationCreated,
)

from . import tasks

logger = logging.getLogger(__name__)


def _enqueue(task, *args):
    try:
        task.delay(*args)
    except Exception as e:
        logger.error(f"Could not queue notification task {task.name}: {e}", exc_info=True)


def on_reservation_created(event: ReservationCreated):
    _enqueue(tasks.send_reservation_created, str(event.reservation_id))


def on_participant_invited(event: ParticipantInvited):
    share = str(event.share_amount) if event.share_amount is not None else None
    _enqueue(tasks.send_invitation, str(event.reservation_id), event.email, event.payment_required, share)


def on_payment_recorded(event: PaymentRecorded):
    _enqueue(
        tasks.send_payment_recorded,
        str(event.reservation_id),
        event.payer_id,
        str(event.amount_paid),
        event.fully_confirmed,
        event.pending_count,
    )


def on_reservation_confirmed(event: ReservationConfirmed):
    _enqueue(tasks.send_reservation_confirmed, str(event.reservation_id))


def register_handlers(bus=None):
    bus = bus or message_bus
    bus.register_event_handler(ReservationCreated, on_reservation_created)
    bus.register_event_handler(ParticipantInvited, on_participant_invited)
    bus.register_event_handler(PaymentRecorded, on_payment_recorded)
    bus.register_event_handler(ReservationConfirmed, on_reservation_confirmed)
    logger.debug("Notification event handlers registered")
