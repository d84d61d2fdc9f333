"""
Reservation Event Handlers

Reactions of the reservation domain to events raised elsewhere.
"""

import logging

from shared.application.message_bus import message_bus
from apps.reservations.application.command_handlers import (
    ResolveParticipantCommand,
    ResolveParticipantHandler,
)
from apps.reservations.domain.events import UserRegistered

logger = logging.getLogger(__name__)


def handle_user_registered(event: UserRegistered):
    """Replace e-mail placeholders with the freshly registered user"""
    from apps.reservations.repositories import reservation_repository

    if not event.email:
        return

    ResolveParticipantHandler(reservation_repository).handle(
        ResolveParticipantCommand(email=event.email, user_id=event.user_id)
    )


def register_handlers(bus=None):
    bus = bus or message_bus
    bus.register_event_handler(UserRegistered, handle_user_registered)
    logger.debug("Reservation event handlers registered")
