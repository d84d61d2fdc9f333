"""
Message Bus

Routes committed domain events to the handlers other apps registered for
them: notifications subscribe to reservation and payment events, the
reservation app subscribes to UserRegistered.

A failing handler is logged and skipped. The booking or payment that
raised the event has already committed and stays authoritative.
"""

from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """Synchronous, in-process fan-out of events to handlers (1:N)"""

    def __init__(self):
        self._handlers: DefaultDict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe `handler` to `event_type`; subscribing twice has no effect."""
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)
            logger.debug(f"{handler.__name__} subscribed to {event_type.__name__}")

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            handlers = self._handlers.get(type(event), [])
            if not handlers:
                logger.debug(f"Nobody listens to {type(event).__name__}")
                continue

            logger.info(f"Dispatching {type(event).__name__} {event.event_id} to {len(handlers)} handler(s)")
            for handler in handlers:
                self._call(handler, event)

    @staticmethod
    def _call(handler: EventHandler, event: DomainEvent):
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"Handler {handler.__name__} failed on {type(event).__name__}: {e}",
                exc_info=True,
            )


# Shared by every app; handlers are registered from AppConfig.ready()
message_bus = MessageBus()
