"""
Domain building blocks

- Entity: identity-based equality
- Aggregate: an entity that records domain events until a unit of work
  collects them
- DomainEvent: immutable-by-convention fact with id, timestamp and the id
  of the aggregate that raised it
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(kw_only=True)
class Entity(ABC):
    """Equal to another entity of the same class with the same id."""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=timezone.now)
    updated_at: datetime = field(default_factory=timezone.now)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Aggregate root

    Mutating methods append events with add_event(); DjangoUnitOfWork
    takes them with collect_events() and publishes them after commit.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Snapshot of the events recorded so far"""
        return list(self._events)


@dataclass(kw_only=True)
class DomainEvent:
    """Something that happened; handlers only ever see committed events."""
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: UUID | None = None
