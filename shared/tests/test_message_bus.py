"""Tests for the message bus and the unit of work's after-commit publication."""

from dataclasses import dataclass

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import Aggregate, DomainEvent


@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    label: str = ""


@dataclass(kw_only=True, eq=False)
class Thing(Aggregate):
    def poke(self, label):
        self.add_event(SomethingHappened(aggregate_id=self.id, label=label))


def test_failing_handler_does_not_stop_the_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    def recorder(event):
        seen.append(event.label)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, recorder)
    bus.register_event_handler(SomethingHappened, recorder)

    bus.publish_events([SomethingHappened(label="a"), SomethingHappened(label="b")])

    assert seen == ["a", "b"]


@pytest.mark.django_db
class TestUnitOfWork:
    def test_events_are_published_after_commit_only(self, django_capture_on_commit_callbacks):
        bus = MessageBus()
        seen = []
        bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.label))
        thing = Thing()

        with django_capture_on_commit_callbacks() as callbacks:
            with DjangoUnitOfWork(bus=bus) as uow:
                thing.poke("x")
                uow.collect_events(thing)
            assert seen == []

        for callback in callbacks:
            callback()
        assert seen == ["x"]
        assert thing.events == []

    def test_rollback_discards_events(self, django_capture_on_commit_callbacks):
        bus = MessageBus()
        seen = []
        bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.label))
        thing = Thing()

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(ValueError):
                with DjangoUnitOfWork(bus=bus) as uow:
                    thing.poke("y")
                    uow.collect_events(thing)
                    raise ValueError("abort")

        assert callbacks == []
        assert seen == []
