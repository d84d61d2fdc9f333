"""Pytest configuration and shared fixtures."""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def organizer(django_user_model):
    return django_user_model.objects.create_user(
        username="organizer",
        email="organizer@example.com",
        password="OrganizerPass123",
    )


@pytest.fixture
def player(django_user_model):
    return django_user_model.objects.create_user(
        username="player",
        email="player@example.com",
        password="PlayerPass123",
    )


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username="admin",
        email="admin@example.com",
        password="AdminPass123",
        is_staff=True,
    )


@pytest.fixture
def venue():
    from apps.venues.models import Venue

    return Venue.objects.create(name="Stade Central", location="Casablanca", capacity=22)


@pytest.fixture
def match_day() -> date:
    return date.today() + timedelta(days=7)


@pytest.fixture
def make_session(venue, match_day):
    from apps.venues.models import Session

    def _make(start_hour: int, price: str = "20.00", status=Session.Status.AVAILABLE, on_venue=None):
        return Session.objects.create(
            venue=on_venue or venue,
            date=match_day,
            start_time=time(start_hour, 0),
            end_time=time(start_hour + 1, 0),
            price=Decimal(price),
            status=status,
        )

    return _make
