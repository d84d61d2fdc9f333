"""Tests for the session store: lookups, atomic claim, release and creation."""

import uuid
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.urls import reverse

from shared.domain.errors import ConflictError, NotFoundError, ValidationError
from apps.venues.models import Session, Venue
from apps.venues.store import DjangoSessionStore

pytestmark = pytest.mark.django_db


@pytest.fixture
def store():
    return DjangoSessionStore()


class TestFindAvailable:
    def test_returns_only_available_sessions_of_the_venue(self, store, venue, make_session):
        free = make_session(10)
        make_session(11, status=Session.Status.BOOKED)
        other_venue = Venue.objects.create(name="Stade Nord", location="Rabat", capacity=10)
        make_session(12, on_venue=other_venue)

        assert store.find_available(venue.pk) == [free]

    def test_date_range_filter(self, store, venue, make_session, match_day):
        session = make_session(10)
        assert store.find_available(venue.pk, date_from=match_day, date_to=match_day) == [session]
        assert store.find_available(venue.pk, date_from=match_day + timedelta(days=1)) == []

    def test_status_none_returns_every_status(self, store, venue, make_session):
        make_session(10)
        make_session(11, status=Session.Status.CANCELED)
        assert len(store.find_available(venue.pk, status=None)) == 2

    def test_no_match_is_empty_list(self, store):
        assert store.find_available(uuid.uuid4()) == []


class TestClaim:
    def test_claim_books_every_session(self, store, make_session):
        first, second = make_session(10), make_session(11)

        claimed = store.claim([first.pk, second.pk])

        assert [session.pk for session in claimed] == [first.pk, second.pk]
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == Session.Status.BOOKED
        assert second.status == Session.Status.BOOKED

    def test_claim_with_one_booked_session_mutates_nothing(self, store, make_session):
        free_a = make_session(10)
        taken = make_session(11, status=Session.Status.BOOKED)
        free_b = make_session(12)

        with pytest.raises(ConflictError):
            store.claim([free_a.pk, taken.pk, free_b.pk])

        assert Session.objects.filter(
            pk__in=[free_a.pk, free_b.pk], status=Session.Status.AVAILABLE
        ).count() == 2

    def test_claim_of_canceled_session_conflicts(self, store, make_session):
        canceled = make_session(10, status=Session.Status.CANCELED)
        with pytest.raises(ConflictError):
            store.claim([canceled.pk])

    def test_overlapping_claims_only_first_wins(self, store, make_session):
        a, b, c = make_session(10), make_session(11), make_session(12)

        store.claim([a.pk, b.pk])
        with pytest.raises(ConflictError):
            store.claim([b.pk, c.pk])

        c.refresh_from_db()
        assert c.status == Session.Status.AVAILABLE
        assert Session.objects.filter(status=Session.Status.BOOKED).count() == 2

    def test_unknown_session_is_not_found(self, store, make_session):
        session = make_session(10)
        with pytest.raises(NotFoundError):
            store.claim([session.pk, uuid.uuid4()])
        session.refresh_from_db()
        assert session.status == Session.Status.AVAILABLE

    def test_empty_claim_is_invalid(self, store):
        with pytest.raises(ValidationError):
            store.claim([])

    def test_malformed_id_is_invalid(self, store):
        with pytest.raises(ValidationError):
            store.claim(["not-a-uuid"])

    def test_duplicate_ids_are_claimed_once(self, store, make_session):
        session = make_session(10)
        claimed = store.claim([session.pk, str(session.pk)])
        assert len(claimed) == 1


class TestGetManyAndRelease:
    def test_get_many_keeps_requested_order(self, store, make_session):
        a, b = make_session(10), make_session(11)
        assert store.get_many([b.pk, a.pk]) == [b, a]

    def test_get_many_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get_many([uuid.uuid4()])

    def test_release_returns_booked_sessions_only(self, store, make_session):
        booked = make_session(10, status=Session.Status.BOOKED)
        canceled = make_session(11, status=Session.Status.CANCELED)

        assert store.release([booked.pk, canceled.pk]) == 1

        booked.refresh_from_db()
        canceled.refresh_from_db()
        assert booked.status == Session.Status.AVAILABLE
        assert canceled.status == Session.Status.CANCELED


class TestCreateSession:
    def test_creates_available_session(self, store, venue, match_day):
        session = store.create_session(venue.pk, match_day, time(18), time(19), Decimal("30.00"))
        assert session.status == Session.Status.AVAILABLE

    def test_overlap_on_same_venue_and_day_conflicts(self, store, venue, match_day, make_session):
        make_session(18)
        with pytest.raises(ConflictError):
            store.create_session(venue.pk, match_day, time(18, 30), time(19, 30), Decimal("30.00"))

    def test_back_to_back_sessions_are_allowed(self, store, venue, match_day, make_session):
        make_session(18)
        session = store.create_session(venue.pk, match_day, time(19), time(20), Decimal("30.00"))
        assert session.pk is not None

    def test_canceled_session_does_not_block_the_slot(self, store, venue, match_day, make_session):
        make_session(18, status=Session.Status.CANCELED)
        assert store.create_session(venue.pk, match_day, time(18), time(19), Decimal("30.00"))

    def test_end_before_start_is_invalid(self, store, venue, match_day):
        with pytest.raises(ValidationError):
            store.create_session(venue.pk, match_day, time(19), time(18), Decimal("30.00"))

    def test_negative_price_is_invalid(self, store, venue, match_day):
        with pytest.raises(ValidationError):
            store.create_session(venue.pk, match_day, time(18), time(19), Decimal("-1"))

    def test_unknown_venue_is_not_found(self, store, match_day):
        with pytest.raises(NotFoundError):
            store.create_session(uuid.uuid4(), match_day, time(18), time(19), Decimal("30.00"))


class TestSessionListingAPI:
    def test_filters_by_venue_and_status(self, api_client, venue, make_session):
        free = make_session(10)
        make_session(11, status=Session.Status.BOOKED)

        response = api_client.get(reverse("session-list"), {"venue": str(venue.pk), "status": "available"})

        assert response.status_code == 200
        results = response.json()
        assert [item["id"] for item in results] == [str(free.pk)]
        assert results[0]["venue_name"] == venue.name
