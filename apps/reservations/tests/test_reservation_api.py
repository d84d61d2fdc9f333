"""Integration tests for reservation API endpoints."""

from __future__ import annotations

import uuid
from datetime import date, time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.reservations.models import Reservation
from apps.venues.models import Session, Venue

User = get_user_model()


class ReservationAPITests(APITestCase):
    """Covers creation, conflicts, visibility and administration of reservations."""

    def setUp(self) -> None:
        self.organizer = User.objects.create_user(
            username="organizer", email="organizer@example.com", password="OrganizerPass123"
        )
        self.player = User.objects.create_user(
            username="player", email="player@example.com", password="PlayerPass123"
        )
        self.outsider = User.objects.create_user(
            username="outsider", email="outsider@example.com", password="OutsiderPass123"
        )
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="AdminPass123", is_staff=True
        )
        self.venue = Venue.objects.create(name="Stade Central", location="Casablanca", capacity=22)
        day = date.today() + timedelta(days=3)
        self.early = Session.objects.create(
            venue=self.venue, date=day, start_time=time(18), end_time=time(19), price=Decimal("20.00")
        )
        self.late = Session.objects.create(
            venue=self.venue, date=day, start_time=time(19), end_time=time(20), price=Decimal("25.00")
        )
        self.client.force_authenticate(self.organizer)
        self.list_url = reverse("reservation-list")

    def _payload(self, *sessions, **extra) -> dict:
        payload = {
            "venue": str(self.venue.id),
            "session_ids": [str(session.id) for session in (sessions or (self.early, self.late))],
        }
        payload.update(extra)
        return payload

    def _create(self, *sessions, **extra) -> dict:
        response = self.client.post(self.list_url, self._payload(*sessions, **extra), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def test_organizer_can_create_reservation(self) -> None:
        data = self._create()

        self.assertEqual(Decimal(data["total_price"]), Decimal("45.00"))
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["organizer_id"], self.organizer.pk)
        self.assertTrue(data["booking_reference"].startswith("GT-"))
        self.assertEqual(len(data["sessions"]), 2)
        self.assertEqual(Session.objects.filter(status=Session.Status.BOOKED).count(), 2)

    def test_split_reservation_lists_participants(self) -> None:
        data = self._create(invitee_emails=["player@example.com", "ghost@example.com"], is_split_payment=True)

        participants = {p["email"]: p for p in data["participants"]}
        self.assertTrue(participants["player@example.com"]["is_registered"])
        self.assertFalse(participants["ghost@example.com"]["is_registered"])
        self.assertIsNone(participants["ghost@example.com"]["user_id"])
        self.assertTrue(data["is_split_payment"])

    def test_booked_session_returns_conflict(self) -> None:
        self._create(self.early)

        response = self.client.post(self.list_url, self._payload(self.early, self.late), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "CONFLICT")
        self.late.refresh_from_db()
        self.assertEqual(self.late.status, Session.Status.AVAILABLE)
        self.assertEqual(Reservation.objects.count(), 1)

    def test_empty_session_list_is_rejected(self) -> None:
        response = self.client.post(
            self.list_url, {"venue": str(self.venue.id), "session_ids": []}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_session_returns_not_found(self) -> None:
        response = self.client.post(
            self.list_url,
            {"venue": str(self.venue.id), "session_ids": [str(uuid.uuid4())]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_anonymous_user_cannot_create(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_shows_organized_and_invited_reservations(self) -> None:
        own = self._create(self.early, invitee_emails=["player@example.com"])

        self.client.force_authenticate(self.player)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data], [own["id"]])

        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(self.list_url).data, [])

    def test_user_filter_is_admin_only(self) -> None:
        self._create(self.early)

        self.client.force_authenticate(self.player)
        response = self.client.get(self.list_url, {"user": self.organizer.pk})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get(self.list_url, {"user": self.organizer.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_admin_lists_everything(self) -> None:
        self._create(self.early)
        self.client.force_authenticate(self.player)
        self._create(self.late)

        self.client.force_authenticate(self.admin)
        response = self.client.get(self.list_url)
        self.assertEqual(len(response.data), 2)

    def test_retrieve_permissions(self) -> None:
        data = self._create(self.early, invitee_emails=["player@example.com"])
        detail_url = reverse("reservation-detail", args=[data["id"]])

        self.client.force_authenticate(self.player)
        self.assertEqual(self.client.get(detail_url).status_code, status.HTTP_200_OK)

        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(detail_url).status_code, status.HTTP_403_FORBIDDEN)

    def test_retrieve_unknown_reservation(self) -> None:
        response = self.client.get(reverse("reservation-detail", args=[uuid.uuid4()]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_organizer_can_invite_more_players(self) -> None:
        data = self._create(self.early)
        detail_url = reverse("reservation-detail", args=[data["id"]])

        response = self.client.patch(
            detail_url, {"invitee_emails": ["player@example.com"], "is_split_payment": True}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["is_split_payment"])
        self.assertEqual([p["user_id"] for p in response.data["participants"]], [self.player.pk])

    def test_invitee_cannot_update(self) -> None:
        data = self._create(self.early, invitee_emails=["player@example.com"])

        self.client.force_authenticate(self.player)
        response = self.client.patch(
            reverse("reservation-detail", args=[data["id"]]), {"is_split_payment": True}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_admin_can_set_status(self) -> None:
        data = self._create(self.early)
        status_url = reverse("reservation-set-status", args=[data["id"]])

        response = self.client.patch(status_url, {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(status_url, {"status": "cancelled"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "cancelled")

    def test_invalid_status_value(self) -> None:
        data = self._create(self.early)
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            reverse("reservation-set-status", args=[data["id"]]), {"status": "archived"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_organizer_can_delete(self) -> None:
        data = self._create(self.early)

        response = self.client.delete(reverse("reservation-detail", args=[data["id"]]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Reservation.objects.filter(pk=data["id"]).exists())
