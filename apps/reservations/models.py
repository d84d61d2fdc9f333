"""Reservation persistence models for GoalTime."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """A group booking of one or more sessions at a single venue."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_reference = models.CharField(max_length=16, unique=True, editable=False)
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organized_reservations",
    )
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    sessions = models.ManyToManyField("venues.Session", related_name="reservations")
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Sum of the session prices at the time of booking."),
    )
    currency = models.CharField(max_length=3, default="EUR")
    is_split_payment = models.BooleanField(default=False)
    paid_participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="paid_reservations",
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="reservation_status_e1c7a2_idx"),
            models.Index(fields=["organizer", "created_at"], name="reservation_organiz_5b9d04_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.booking_reference} ({self.status})"


class ReservationParticipant(models.Model):
    """An invited player: a registered user, or an e-mail placeholder when ``user`` is null."""

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="participants",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="reservation_invitations",
    )
    email = models.EmailField(blank=True)
    position = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "reservations_participant"
        verbose_name = _("Participant")
        verbose_name_plural = _("Participants")
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "user"],
                condition=models.Q(user__isnull=False),
                name="participant_unique_user",
            ),
            models.CheckConstraint(
                condition=models.Q(user__isnull=False) | ~models.Q(email=""),
                name="participant_user_or_email",
            ),
        ]
        indexes = [
            models.Index(fields=["email"], name="reservation_email_7a0f3e_idx"),
        ]

    @property
    def is_placeholder(self) -> bool:
        return self.user_id is None

    def __str__(self) -> str:
        who = self.email if self.is_placeholder else f"user {self.user_id}"
        return f"{who} in {self.reservation_id}"
