import decimal
import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("venues", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booking_reference", models.CharField(editable=False, max_length=16, unique=True)),
                (
                    "total_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        help_text="Sum of the session prices at the time of booking.",
                        max_digits=12,
                    ),
                ),
                ("currency", models.CharField(default="EUR", max_length=3)),
                ("is_split_payment", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "venue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="venues.venue",
                    ),
                ),
                ("sessions", models.ManyToManyField(related_name="reservations", to="venues.session")),
                (
                    "paid_participants",
                    models.ManyToManyField(
                        blank=True,
                        related_name="paid_reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="reservation_status_e1c7a2_idx"),
                    models.Index(fields=["organizer", "created_at"], name="reservation_organiz_5b9d04_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="reservations.reservation",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservation_invitations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Participant",
                "verbose_name_plural": "Participants",
                "db_table": "reservations_participant",
                "ordering": ["position", "id"],
                "indexes": [
                    models.Index(fields=["email"], name="reservation_email_7a0f3e_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(user__isnull=False),
                        fields=("reservation", "user"),
                        name="participant_unique_user",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(user__isnull=False) | ~models.Q(email=""),
                        name="participant_user_or_email",
                    ),
                ],
            },
        ),
    ]
