"""Celery tasks delivering reservation notifications."""

from __future__ import annotations

import logging
from decimal import Decimal

from celery import shared_task  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from apps.reservations.models import Reservation

from .dispatcher import ReservationDigest, get_dispatcher

logger = logging.getLogger(__name__)


def _display_name(user) -> str:
    if user is None:
        return "there"
    return user.get_full_name() or user.username or user.email


def _load(reservation_id: str) -> Reservation | None:
    try:
        return (
            Reservation.objects.select_related("venue", "organizer")
            .prefetch_related("sessions", "participants__user")
            .get(pk=reservation_id)
        )
    except Reservation.DoesNotExist:
        logger.warning(f"Reservation {reservation_id} vanished before its notification was sent")
        return None


def build_digest(reservation: Reservation) -> ReservationDigest:
    sessions = sorted(reservation.sessions.all(), key=lambda s: (s.date, s.start_time))
    first, last = sessions[0], sessions[-1]
    return ReservationDigest(
        booking_reference=reservation.booking_reference,
        venue_name=reservation.venue.name,
        venue_location=reservation.venue.location,
        date=first.date.strftime("%A, %B %d, %Y"),
        time=f"{first.start_time:%H:%M} - {last.end_time:%H:%M}",
        organizer_name=_display_name(reservation.organizer),
        total_price=reservation.total_price,
        currency=reservation.currency,
    )


@shared_task
def send_reservation_created(reservation_id: str) -> bool:
    """Tell the organizer the reservation exists and awaits payment."""
    reservation = _load(reservation_id)
    if reservation is None or not reservation.organizer.email:
        return False

    sent = get_dispatcher().notify_reservation_created(
        build_digest(reservation),
        reservation.organizer.email,
        _display_name(reservation.organizer),
    )
    if not sent:
        logger.warning(f"Reservation-created e-mail for {reservation.booking_reference} was not delivered")
    return sent


@shared_task
def send_invitation(reservation_id: str, email: str, payment_required: bool, share_amount: str | None = None) -> bool:
    """Invite one player: pay-your-share or fully covered."""
    reservation = _load(reservation_id)
    if reservation is None or not email:
        return False

    user = get_user_model().objects.filter(email__iexact=email).first()
    sent = get_dispatcher().notify_invitee(
        build_digest(reservation),
        email,
        _display_name(user) if user else email.split("@")[0],
        payment_required=payment_required,
        share_amount=Decimal(share_amount) if share_amount is not None else None,
    )
    if not sent:
        logger.warning(f"Invitation for {reservation.booking_reference} to {email} was not delivered")
    return sent


@shared_task
def send_payment_recorded(
    reservation_id: str,
    payer_id: int,
    amount_paid: str,
    fully_confirmed: bool,
    pending_count: int,
) -> bool:
    """Payment receipt for the payer."""
    reservation = _load(reservation_id)
    payer = get_user_model().objects.filter(pk=payer_id).first()
    if reservation is None or payer is None or not payer.email:
        return False

    sent = get_dispatcher().notify_payment_recorded(
        build_digest(reservation),
        payer.email,
        _display_name(payer),
        amount_paid=Decimal(amount_paid),
        fully_confirmed=fully_confirmed,
        pending_count=pending_count,
    )
    if not sent:
        logger.warning(f"Payment receipt for {reservation.booking_reference} to user {payer_id} was not delivered")
    return sent


@shared_task
def send_reservation_confirmed(reservation_id: str) -> int:
    """Tell the organizer and every registered participant the match is on."""
    reservation = _load(reservation_id)
    if reservation is None:
        return 0

    users = [reservation.organizer] + [
        participant.user for participant in reservation.participants.all() if participant.user is not None
    ]
    recipients = []
    seen = set()
    for user in users:
        if user.email and user.pk not in seen:
            seen.add(user.pk)
            recipients.append((user.email, _display_name(user)))

    delivered = get_dispatcher().notify_all_confirmed(build_digest(reservation), recipients)
    logger.info(
        f"Confirmation for {reservation.booking_reference} delivered to {delivered}/{len(recipients)} recipient(s)"
    )
    return delivered
