"""Notification dispatcher: e-mails sent around the reservation lifecycle."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationDigest:
    """Everything an e-mail needs to describe a reservation."""
    booking_reference: str
    venue_name: str
    venue_location: str
    date: str
    time: str
    organizer_name: str
    total_price: Decimal
    currency: str


class NotificationDispatcher(ABC):
    """
    Best-effort notifier

    Methods return False instead of raising when delivery fails; callers
    log and move on.
    """

    @abstractmethod
    def notify_reservation_created(self, digest: ReservationDigest, email: str, name: str) -> bool:
        ...

    @abstractmethod
    def notify_invitee(
        self,
        digest: ReservationDigest,
        email: str,
        name: str,
        *,
        payment_required: bool,
        share_amount: Decimal | None = None,
    ) -> bool:
        ...

    @abstractmethod
    def notify_payment_recorded(
        self,
        digest: ReservationDigest,
        email: str,
        name: str,
        *,
        amount_paid: Decimal,
        fully_confirmed: bool,
        pending_count: int,
    ) -> bool:
        ...

    @abstractmethod
    def notify_all_confirmed(self, digest: ReservationDigest, recipients: Iterable[Tuple[str, str]]) -> int:
        """Send to every (email, name) pair; returns how many were delivered."""
        ...


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

TEMPLATE_DIR = "notifications/email"


def send_email_notification(recipient_email: str, subject: str, template_name: str, context: dict) -> bool:
    """
    Render `template_name` and send it as HTML with a plain-text alternative.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    try:
        html_message = render_to_string(f"{TEMPLATE_DIR}/{template_name}", context)
        text_message = strip_tags(html_message)

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _context(digest: ReservationDigest, name: str, **extra) -> dict:
    frontend_url = getattr(settings, "FRONTEND_URL", "http://localhost:5173").rstrip("/")
    return {"digest": digest, "name": name, "frontend_url": frontend_url, **extra}


class EmailNotificationDispatcher(NotificationDispatcher):
    """Sends templated HTML e-mails through Django's mail backend."""

    def notify_reservation_created(self, digest: ReservationDigest, email: str, name: str) -> bool:
        subject = f"Reservation {digest.booking_reference} created"
        return send_email_notification(email, subject, "reservation_created.html", _context(digest, name))

    def notify_invitee(
        self,
        digest: ReservationDigest,
        email: str,
        name: str,
        *,
        payment_required: bool,
        share_amount: Decimal | None = None,
    ) -> bool:
        subject = f"{digest.organizer_name} invited you to play at {digest.venue_name}"
        context = _context(digest, name, payment_required=payment_required, share_amount=share_amount)
        return send_email_notification(email, subject, "invitation.html", context)

    def notify_payment_recorded(
        self,
        digest: ReservationDigest,
        email: str,
        name: str,
        *,
        amount_paid: Decimal,
        fully_confirmed: bool,
        pending_count: int,
    ) -> bool:
        subject = f"Payment received for {digest.booking_reference}"
        context = _context(
            digest,
            name,
            amount_paid=amount_paid,
            fully_confirmed=fully_confirmed,
            pending_count=pending_count,
        )
        return send_email_notification(email, subject, "payment_recorded.html", context)

    def notify_all_confirmed(self, digest: ReservationDigest, recipients: Iterable[Tuple[str, str]]) -> int:
        subject = f"Reservation {digest.booking_reference} confirmed"
        delivered = 0
        for email, name in recipients:
            if send_email_notification(email, subject, "reservation_confirmed.html", _context(digest, name)):
                delivered += 1
        return delivered


def get_dispatcher() -> NotificationDispatcher:
    return EmailNotificationDispatcher()
