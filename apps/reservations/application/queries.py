"""
Reservation Queries

Read side of the reservation domain. Returns ORM querysets ready for
serialization; nothing here mutates state.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet

from shared.domain.errors import NotFoundError
from apps.reservations.models import Reservation


def _base_queryset() -> QuerySet:
    return (
        Reservation.objects.select_related('venue', 'organizer')
        .prefetch_related('sessions', 'participants__user', 'paid_participants')
    )


def get_reservation(reservation_id) -> Reservation:
    try:
        return _base_queryset().get(pk=reservation_id)
    except (Reservation.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"Reservation {reservation_id} not found.")


def list_for_user(user_id: int) -> QuerySet:
    """Reservations the user organizes or was invited to as a registered participant"""
    return (
        _base_queryset()
        .filter(Q(organizer_id=user_id) | Q(participants__user_id=user_id))
        .distinct()
    )


def list_all() -> QuerySet:
    return _base_queryset()


def user_can_view(reservation: Reservation, user) -> bool:
    if user.is_staff:
        return True
    if reservation.organizer_id == user.pk:
        return True
    return any(participant.user_id == user.pk for participant in reservation.participants.all())


def user_can_edit(reservation: Reservation, user) -> bool:
    return user.is_staff or reservation.organizer_id == user.pk
