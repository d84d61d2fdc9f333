"""API views for the reservation domain."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.errors import ForbiddenError, ValidationError
from apps.venues.store import session_store

from .application import queries
from .application.command_handlers import (
    CreateReservationCommand,
    CreateReservationHandler,
    DeleteReservationCommand,
    DeleteReservationHandler,
    SetReservationStatusCommand,
    SetReservationStatusHandler,
    UpdateReservationCommand,
    UpdateReservationHandler,
)
from .domain.entities import ReservationStatus
from .models import Reservation
from .repositories import reservation_repository, user_directory
from .serializers import (
    ReservationCreateSerializer,
    ReservationSerializer,
    ReservationStatusSerializer,
    ReservationUpdateSerializer,
)


class IsReservationStakeholder(permissions.BasePermission):
    """Organizer, registered participants and admins may read; organizer and admins may write."""

    def has_object_permission(self, request, view, obj: Reservation):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return queries.user_can_view(obj, request.user)
        return queries.user_can_edit(obj, request.user)


class ReservationViewSet(viewsets.GenericViewSet):
    """Create, inspect and manage reservations."""

    permission_classes = [permissions.IsAuthenticated, IsReservationStakeholder]
    serializer_class = ReservationSerializer

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReservationCreateSerializer
        if self.action == "partial_update":
            return ReservationUpdateSerializer
        if self.action == "set_status":
            return ReservationStatusSerializer
        return ReservationSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        requested_user = self.request.query_params.get("user")
        if requested_user:
            try:
                requested_user = int(requested_user)
            except ValueError:
                raise ValidationError("The user filter must be a numeric id.")
            if not user.is_staff and requested_user != user.pk:
                raise ForbiddenError("Only administrators may list other users' reservations.")
            return queries.list_for_user(requested_user)
        if user.is_staff:
            return queries.list_all()
        return queries.list_for_user(user.pk)

    def get_object(self):  # type: ignore
        reservation = queries.get_reservation(self.kwargs["pk"])
        self.check_object_permissions(self.request, reservation)
        return reservation

    def _render(self, reservation_id, status_code=status.HTTP_200_OK) -> Response:
        instance = queries.get_reservation(reservation_id)
        serializer = ReservationSerializer(instance, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = ReservationSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(serializer.data)
        serializer = ReservationSerializer(queryset, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    def retrieve(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        return Response(ReservationSerializer(reservation, context=self.get_serializer_context()).data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        handler = CreateReservationHandler(reservation_repository, session_store, user_directory)
        reservation = handler.handle(CreateReservationCommand(
            organizer_id=request.user.pk,
            venue_id=data["venue"],
            session_ids=data["session_ids"],
            invitee_emails=data.get("invitee_emails", []),
            participant_ids=data.get("participant_ids", []),
            is_split_payment=data.get("is_split_payment", False),
        ))
        return self._render(reservation.id, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        UpdateReservationHandler(reservation_repository, user_directory).handle(UpdateReservationCommand(
            reservation_id=reservation.pk,
            is_split_payment=data.get("is_split_payment"),
            invitee_emails=data.get("invitee_emails", []),
        ))
        return self._render(reservation.pk)

    def destroy(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        DeleteReservationHandler(reservation_repository, session_store).handle(
            DeleteReservationCommand(reservation_id=reservation.pk)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(
        detail=True,
        methods=["patch"],
        url_path="status",
        permission_classes=[permissions.IsAuthenticated, permissions.IsAdminUser],
    )
    def set_status(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        SetReservationStatusHandler(reservation_repository, session_store).handle(SetReservationStatusCommand(
            reservation_id=reservation.pk,
            status=ReservationStatus(serializer.validated_data["status"]),
        ))
        return self._render(reservation.pk)
