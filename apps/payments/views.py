"""API views for payments."""

from __future__ import annotations

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.errors import ForbiddenError
from apps.reservations.application import queries

from .serializers import ConfirmPaymentSerializer, serialize_plan
from .services import build_payment_coordinator


def _load_for(request, reservation_id):
    reservation = queries.get_reservation(reservation_id)
    if not queries.user_can_view(reservation, request.user):
        raise ForbiddenError("You are not part of this reservation.")
    return reservation


class InitiatePaymentView(APIView):
    """Create the gateway charges for a reservation."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, reservation_id):  # type: ignore
        reservation = _load_for(request, reservation_id)
        plan = build_payment_coordinator().initiate(reservation.pk)
        return Response(serialize_plan(plan), status=status.HTTP_201_CREATED)


class ConfirmPaymentView(APIView):
    """Record that the current user (or, for admins, ``payer_id``) has paid."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, reservation_id):  # type: ignore
        reservation = _load_for(request, reservation_id)
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payer_id = serializer.validated_data.get("payer_id") or request.user.pk
        if payer_id != request.user.pk and not request.user.is_staff:
            raise ForbiddenError("You can only confirm your own payment.")

        result = build_payment_coordinator().confirm(reservation.pk, payer_id)
        return Response({
            "success": result.fully_confirmed,
            "message": result.message,
            "reservation_id": str(result.reservation_id),
        })


class PaymentStatusView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, reservation_id):  # type: ignore
        reservation = _load_for(request, reservation_id)
        return Response(build_payment_coordinator().status(reservation.pk))
