"""API views for venues and sessions."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore

from .filters import SessionFilterSet
from .models import Session
from .serializers import SessionSerializer


class SessionViewSet(viewsets.ReadOnlyModelViewSet):
    """Public listing of sessions; without a status filter every status is returned."""

    queryset = Session.objects.select_related("venue").order_by("date", "start_time")
    serializer_class = SessionSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_class = SessionFilterSet
