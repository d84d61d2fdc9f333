"""URL routing for sessions."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import SessionViewSet

router = DefaultRouter()
router.register(r"", SessionViewSet, basename="session")

urlpatterns = [
    path("", include(router.urls)),
]
