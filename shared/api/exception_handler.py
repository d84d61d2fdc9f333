"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):  # type: ignore
    """Map DomainError subclasses to their status code, defer everything else to DRF."""
    if isinstance(exc, DomainError):
        view = context.get("view")
        view_name = view.__class__.__name__ if view is not None else "unknown"
        if exc.status_code >= 500:
            logger.error(f"Domain error in {view_name}: {exc}", exc_info=exc)
        else:
            logger.warning(f"Domain error in {view_name}: {exc}")
        return Response(
            {"detail": exc.message, "code": exc.code.value},
            status=exc.status_code,
        )
    return drf_exception_handler(exc, context)
