"""Domain error codes shared by every app.

Domain code raises these; the API layer maps them to HTTP responses in
``shared.api.exception_handler``.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"
    PAYMENT_PROVIDER_ERROR = "PAYMENT_PROVIDER_ERROR"
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Malformed or missing input."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class NotFoundError(DomainError):
    """A referenced entity does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class ConflictError(DomainError):
    """Session already booked, duplicate unique field or illegal state."""

    code = ErrorCode.CONFLICT
    status_code = 409


class ForbiddenError(DomainError):
    """The caller may not act on this resource."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class PaymentProviderError(DomainError):
    """The external payment capability failed or timed out."""

    code = ErrorCode.PAYMENT_PROVIDER_ERROR
    status_code = 502


class NotificationError(DomainError):
    """Delivery of a notification failed. Always absorbed and logged."""

    code = ErrorCode.NOTIFICATION_ERROR
    status_code = 500
