"""
Domain error taxonomy.

Services raise these; the handlers registered in main.py turn them into the
`{"success": false, "message": ...}` envelope with the matching status code.
Routes stay thin and never translate errors themselves.
"""
from __future__ import annotations

from fastapi import status

# ---------------------------------------------------------------------------
# Constants: user-facing messages for errors raised outside services
# ---------------------------------------------------------------------------

MSG_INTERNAL_ERROR = "Internal server error"
MSG_VALIDATION_ERROR = "Invalid request"
MSG_AUTH_REQUIRED = "Authentication required"


class DomainError(Exception):
    """Base class; subclasses fix the HTTP status code."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidState(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource is not in a valid state for this operation"


class Unavailable(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Requested time is not available for this office"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicts with an existing record"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class Unauthenticated(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = MSG_AUTH_REQUIRED


class InvalidTransition(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Status change not allowed"


def error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}
