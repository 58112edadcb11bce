"""
Domain Exceptions

Expected failure conditions raised by services and dependencies.
Each error carries the HTTP status it maps to; main.py registers a single
handler that renders them as {"detail": message}.

Unexpected errors (library failures, database errors) are NOT wrapped here;
they propagate to the global handlers in main.py.
"""

from fastapi import status


class DigiReadError(Exception):
    """Base class for errors with a known HTTP mapping."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Invalid request!"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidRequest(DigiReadError):
    """Malformed or missing required input."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid request!"


class TokenMismatch(DigiReadError):
    """No live verification token for the user, or the value differs."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid request, token mismatch!"


class UserNotFound(DigiReadError):
    """Referenced user is absent (404, or 500 where it must exist)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class InvalidOrExpiredCredential(DigiReadError):
    """Session credential failed signature or expiry checks."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class Unauthorized(DigiReadError):
    """Missing or unusable session."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request!"


class Forbidden(DigiReadError):
    """Authenticated but not permitted."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to do this!"


class NotFound(DigiReadError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found!"


class BadRequest(DigiReadError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request!"
