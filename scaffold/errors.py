"""Application error taxonomy.

Route handlers and services raise these; the error normalizer middleware is
the only place that turns them into HTTP responses.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base error carrying the HTTP status it should surface as."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the client-facing error envelope."""

        body: dict[str, Any] = {"message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthenticated(AppError):
    """No valid session accompanies the request."""

    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(AppError):
    """Login failed; deliberately silent about which part was wrong."""

    status_code = 401
    default_message = "Invalid username or password"


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid request payload"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(AppError):
    status_code = 405
    default_message = "Method Not Allowed"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists"


class StoreUnavailable(AppError):
    """The durable session/principal store could not be reached."""

    status_code = 503
    default_message = "Session store unavailable"


class DevServerUnavailable(AppError):
    status_code = 502
    default_message = "Development server unavailable"


__all__ = [
    "AppError",
    "Conflict",
    "DevServerUnavailable",
    "InvalidCredentials",
    "MethodNotAllowed",
    "NotFound",
    "StoreUnavailable",
    "Unauthenticated",
    "ValidationFailed",
]
