"""API exceptions mapped to JSON error responses by ErrorHandlerMiddleware."""

from typing import Any


class APIError(Exception):
    """Base exception for errors that carry an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        details: Any = None,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.code = code
        super().__init__(self.message)


class ValidationFailed(APIError):
    """Request data failed validation."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
        **kwargs: Any,
    ) -> None:
        self.errors = errors or []
        super().__init__(message, **kwargs)


class AuthenticationFailed(APIError):
    status_code = 401
    default_message = "Authentication required"


class AccessDenied(APIError):
    status_code = 403
    default_message = "Access denied"


class PendingConfirmation(AccessDenied):
    """Account exists but the email address has not been confirmed yet."""

    default_message = "Please confirm your email address before logging in"

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("code", "PENDING_CONFIRMATION")
        super().__init__(message, **kwargs)


class NotFound(APIError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(APIError):
    status_code = 409
    default_message = "Resource already exists"
