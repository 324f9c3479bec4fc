"""
Centralized exception to JSON response mapping.

Used by ErrorHandlerMiddleware for exceptions raised in views, and directly by
middleware that needs to report failures before a view runs.
"""

import logging
import traceback

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DataError, IntegrityError
from django.http import Http404, HttpRequest, JsonResponse

from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError as PydanticValidationError

from .exceptions import APIError, ValidationFailed
from .responses import error_response, validation_error_response

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE -> client-facing message
SQLSTATE_MESSAGES = {
    "23505": "Resource already exists",
    "23503": "Referenced data does not exist",
    "23502": "Required field is missing",
    "22001": "Data too long for field",
}


def pydantic_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]


def django_errors(exc: DjangoValidationError) -> list[dict[str, str]]:
    if hasattr(exc, "error_dict"):
        return [
            {"field": field, "message": message}
            for field, messages in exc.message_dict.items()
            for message in messages
        ]
    return [{"field": "non_field_errors", "message": m} for m in exc.messages]


def _sqlstate(exc: Exception) -> str | None:
    """Read the SQLSTATE from the driver error, falling back to message sniffing."""
    cause = exc.__cause__
    state = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if state:
        return str(state)

    text = str(exc).lower()
    if "unique" in text:
        return "23505"
    if "foreign key" in text:
        return "23503"
    if "not null" in text:
        return "23502"
    if isinstance(exc, DataError):
        return "22001"
    return None


def exception_to_response(request: HttpRequest, exc: Exception) -> JsonResponse:
    """Map an exception to the standard error envelope."""
    if isinstance(exc, PydanticValidationError):
        return validation_error_response(pydantic_errors(exc))

    if isinstance(exc, ValidationFailed):
        return validation_error_response(exc.errors, exc.message)

    if isinstance(exc, DjangoValidationError):
        return validation_error_response(django_errors(exc))

    if isinstance(exc, ExpiredSignatureError):
        return error_response("Token expired", 401)

    if isinstance(exc, JWTError):
        return error_response("Invalid token", 401)

    if isinstance(exc, IntegrityError | DataError):
        state = _sqlstate(exc)
        logger.warning(
            "Database constraint error on %s %s: %s", request.method, request.path, exc
        )
        message = SQLSTATE_MESSAGES.get(state or "", "Data integrity violation")
        return error_response(message, 400)

    if isinstance(exc, APIError):
        if exc.status_code >= 500:
            logger.error("API error on %s %s: %s", request.method, request.path, exc)
        return error_response(
            exc.message, exc.status_code, details=exc.details, code=exc.code
        )

    if isinstance(exc, Http404):
        return error_response(str(exc) or "Resource not found", 404)

    if isinstance(exc, PermissionDenied):
        return error_response(str(exc) or "Access denied", 403)

    logger.exception("Unhandled error on %s %s", request.method, request.path)

    if settings.ENVIRONMENT == "development":
        return error_response(
            str(exc) or "Internal server error",
            500,
            details={
                "type": type(exc).__name__,
                "stack": traceback.format_exception(exc),
            },
        )
    return error_response("Internal server error", 500)
