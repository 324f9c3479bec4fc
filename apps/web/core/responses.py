"""
Response envelope helpers.

Success: {"success": true, "message", "data", "timestamp"[, "meta"]}
Error:   {"success": false, "error": {"message", "code", "timestamp"[, "details"]}}
"""

from math import ceil
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import QuerySet
from django.http import JsonResponse
from django.utils import timezone

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def timestamp() -> str:
    return timezone.now().isoformat()


def json_response(data: Any, status: int = 200) -> JsonResponse:
    """JSON response that accepts lists and Django types (UUID, Decimal, datetime)."""
    return JsonResponse(data, status=status, safe=False, encoder=DjangoJSONEncoder)


def success_response(
    data: Any = None,
    message: str = "Success",
    *,
    status: int = 200,
    meta: dict[str, Any] | None = None,
) -> JsonResponse:
    body: dict[str, Any] = {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": timestamp(),
    }
    if meta:
        body["meta"] = meta
    return json_response(body, status=status)


def error_response(
    message: str,
    status: int = 500,
    *,
    details: Any = None,
    code: str | None = None,
) -> JsonResponse:
    error: dict[str, Any] = {
        "message": message,
        "code": code or status,
        "timestamp": timestamp(),
    }
    if details is not None:
        error["details"] = details
    return json_response({"success": False, "error": error}, status=status)


def validation_error_response(
    errors: list[dict[str, str]], message: str = "Validation failed"
) -> JsonResponse:
    return error_response(
        message,
        400,
        details={"type": "validation", "errors": errors},
    )


def paginate(
    queryset: QuerySet[Any], page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE
) -> tuple[QuerySet[Any], dict[str, Any]]:
    """
    Slice a queryset for the requested page.

    Args:
        queryset: Ordered queryset to paginate
        page: 1-based page number (strings from query params are accepted)
        limit: Page size, capped at MAX_PAGE_SIZE

    Returns:
        Tuple of (page queryset, pagination meta)
    """
    try:
        page = max(int(page), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_SIZE

    total = queryset.count()
    total_pages = ceil(total / limit) if total else 0
    offset = (page - 1) * limit

    meta = {
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        }
    }
    return queryset[offset : offset + limit], meta
