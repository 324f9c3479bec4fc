"""
Core API views - health checks, API docs and development test routes.
"""

import time
from typing import Any

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.web.accounts.decorators import jwt_required

from .ratelimit import DEFAULT_LIMITS, get_limit
from .responses import json_response, success_response, timestamp

API_VERSION = "1.0.0"

_started = time.monotonic()


@require_GET
def health(request: HttpRequest) -> JsonResponse:
    """GET /health - load balancer probe."""
    return json_response({"status": "healthy", "timestamp": timestamp()})


@require_GET
def api_health(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/health"""
    return json_response(
        {
            "status": "healthy",
            "version": API_VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": timestamp(),
            "uptime": round(time.monotonic() - _started, 3),
        }
    )


@require_GET
def docs(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/docs - endpoint index and rate limit classes."""
    limits: dict[str, Any] = {}
    for scope in DEFAULT_LIMITS:
        window, max_requests, _message = get_limit(scope)
        limits[scope] = {"windowSeconds": window, "max": max_requests}

    return json_response(
        {
            "version": API_VERSION,
            "baseUrl": "/api/v1",
            "authentication": "Authorization: Bearer <token>",
            "endpoints": {
                "auth": "/api/v1/auth (register, login, me, logout)",
                "users": "/api/v1/users",
                "restaurants": "/api/v1/restaurants",
                "locations": "/api/v1/locations",
                "menu": "/api/v1/menu",
                "languages": "/api/v1/languages",
                "orders": "/api/v1/orders",
                "health": "/api/v1/health",
            },
            "versioning": {
                "supported": ["1"],
                "selection": [
                    "path /api/v1/",
                    "Accept: application/json; version=1",
                    "X-API-Version header",
                    "?version= query parameter",
                ],
            },
            "rateLimit": limits,
        }
    )


# =============================================================================
# Development test routes (not routed in production)
# =============================================================================


@require_GET
def test_simple(request: HttpRequest) -> JsonResponse:
    return success_response({"method": request.method}, "Test route working")


@require_GET
@jwt_required
def test_auth(request: HttpRequest) -> JsonResponse:
    return success_response(
        {
            "user_id": request.user.pk,
            "token": request.token_payload,  # type: ignore[attr-defined]
        },
        "Authenticated",
    )


@csrf_exempt
@require_POST
def xss_test(request: HttpRequest) -> JsonResponse:
    """Echoes the sanitized body, query and URL parameters."""
    return json_response(
        {
            "message": "XSS test endpoint",
            "receivedData": request.payload,  # type: ignore[attr-defined]
            "queryParams": request.GET.dict(),
            "urlParams": getattr(request, "url_params", {}),
        }
    )


# =============================================================================
# Not found
# =============================================================================


@csrf_exempt
def route_not_found(
    request: HttpRequest, exception: Exception | None = None
) -> JsonResponse:
    """JSON 404 for unmatched /api/ routes; also used as handler404."""
    return json_response(
        {
            "error": "Route not found",
            "message": f"Cannot {request.method} {request.path}",
            "path": request.path,
            "timestamp": timestamp(),
        },
        status=404,
    )
