"""
Decorators for request handling and validation.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt

from .responses import error_response, json_response


def dispatch_by_method(**handlers: Callable[..., Any]) -> Callable[..., Any]:
    """
    Route one URL to a handler per HTTP method.

    Usage:
        path("<uuid:restaurant_id>", dispatch_by_method(
            GET=get_restaurant, PUT=update_restaurant, DELETE=delete_restaurant,
        ))

    Each handler carries its own auth/rate-limit decorators.
    """
    allowed = ", ".join(sorted(handlers))

    @csrf_exempt
    def view(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        handler = handlers.get(request.method or "")
        if handler is None:
            response = error_response(f"Method {request.method} not allowed", 405)
            response["Allow"] = allowed
            return response
        return handler(request, *args, **kwargs)

    return view


def sanitize_payload(sanitizer: Callable[[Any], Any]) -> Callable[..., Any]:
    """
    Apply a field-specific sanitizer to request.payload on top of the
    general pass done by XSSSanitizationMiddleware.

    Usage:
        @sanitize_payload(sanitize_restaurant_data)
        def update_restaurant(request, restaurant_id):
            ...
    """

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            payload = getattr(request, "payload", {})
            request.payload = sanitizer(payload)  # type: ignore[attr-defined]
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def idempotent(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Replay the first response when an Idempotency-Key header is reused.

    The header is optional; requests without it are processed normally.
    Keys are scoped to the authenticated user and cached for 24 hours.

    Usage:
        @jwt_required
        @idempotent
        def create_order(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")
        if not key:
            return view_func(request, *args, **kwargs)

        user_id = getattr(request.user, "pk", None) or "anonymous"
        cache_key = f"idempotency:{user_id}:{key}"
        cached = cache.get(cache_key)

        if cached:
            # Return cached response
            return json_response(cached["data"], status=cached["status"])

        # Call the actual view
        response = view_func(request, *args, **kwargs)

        # Cache successful responses for 24 hours
        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                },
                timeout=86400,  # 24 hours
            )

        return response

    return wrapper
