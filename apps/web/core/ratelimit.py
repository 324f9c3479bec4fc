"""
Sliding-window rate limiting keyed by client IP.

Each (class, IP) pair keeps a log of request timestamps in the Django cache.
The default cache is local memory, so counters are per process and reset on
restart.

Usage:
    @rate_limit("auth")
    def login(request):
        ...
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from math import ceil
from typing import Any

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse

from .responses import json_response, timestamp

logger = logging.getLogger(__name__)

# Guards the read-modify-write of a timestamp log across threads of one worker
_lock = threading.Lock()

MINUTE = 60
HOUR = 60 * MINUTE

# class -> (window seconds, production max, development max, message)
DEFAULT_LIMITS: dict[str, tuple[int, int, int, str]] = {
    "general": (
        15 * MINUTE,
        100,
        1000,
        "Too many requests from this IP, please try again later.",
    ),
    "auth": (
        15 * MINUTE,
        5,
        50,
        "Too many authentication attempts, please try again later.",
    ),
    "restaurant_creation": (
        HOUR,
        3,
        30,
        "Too many restaurant creation attempts, please try again later.",
    ),
    "user_management": (
        15 * MINUTE,
        20,
        200,
        "Too many user management requests, please try again later.",
    ),
    "user_creation": (
        HOUR,
        5,
        50,
        "Too many user creation attempts, please try again later.",
    ),
    "upload": (
        HOUR,
        10,
        100,
        "Too many upload requests, please try again later.",
    ),
    "search": (
        15 * MINUTE,
        200,
        2000,
        "Too many search requests, please try again later.",
    ),
    "password_change": (
        HOUR,
        3,
        30,
        "Too many password change attempts, please try again later.",
    ),
}


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


def get_limit(scope: str) -> tuple[int, int, str]:
    """
    Resolve (window, max requests, message) for a limit class.

    settings.RATE_LIMITS may override any class with a dict holding
    "window" and/or "max".
    """
    window, prod_max, dev_max, message = DEFAULT_LIMITS[scope]
    max_requests = prod_max if settings.ENVIRONMENT == "production" else dev_max

    override = getattr(settings, "RATE_LIMITS", {}).get(scope, {})
    window = override.get("window", window)
    max_requests = override.get("max", max_requests)
    return window, max_requests, message


def client_ip(request: HttpRequest) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "unknown")


def hit(scope: str, key: str) -> RateLimitResult:
    """Record a request for (scope, key) unless the window is already full."""
    window, max_requests, _message = get_limit(scope)
    cache_key = f"ratelimit:{scope}:{key}"

    with _lock:
        now = time.time()
        log = [ts for ts in cache.get(cache_key, []) if ts > now - window]

        if len(log) >= max_requests:
            retry_after = max(ceil(log[0] + window - now), 1)
            cache.set(cache_key, log, timeout=window)
            return RateLimitResult(False, max_requests, 0, retry_after)

        log.append(now)
        cache.set(cache_key, log, timeout=window)

    reset_after = max(ceil(log[0] + window - now), 1)
    return RateLimitResult(True, max_requests, max_requests - len(log), reset_after)


def too_many_requests(scope: str, result: RateLimitResult) -> HttpResponse:
    _window, _max, message = get_limit(scope)
    response = json_response(
        {
            "success": False,
            "error": {
                "message": message,
                "code": 429,
                "retryAfter": result.reset_after,
                "timestamp": timestamp(),
            },
        },
        status=429,
    )
    response["Retry-After"] = str(result.reset_after)
    _set_headers(response, result)
    return response


def _set_headers(response: HttpResponse, result: RateLimitResult) -> None:
    response["RateLimit-Limit"] = str(result.limit)
    response["RateLimit-Remaining"] = str(result.remaining)
    response["RateLimit-Reset"] = str(result.reset_after)


def enforce(
    scope: str, request: HttpRequest
) -> tuple[RateLimitResult, HttpResponse | None]:
    """Check a request against a class; returns the 429 response when over."""
    ip = client_ip(request)
    result = hit(scope, ip)
    if not result.allowed:
        logger.warning(
            "Rate limit '%s' exceeded for %s on %s %s",
            scope,
            ip,
            request.method,
            request.path,
        )
        return result, too_many_requests(scope, result)
    return result, None


def rate_limit(scope: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """View decorator applying a named limit class before the view runs."""
    if scope not in DEFAULT_LIMITS:
        raise ValueError(f"Unknown rate limit class: {scope}")

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            result, rejected = enforce(scope, request)
            if rejected is not None:
                return rejected
            response = view_func(request, *args, **kwargs)
            _set_headers(response, result)
            return response

        return wrapper

    return decorator


class GeneralRateLimitMiddleware:
    """
    Applies the "general" class to every /api/v1/ request.

    Health checks are exempt, and so are test routes outside production.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not self._applies(request.path):
            return self.get_response(request)

        result, rejected = enforce("general", request)
        if rejected is not None:
            return rejected

        response = self.get_response(request)
        if "RateLimit-Limit" not in response:
            _set_headers(response, result)
        return response

    def _applies(self, path: str) -> bool:
        if not path.startswith("/api/v1/"):
            return False
        if path.rstrip("/").endswith("/health"):
            return False
        if settings.ENVIRONMENT != "production" and path.startswith("/api/v1/test/"):
            return False
        return True
