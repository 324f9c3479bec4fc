"""
Request pipeline middleware.

Order in settings.MIDDLEWARE (outermost first):
    RequestLogMiddleware -> CorsMiddleware -> ApiVersionMiddleware ->
    GeneralRateLimitMiddleware -> XSSSanitizationMiddleware ->
    TenantMiddleware -> ErrorHandlerMiddleware
"""

import json
import logging
import re
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse, QueryDict

from .errors import exception_to_response
from .responses import error_response, json_response, timestamp
from .sanitizers import sanitize_text, sanitize_value

if TYPE_CHECKING:
    from .models import Restaurant

logger = logging.getLogger(__name__)

SUPPORTED_API_VERSIONS = ["1"]
DEFAULT_API_VERSION = "1"

_PATH_VERSION = re.compile(r"^/api/v(\d+)/")
_ACCEPT_VERSION = re.compile(r"version=(\d+)")
_REDACTED_KEYS = ("password", "token", "card", "cvv", "secret")


class RequestLogMiddleware:
    """Logs each request with timing; bodies are logged with secrets redacted."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        started = time.monotonic()
        ip = request.META.get("REMOTE_ADDR", "")

        logger.info("%s %s from %s", request.method, request.get_full_path(), ip)
        if request.method in ("POST", "PUT", "PATCH") and request.content_type == (
            "application/json"
        ):
            logger.debug("Request body: %s", self._redacted_body(request))

        response = self.get_response(request)

        duration_ms = (time.monotonic() - started) * 1000
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
        )
        if response.status_code >= 400 and not response.streaming:
            logger.debug("Error response body: %s", response.content[:1000])
        return response

    @classmethod
    def _redact(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: "[REDACTED]"
                if any(s in str(k).lower() for s in _REDACTED_KEYS)
                else cls._redact(v)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [cls._redact(v) for v in value]
        return value

    def _redacted_body(self, request: HttpRequest) -> Any:
        try:
            return self._redact(json.loads(request.body or b"{}"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "<unparseable>"


class CorsMiddleware:
    """CORS headers for the SPA frontend; answers preflight for /api/ routes."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        if request.method == "OPTIONS":
            response = HttpResponse(status=204)
        else:
            response = self.get_response(request)

        response["Access-Control-Allow-Origin"] = settings.CORS_ALLOW_ORIGIN
        response["Access-Control-Allow-Methods"] = (
            "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        )
        response["Access-Control-Allow-Headers"] = (
            "Authorization, Content-Type, Accept, X-API-Version, X-Restaurant-Slug, "
            "Idempotency-Key"
        )
        response["Access-Control-Expose-Headers"] = (
            "X-API-Version, Link, Retry-After, RateLimit-Limit, RateLimit-Remaining"
        )
        return response


class ApiVersionMiddleware:
    """
    Resolves the API version for /api/ requests.

    Version is determined by (in order):
    1. Path prefix (/api/v1/...)
    2. Accept header (application/json; version=1)
    3. X-API-Version header
    4. ?version= query parameter

    Unsupported versions are rejected with 400. JSON object responses get
    _version and _timestamp fields.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        version = self.get_version(request)
        if version not in SUPPORTED_API_VERSIONS:
            supported = ", ".join(SUPPORTED_API_VERSIONS)
            return json_response(
                {
                    "error": "Unsupported API version",
                    "message": (
                        f"API version {version} is not supported. "
                        f"Supported versions: {supported}"
                    ),
                    "supportedVersions": SUPPORTED_API_VERSIONS,
                    "timestamp": timestamp(),
                },
                status=400,
            )

        request.api_version = version  # type: ignore[attr-defined]
        response = self.get_response(request)

        response["X-API-Version"] = version
        if "/docs" not in request.path:
            response["Link"] = f'</api/v{version}/docs>; rel="documentation"'
        self._inject_version(response, version)
        return response

    @staticmethod
    def get_version(request: HttpRequest) -> str:
        match = _PATH_VERSION.match(request.path)
        if match:
            return match.group(1)

        match = _ACCEPT_VERSION.search(request.headers.get("Accept", ""))
        if match:
            return match.group(1)

        header = request.headers.get("X-API-Version")
        if header:
            return header.strip()

        return request.GET.get("version") or DEFAULT_API_VERSION

    @staticmethod
    def _inject_version(response: HttpResponse, version: str) -> None:
        if response.streaming or not response.get("Content-Type", "").startswith(
            "application/json"
        ):
            return
        try:
            body = json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return
        if not isinstance(body, dict):
            return
        body["_version"] = version
        body["_timestamp"] = timestamp()
        response.content = json.dumps(body)


class InvalidJSONBody(Exception):
    pass


class XSSSanitizationMiddleware:
    """
    Sanitizes all user input before it reaches a view.

    - Request body is parsed (JSON or form) and sanitized into request.payload
    - request.GET is replaced with a sanitized copy
    - String URL parameters are sanitized in process_view
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        try:
            self._sanitize_query(request)
            body = self._parse_body(request)
            request.payload = sanitize_value(body)  # type: ignore[attr-defined]
        except InvalidJSONBody:
            return error_response("Invalid JSON in request body", 400)
        except Exception as exc:
            logger.exception(
                "Sanitization failed for %s %s", request.method, request.path
            )
            return exception_to_response(request, exc)

        return self.get_response(request)

    def process_view(
        self,
        request: HttpRequest,
        view_func: Callable[..., Any],
        view_args: tuple[Any, ...],
        view_kwargs: dict[str, Any],
    ) -> None:
        for key, value in view_kwargs.items():
            if isinstance(value, str):
                view_kwargs[key] = sanitize_text(value)
        request.url_params = dict(view_kwargs)  # type: ignore[attr-defined]

    @staticmethod
    def _sanitize_query(request: HttpRequest) -> None:
        sanitized = QueryDict(mutable=True)
        for key, values in request.GET.lists():
            sanitized.setlist(sanitize_text(key), [sanitize_text(v) for v in values])
        request.GET = sanitized

    @staticmethod
    def _parse_body(request: HttpRequest) -> Any:
        if request.method not in ("POST", "PUT", "PATCH", "DELETE"):
            return {}

        if request.content_type == "application/json":
            if not request.body:
                return {}
            try:
                return json.loads(request.body)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise InvalidJSONBody from exc

        if request.content_type in (
            "application/x-www-form-urlencoded",
            "multipart/form-data",
        ):
            return {
                key: values if len(values) > 1 else values[0]
                for key, values in request.POST.lists()
            }
        return {}


class TenantMiddleware:
    """
    Middleware that attaches the current restaurant to the request.

    Restaurant is determined by (in order):
    1. X-Restaurant-Slug header (for API calls from the SPA or other services)
    2. Subdomain (tonys-pizza.example.com)

    Sets request.restaurant (None when no active restaurant matches).
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Skip for admin
        if request.path.startswith("/admin/"):
            request.restaurant = None  # type: ignore[attr-defined]
            return self.get_response(request)

        request.restaurant = self._get_restaurant(request)  # type: ignore[attr-defined]
        return self.get_response(request)

    def _get_restaurant(self, request: HttpRequest) -> "Restaurant | None":
        """Resolve restaurant from request."""
        # Lazy import to avoid circular dependency
        from .models import Restaurant

        # 1. Header
        slug = request.headers.get("X-Restaurant-Slug")
        if slug:
            return Restaurant.objects.filter(
                restaurant_url_name=slug.lower(), status=Restaurant.Status.ACTIVE
            ).first()

        # 2. Subdomain
        host = request.get_host().split(":")[0]  # Remove port
        if "." in host:
            subdomain = host.split(".")[0].lower()
            return Restaurant.objects.filter(
                restaurant_url_name=subdomain, status=Restaurant.Status.ACTIVE
            ).first()

        return None


class ErrorHandlerMiddleware:
    """Converts exceptions raised by views into JSON error envelopes."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(
        self, request: HttpRequest, exception: Exception
    ) -> HttpResponse | None:
        if request.path.startswith("/admin/"):
            return None
        return exception_to_response(request, exception)
