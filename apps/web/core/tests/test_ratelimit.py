"""
Tests for sliding-window rate limiting.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from django.core.cache import cache
from django.test import Client as DjangoTestClient
from django.test import RequestFactory
from django.urls import reverse

import pytest

from apps.web.core import ratelimit
from apps.web.core.ratelimit import get_limit, hit, rate_limit


class SlowCache:
    """Shared cache whose reads yield to other threads before returning."""

    def get(self, key, default=None):
        value = cache.get(key, default)
        time.sleep(0.01)
        return value

    def set(self, key, value, timeout=None):
        cache.set(key, value, timeout=timeout)


class TestGetLimit:
    def test_development_limits_are_relaxed(self, settings):
        settings.ENVIRONMENT = "development"
        assert get_limit("auth")[:2] == (900, 50)

    def test_production_limits(self, settings):
        settings.ENVIRONMENT = "production"
        assert get_limit("auth")[:2] == (900, 5)
        assert get_limit("restaurant_creation")[:2] == (3600, 3)

    def test_settings_override(self, settings):
        settings.RATE_LIMITS = {"upload": {"max": 2}}
        window, max_requests, _message = get_limit("upload")
        assert (window, max_requests) == (3600, 2)

    def test_unknown_class_is_rejected_at_decoration(self):
        with pytest.raises(ValueError):
            rate_limit("nonexistent")


class TestHit:
    def test_counts_down_then_blocks(self, settings):
        settings.RATE_LIMITS = {"search": {"max": 2, "window": 60}}

        first = hit("search", "1.2.3.4")
        second = hit("search", "1.2.3.4")
        third = hit("search", "1.2.3.4")

        assert (first.allowed, first.remaining) == (True, 1)
        assert (second.allowed, second.remaining) == (True, 0)
        assert third.allowed is False
        assert 1 <= third.reset_after <= 60

    def test_keys_are_independent(self, settings):
        settings.RATE_LIMITS = {"search": {"max": 1}}

        assert hit("search", "1.1.1.1").allowed
        assert hit("search", "2.2.2.2").allowed
        assert not hit("search", "1.1.1.1").allowed

    def test_window_slides(self, settings):
        """Requests older than the window no longer count."""
        settings.RATE_LIMITS = {"search": {"max": 1, "window": 60}}

        with patch.object(ratelimit.time, "time", return_value=1000.0):
            assert hit("search", "ip").allowed
            assert not hit("search", "ip").allowed
        with patch.object(ratelimit.time, "time", return_value=1061.0):
            assert hit("search", "ip").allowed

    def test_concurrent_hits_never_exceed_the_limit(self, settings):
        """Threads racing on one key are admitted exactly up to the limit."""
        settings.RATE_LIMITS = {"search": {"max": 3, "window": 60}}

        with patch.object(ratelimit, "cache", SlowCache()):
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda _: hit("search", "ip"), range(8)))

        assert sum(r.allowed for r in results) == 3
        assert len(cache.get("ratelimit:search:ip")) == 3


class TestClientIp:
    def test_forwarded_for_wins(self):
        request = RequestFactory().get("/", HTTP_X_FORWARDED_FOR="9.9.9.9, 10.0.0.1")
        assert ratelimit.client_ip(request) == "9.9.9.9"

    def test_remote_addr_fallback(self):
        request = RequestFactory().get("/", REMOTE_ADDR="10.0.0.7")
        assert ratelimit.client_ip(request) == "10.0.0.7"


@pytest.mark.django_db
class TestRateLimitedViews:
    """Tests for the decorator and the general middleware."""

    def test_login_returns_429_with_retry_after(self, settings):
        settings.RATE_LIMITS = {"auth": {"max": 2}}
        http_client = DjangoTestClient()
        payload = {"email": "nobody@example.com", "password": "wrong"}

        for _ in range(2):
            response = http_client.post(
                reverse("v1:auth:login"), data=payload, content_type="application/json"
            )
            assert response.status_code == 401

        response = http_client.post(
            reverse("v1:auth:login"), data=payload, content_type="application/json"
        )

        assert response.status_code == 429
        error = response.json()["error"]
        assert error["code"] == 429
        assert error["message"] == (
            "Too many authentication attempts, please try again later."
        )
        assert error["retryAfter"] >= 1
        assert response["Retry-After"] == str(error["retryAfter"])

    def test_general_limit_applies_to_versioned_api(self, settings):
        settings.RATE_LIMITS = {"general": {"max": 1}}
        http_client = DjangoTestClient()

        assert http_client.get(reverse("v1:docs")).status_code == 200
        response = http_client.get(reverse("v1:docs"))

        assert response.status_code == 429
        assert response.json()["error"]["message"] == (
            "Too many requests from this IP, please try again later."
        )

    def test_health_is_exempt(self, settings):
        settings.RATE_LIMITS = {"general": {"max": 1}}
        http_client = DjangoTestClient()

        for _ in range(3):
            assert http_client.get(reverse("v1:health")).status_code == 200

    def test_test_routes_are_exempt_outside_production(self, settings):
        settings.RATE_LIMITS = {"general": {"max": 1}}
        http_client = DjangoTestClient()

        for _ in range(3):
            assert http_client.get(reverse("v1:test_simple")).status_code == 200

    def test_rate_limit_headers_on_allowed_response(self):
        response = DjangoTestClient().get(reverse("v1:docs"))

        assert response["RateLimit-Limit"] == "1000"
        assert response["RateLimit-Remaining"] == "999"
