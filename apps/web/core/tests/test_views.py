"""
Tests for core views.
"""

from django.test import Client as DjangoTestClient
from django.urls import reverse

import pytest


@pytest.mark.django_db
class TestHealth:
    def test_root_health(self):
        response = DjangoTestClient().get(reverse("health"))

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health_reports_environment(self):
        response = DjangoTestClient().get(reverse("v1:health"))

        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["environment"] == "development"
        assert body["uptime"] >= 0

    def test_health_rejects_post(self):
        response = DjangoTestClient().post(reverse("v1:health"))
        assert response.status_code == 405


@pytest.mark.django_db
class TestDocs:
    def test_lists_endpoints_and_limits(self, settings):
        settings.RATE_LIMITS = {"auth": {"max": 7}}

        response = DjangoTestClient().get(reverse("v1:docs"))

        body = response.json()
        assert body["baseUrl"] == "/api/v1"
        assert "orders" in body["endpoints"]
        assert body["rateLimit"]["auth"] == {"windowSeconds": 900, "max": 7}


@pytest.mark.django_db
class TestNotFound:
    def test_legacy_unknown_route(self):
        response = DjangoTestClient().post("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["message"] == "Cannot POST /api/nothing-here"
