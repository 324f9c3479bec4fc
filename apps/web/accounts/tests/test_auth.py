"""
Tests for login, token handling and the current-user endpoint.
"""

from django.test import Client as DjangoTestClient
from django.urls import reverse

import pytest
from jose import jwt

from apps.web.accounts.tokens import ALGORITHM, create_access_token, decode_access_token
from apps.web.core.models import User
from apps.web.core.tests.factories import UserFactory


def post_login(payload):
    return DjangoTestClient().post(
        reverse("v1:auth:login"), data=payload, content_type="application/json"
    )


@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/v1/auth/login."""

    def test_login_with_email(self, restaurant_admin, restaurant):
        response = post_login(
            {"email": "tonyadmin@example.com", "password": "testpass123"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["expires_in"] == 24 * 60 * 60
        assert data["user"]["username"] == "tonyadmin"
        assert data["user"]["primary_role"] == "restaurant_administrator"
        assert data["restaurant"]["restaurant_url_name"] == "tonys-pizza"

    def test_login_with_username_in_email_field(self, restaurant_admin):
        response = post_login({"email": "TonyAdmin", "password": "testpass123"})
        assert response.status_code == 200

    def test_login_with_username_field(self, restaurant_admin):
        response = post_login({"username": "tonyadmin", "password": "testpass123"})
        assert response.status_code == 200

    def test_login_records_last_login(self, restaurant_admin):
        post_login({"username": "tonyadmin", "password": "testpass123"})

        restaurant_admin.refresh_from_db()
        assert restaurant_admin.last_login is not None

    def test_remember_me_extends_lifetime(self, restaurant_admin):
        response = post_login(
            {"username": "tonyadmin", "password": "testpass123", "remember_me": True}
        )

        data = response.json()["data"]
        assert data["expires_in"] == 30 * 24 * 60 * 60
        assert data["remember_me"] is True
        claims = decode_access_token(data["token"])
        assert claims["remember_me"] is True

    def test_wrong_password(self, restaurant_admin):
        response = post_login({"username": "tonyadmin", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"

    def test_unknown_user_gets_same_message(self, db):
        response = post_login({"email": "ghost@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"

    def test_pending_account_is_told_to_confirm(self, db):
        """Unconfirmed accounts get a distinct code so the client can offer a resend."""
        UserFactory(
            username="pending",
            restaurant=None,
            status=User.Status.PENDING,
            email_confirmed=False,
        )

        response = post_login({"username": "pending", "password": "testpass123"})

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "PENDING_CONFIRMATION"
        assert error["details"] == {"email": "pending@example.com"}

    def test_suspended_account_is_rejected(self, db):
        UserFactory(username="banned", restaurant=None, status=User.Status.SUSPENDED)

        response = post_login({"username": "banned", "password": "testpass123"})

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Account is suspended"

    def test_identifier_is_required(self, db):
        response = post_login({"password": "testpass123"})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["type"] == "validation"


@pytest.mark.django_db
class TestTokens:
    def test_claims(self, waiter, restaurant):
        token, expires_in = create_access_token(waiter)

        claims = decode_access_token(token)
        assert claims["sub"] == str(waiter.pk)
        assert claims["restaurant_id"] == str(restaurant.pk)
        assert claims["roles"] == ["waiter"]
        assert expires_in == 86400

    def test_expired_token_is_rejected(self, customer, settings):
        token = jwt.encode(
            {"sub": str(customer.pk), "exp": 1},
            settings.JWT_SECRET_KEY,
            algorithm=ALGORITHM,
        )

        response = DjangoTestClient().get(
            reverse("v1:auth:me"), HTTP_AUTHORIZATION=f"Bearer {token}"
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token expired"

    def test_token_signed_with_other_key_is_rejected(self, customer):
        token = jwt.encode({"sub": str(customer.pk)}, "other-key", algorithm=ALGORITHM)

        response = DjangoTestClient().get(
            reverse("v1:auth:me"), HTTP_AUTHORIZATION=f"Bearer {token}"
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    def test_deactivated_user_token_stops_working(self, waiter, auth_headers):
        headers = auth_headers(waiter)
        waiter.status = User.Status.INACTIVE
        waiter.save()

        response = DjangoTestClient().get(reverse("v1:auth:me"), **headers)

        assert response.status_code == 403


@pytest.mark.django_db
class TestMe:
    """Tests for GET /api/v1/auth/me."""

    def test_returns_user_roles_and_locations(self, waiter, location, auth_headers):
        response = DjangoTestClient().get(reverse("v1:auth:me"), **auth_headers(waiter))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["roles"][0]["role"] == "waiter"
        assert data["user"]["roles"][0]["location_id"] == str(location.pk)
        assert data["user"]["primary_location_id"] == str(location.pk)
        assert data["restaurant"]["restaurant_name"] == "Tony's Pizza"

    def test_customer_has_no_restaurant(self, customer, auth_headers):
        response = DjangoTestClient().get(
            reverse("v1:auth:me"), **auth_headers(customer)
        )

        data = response.json()["data"]
        assert data["restaurant"] is None
        assert data["user"]["roles"] == []

    def test_requires_token(self, db):
        response = DjangoTestClient().get(reverse("v1:auth:me"))
        assert response.status_code == 401


@pytest.mark.django_db
class TestLogout:
    def test_logout_is_stateless(self):
        response = DjangoTestClient().post(reverse("v1:auth:logout"))

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out"
