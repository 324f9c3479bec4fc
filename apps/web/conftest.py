"""
Pytest configuration for Django app tests.
"""

from collections.abc import Callable
from typing import Any

from django.core.cache import cache
from django.test import Client as DjangoClient

import pytest

from apps.web.accounts.models import Role
from apps.web.accounts.tests.factories import grant_role
from apps.web.accounts.tokens import create_access_token
from apps.web.core.models import Restaurant
from apps.web.core.tests.factories import RestaurantFactory, UserFactory
from apps.web.restaurant.models import RestaurantLocation
from apps.web.restaurant.tests.factories import LocationFactory


@pytest.fixture(autouse=True)
def _clear_cache() -> None:
    """Rate limit windows and idempotency keys live in the cache."""
    cache.clear()


@pytest.fixture(autouse=True)
def _fast_passwords(settings: Any) -> None:
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def api_client() -> DjangoClient:
    """Django test client for API requests."""
    return DjangoClient()


@pytest.fixture
def auth_headers() -> Callable[[Any], dict[str, str]]:
    """Build the Authorization header for a user."""

    def build(user: Any) -> dict[str, str]:
        token, _expires_in = create_access_token(user)
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    return build


@pytest.fixture
def restaurant(db) -> Restaurant:
    """An active restaurant."""
    return RestaurantFactory(
        restaurant_url_name="tonys-pizza", restaurant_name="Tony's Pizza"
    )


@pytest.fixture
def location(restaurant: Restaurant) -> RestaurantLocation:
    """Primary location of the restaurant."""
    return LocationFactory(restaurant=restaurant, url_name="centro", is_primary=True)


@pytest.fixture
def restaurant_admin(restaurant: Restaurant, location: RestaurantLocation) -> Any:
    """Restaurant administrator of the restaurant fixture."""
    user = UserFactory(restaurant=restaurant, username="tonyadmin")
    grant_role(user, Role.RESTAURANT_ADMINISTRATOR, restaurant=restaurant)
    return user


@pytest.fixture
def waiter(restaurant: Restaurant, location: RestaurantLocation) -> Any:
    """Waiter working at the primary location."""
    user = UserFactory(restaurant=restaurant, username="waiter")
    grant_role(user, Role.WAITER, restaurant=restaurant, location=location)
    return user


@pytest.fixture
def superadmin(db) -> Any:
    """System superadmin (no restaurant)."""
    user = UserFactory(restaurant=None, username="root")
    grant_role(user, Role.SUPERADMIN)
    return user


@pytest.fixture
def customer(db) -> Any:
    """Customer account without restaurant or roles."""
    return UserFactory(restaurant=None, username="customer")
