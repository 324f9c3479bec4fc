"""
Tests for role-based access rules.
"""

import pytest

from apps.web.accounts.models import Role
from apps.web.accounts.permissions import (
    assignable_roles,
    can_access_restaurant,
    can_access_user,
    can_manage_restaurant_content,
    can_manage_users,
    effective_role,
    managed_location_ids,
)
from apps.web.accounts.roles import seed_roles
from apps.web.accounts.tests.factories import grant_role
from apps.web.core.tests.factories import RestaurantFactory, UserFactory
from apps.web.restaurant.tests.factories import LocationFactory


@pytest.fixture
def location_admin(restaurant, location):
    user = UserFactory(restaurant=restaurant, username="manager")
    grant_role(
        user, Role.LOCATION_ADMINISTRATOR, restaurant=restaurant, location=location
    )
    return user


@pytest.mark.django_db
class TestEffectiveRole:
    def test_lowest_level_wins(self, waiter, restaurant, location):
        grant_role(
            waiter,
            Role.LOCATION_ADMINISTRATOR,
            restaurant=restaurant,
            location=location,
            is_primary=False,
        )
        assert effective_role(waiter) == Role.LOCATION_ADMINISTRATOR

    def test_django_superuser_counts_as_superadmin(self, db):
        user = UserFactory(restaurant=None, is_superuser=True)
        assert effective_role(user) == Role.SUPERADMIN

    def test_customer_has_no_role(self, customer):
        assert effective_role(customer) is None

    def test_inactive_grant_is_ignored(self, waiter):
        waiter.role_grants.update(is_active=False)
        assert effective_role(waiter) is None


@pytest.mark.django_db
class TestAssignableRoles:
    @pytest.fixture(autouse=True)
    def _roles(self, db):
        seed_roles()

    def names(self, user):
        return set(assignable_roles(user).values_list("name", flat=True))

    def test_superadmin(self, superadmin):
        assert Role.SUPERADMIN not in self.names(superadmin)
        assert Role.RESTAURANT_ADMINISTRATOR in self.names(superadmin)

    def test_restaurant_admin(self, restaurant_admin):
        names = self.names(restaurant_admin)
        assert Role.SUPERADMIN not in names
        assert Role.LOCATION_ADMINISTRATOR in names

    def test_location_admin(self, location_admin):
        names = self.names(location_admin)
        assert Role.RESTAURANT_ADMINISTRATOR not in names
        assert Role.LOCATION_ADMINISTRATOR in names

    def test_staff_only_non_admin_roles(self, waiter):
        assert self.names(waiter).isdisjoint(Role.ADMIN_ROLES)
        assert Role.WAITER in self.names(waiter)


@pytest.mark.django_db
class TestRestaurantAccess:
    def test_member_reads_but_does_not_modify(self, waiter, restaurant):
        assert can_access_restaurant(waiter, restaurant.pk)
        assert not can_access_restaurant(waiter, restaurant.pk, modify=True)

    def test_restaurant_admin_modifies(self, restaurant_admin, restaurant):
        assert can_access_restaurant(restaurant_admin, restaurant.pk, modify=True)

    def test_other_restaurant_is_denied(self, restaurant_admin):
        other = RestaurantFactory()
        assert not can_access_restaurant(restaurant_admin, other.pk)

    def test_superadmin_accesses_everything(self, superadmin):
        other = RestaurantFactory()
        assert can_access_restaurant(superadmin, other.pk, modify=True)

    def test_string_ids_compare_equal(self, waiter, restaurant):
        assert can_access_restaurant(waiter, str(restaurant.pk))

    def test_content_management_needs_admin_role(
        self, waiter, location_admin, restaurant
    ):
        assert can_manage_restaurant_content(location_admin, restaurant.pk)
        assert not can_manage_restaurant_content(waiter, restaurant.pk)


@pytest.mark.django_db
class TestUserManagement:
    def test_managers(self, restaurant_admin, location_admin, waiter):
        assert can_manage_users(restaurant_admin)
        assert can_manage_users(location_admin)
        assert not can_manage_users(waiter)

    def test_managed_locations(self, restaurant_admin, location_admin, location):
        assert managed_location_ids(restaurant_admin) is None
        assert managed_location_ids(location_admin) == {location.pk}

    def test_location_admin_reaches_staff_of_own_location(
        self, location_admin, waiter, restaurant
    ):
        elsewhere = UserFactory(restaurant=restaurant)
        grant_role(
            elsewhere,
            Role.WAITER,
            restaurant=restaurant,
            location=LocationFactory(restaurant=restaurant),
        )

        assert can_access_user(location_admin, waiter)
        assert not can_access_user(location_admin, elsewhere)

    def test_users_always_reach_themselves(self, waiter):
        assert can_access_user(waiter, waiter)
