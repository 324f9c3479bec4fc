"""
Account models - roles and role/location grants for platform users.

Roles are system-wide definitions. UserRole grants a role to a user inside a
restaurant, optionally narrowed to a single location.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q


class Role(models.Model):
    """A role definition (seeded by setup_database)."""

    SUPERADMIN = "superadmin"
    RESTAURANT_ADMINISTRATOR = "restaurant_administrator"
    LOCATION_ADMINISTRATOR = "location_administrator"
    WAITER = "waiter"
    FOOD_RUNNER = "food_runner"
    KDS_OPERATOR = "kds_operator"
    POS_OPERATOR = "pos_operator"

    ADMIN_ROLES = (SUPERADMIN, RESTAURANT_ADMINISTRATOR, LOCATION_ADMINISTRATOR)

    class Scope(models.TextChoices):
        SYSTEM = "system", "System"
        RESTAURANT = "restaurant", "Restaurant"
        LOCATION = "location", "Location"

    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    level = models.PositiveSmallIntegerField(
        default=5,
        help_text="1 = highest authority, 5 = lowest",
    )
    is_admin_role = models.BooleanField(default=False)
    can_manage_users = models.BooleanField(default=False)
    can_manage_locations = models.BooleanField(default=False)
    scope = models.CharField(
        max_length=20,
        choices=Scope.choices,
        default=Scope.LOCATION,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["level", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(level__gte=1) & Q(level__lte=5),
                name="role_level_between_1_and_5",
            ),
        ]

    def __str__(self) -> str:
        return self.display_name


class UserRole(models.Model):
    """
    A role granted to a user.

    restaurant is null only for system-scoped roles (superadmin).
    location is null for restaurant-wide grants.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="role_grants",
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.PROTECT,
        related_name="grants",
    )
    restaurant = models.ForeignKey(
        "core.Restaurant",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="role_grants",
    )
    location = models.ForeignKey(
        "restaurant.RestaurantLocation",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="role_grants",
    )
    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_primary", "role__level"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_primary=True),
                name="one_primary_role_per_user",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "is_active"], name="userrole_user_active_idx"),
        ]

    def __str__(self) -> str:
        where = self.location or self.restaurant or "system"
        return f"{self.user} - {self.role.name} @ {where}"


class UserLocationAssignment(models.Model):
    """Locations a user works at; one of them is their primary location."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="location_assignments",
    )
    location = models.ForeignKey(
        "restaurant.RestaurantLocation",
        on_delete=models.CASCADE,
        related_name="user_assignments",
    )
    is_primary = models.BooleanField(default=False)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_primary", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "location"],
                name="unique_user_location_assignment",
            ),
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(is_primary=True),
                name="one_primary_location_per_user",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.location}"
