"""
Core models - Multi-tenancy foundation.

All tenant-scoped models inherit from RestaurantScopedModel.
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import RestaurantScopedManager


class Restaurant(models.Model):
    """
    Tenant - a restaurant business registered on the platform.

    All data is scoped to a Restaurant. The owner's login credentials live on
    the restaurant administrator User created at registration.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    class BusinessType(models.TextChoices):
        SINGLE = "single", "Single location"
        MULTI = "multi", "Multiple locations"

    class Plan(models.TextChoices):
        STARTER = "starter", "Starter"
        PROFESSIONAL = "professional", "Professional"
        PREMIUM = "premium", "Premium"
        ENTERPRISE = "enterprise", "Enterprise"

    PLAN_LOCATION_LIMITS = {
        Plan.STARTER: 1,
        Plan.PROFESSIONAL: 3,
        Plan.PREMIUM: 10,
        Plan.ENTERPRISE: 999,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant_url_name = models.SlugField(
        max_length=100,
        unique=True,
        help_text="Subdomain / URL-safe identifier",
    )
    restaurant_name = models.CharField(max_length=255)

    # Owner identity
    owner_name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    whatsapp = models.CharField(max_length=20, blank=True)

    # Business profile
    business_type = models.CharField(
        max_length=20,
        choices=BusinessType.choices,
        default=BusinessType.SINGLE,
    )
    cuisine_type = models.CharField(max_length=100, blank=True)
    website = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)

    subscription_plan = models.CharField(
        max_length=20,
        choices=Plan.choices,
        default=Plan.STARTER,
    )
    marketing_consent = models.BooleanField(default=False)
    terms_accepted = models.BooleanField(default=False)

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    email_confirmed = models.BooleanField(default=False)
    email_confirmation_token = models.CharField(
        max_length=64, blank=True, db_index=True
    )
    email_confirmation_expires = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["restaurant_name"]
        indexes = [
            models.Index(fields=["status"], name="restaurant_status_idx"),
        ]

    def __str__(self) -> str:
        return self.restaurant_name

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def max_locations(self) -> int:
        """Number of locations allowed by the subscription plan."""
        return self.PLAN_LOCATION_LIMITS.get(self.subscription_plan, 1)


class User(AbstractUser):
    """
    Custom user model with restaurant association.

    Users belong to one Restaurant (staff and administrators) or none
    (system superadmins and customers ordering across restaurants).
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending confirmation"
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        SUSPENDED = "suspended", "Suspended"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=255, unique=True, null=True, blank=True)
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="users",
        help_text="Null for system users and customers",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )

    email_confirmed = models.BooleanField(default=False)
    email_confirmation_token = models.CharField(
        max_length=64, blank=True, db_index=True
    )
    email_confirmation_expires = models.DateTimeField(null=True, blank=True)
    first_login_password_change = models.BooleanField(
        default=False,
        help_text="Force a password change on next login",
    )

    created_by = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_users",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["username"]
        indexes = [
            models.Index(fields=["restaurant", "status"], name="user_rest_status_idx"),
        ]

    def __str__(self) -> str:
        if self.restaurant:
            return f"{self.username} ({self.restaurant.restaurant_url_name})"
        return self.username


class RestaurantScopedModel(models.Model):
    """
    Abstract base for all tenant-scoped models.

    Provides:
    - Automatic restaurant FK
    - RestaurantScopedManager for filtered queries
    - Created/updated timestamps
    """

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="%(class)ss",  # e.g., restaurant.menuitems, restaurant.orders
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantScopedManager()

    class Meta:
        abstract = True
