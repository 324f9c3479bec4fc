"""
Restaurant models - Locations, billing, payment references and media.

All models follow the multi-tenancy pattern with RestaurantScopedModel.
"""

import uuid

from django.db import models
from django.db.models import Q

from apps.web.core.models import RestaurantScopedModel

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class LocationStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class RestaurantLocation(RestaurantScopedModel):
    """
    A physical location of a restaurant.

    operating_hours maps monday..sunday and "holidays" to
    {"open": "HH:MM", "close": "HH:MM", "closed": bool}.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    url_name = models.SlugField(max_length=100)
    phone = models.CharField(max_length=20, blank=True)
    whatsapp = models.CharField(max_length=20, blank=True)

    # Address
    address_zip_code = models.CharField(max_length=10, blank=True)
    address_street = models.CharField(max_length=255, blank=True)
    address_street_number = models.CharField(max_length=20, blank=True)
    address_complement = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_state = models.CharField(max_length=50, blank=True)

    operating_hours = models.JSONField(default=dict, blank=True)
    selected_features = models.JSONField(
        default=list,
        blank=True,
        help_text='Feature flags (e.g., ["digital_menu", "waiter_call"])',
    )

    is_primary = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=LocationStatus.choices,
        default=LocationStatus.ACTIVE,
    )

    class Meta:
        ordering = ["-is_primary", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "url_name"],
                name="unique_location_url_name_per_restaurant",
            ),
            models.UniqueConstraint(
                fields=["restaurant"],
                condition=Q(is_primary=True),
                name="one_primary_location_per_restaurant",
            ),
        ]
        indexes = [
            models.Index(
                fields=["restaurant", "status"],
                name="location_rest_status_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.restaurant} - {self.name}"


class BillingAddress(RestaurantScopedModel):
    """Billing address for a restaurant (one per restaurant)."""

    zip_code = models.CharField(max_length=10, blank=True)
    street = models.CharField(max_length=255, blank=True)
    street_number = models.CharField(max_length=20, blank=True)
    complement = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=50, blank=True)
    same_as_restaurant = models.BooleanField(
        default=False,
        help_text="Copied from the primary location address",
    )

    class Meta:
        verbose_name_plural = "billing addresses"
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant"],
                name="unique_billing_address_per_restaurant",
            ),
        ]

    def __str__(self) -> str:
        return f"Billing address for {self.restaurant}"


class PaymentInfo(RestaurantScopedModel):
    """
    Tokenized card reference.

    The card is tokenized by the payment processor in the browser; only the
    payment-method id and display details are stored. PAN and CVV never reach
    the backend.
    """

    card_token = models.CharField(
        max_length=255,
        help_text="Stripe PaymentMethod ID (pm_xxx)",
    )
    card_brand = models.CharField(max_length=20, blank=True)
    card_last4 = models.CharField(max_length=4, blank=True)
    expiry_month = models.PositiveSmallIntegerField(null=True, blank=True)
    expiry_year = models.PositiveSmallIntegerField(null=True, blank=True)
    cardholder_name = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = "payment info"
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant"],
                condition=Q(is_active=True),
                name="one_active_payment_info_per_restaurant",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.card_brand or 'card'} ending {self.card_last4}"


class MediaType(models.TextChoices):
    LOGO = "logo", "Logo"
    FAVICON = "favicon", "Favicon"
    COVER = "cover", "Cover"
    GALLERY = "gallery", "Gallery"


def media_upload_path(instance: "RestaurantMedia", filename: str) -> str:
    return f"restaurants/{instance.restaurant_id}/{instance.media_type}/{filename}"


class RestaurantMedia(RestaurantScopedModel):
    """Uploaded image for a restaurant or one of its locations."""

    location = models.ForeignKey(
        RestaurantLocation,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="media",
    )
    media_type = models.CharField(max_length=20, choices=MediaType.choices)
    file = models.FileField(upload_to=media_upload_path)
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100)
    size = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "restaurant media"
        indexes = [
            models.Index(
                fields=["restaurant", "media_type", "is_active"],
                name="media_rest_type_active_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.media_type}: {self.original_name}"
