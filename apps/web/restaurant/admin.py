"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import (
    BillingAddress,
    PaymentInfo,
    RestaurantLocation,
    RestaurantMedia,
)


@admin.register(RestaurantLocation)
class RestaurantLocationAdmin(admin.ModelAdmin):
    """Admin for restaurant locations."""

    list_display = ["name", "restaurant", "url_name", "is_primary", "status"]
    list_filter = ["status", "is_primary"]
    search_fields = ["name", "url_name", "restaurant__restaurant_name"]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["restaurant", "name", "url_name", "status", "is_primary"]}),
        ("Contact", {"fields": ["phone", "whatsapp"]}),
        (
            "Address",
            {
                "fields": [
                    "address_zip_code",
                    "address_street",
                    "address_street_number",
                    "address_complement",
                    "address_city",
                    "address_state",
                ]
            },
        ),
        (
            "Operation",
            {"fields": ["operating_hours", "selected_features"]},
        ),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(BillingAddress)
class BillingAddressAdmin(admin.ModelAdmin):
    list_display = ["restaurant", "city", "state", "same_as_restaurant"]
    search_fields = ["restaurant__restaurant_name"]


@admin.register(PaymentInfo)
class PaymentInfoAdmin(admin.ModelAdmin):
    """Card references are read-only; they come from the payment processor."""

    list_display = ["restaurant", "card_brand", "card_last4", "is_active"]
    list_filter = ["is_active", "card_brand"]
    search_fields = ["restaurant__restaurant_name"]
    readonly_fields = [
        "card_token",
        "card_brand",
        "card_last4",
        "expiry_month",
        "expiry_year",
        "created_at",
        "updated_at",
    ]


@admin.register(RestaurantMedia)
class RestaurantMediaAdmin(admin.ModelAdmin):
    list_display = ["original_name", "restaurant", "media_type", "size", "is_active"]
    list_filter = ["media_type", "is_active"]
    search_fields = ["original_name", "restaurant__restaurant_name"]
    readonly_fields = ["mime_type", "size", "created_at", "updated_at"]
