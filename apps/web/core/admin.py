"""Admin registrations for core models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Restaurant, User


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = [
        "restaurant_name",
        "restaurant_url_name",
        "email",
        "subscription_plan",
        "status",
        "created_at",
    ]
    list_filter = ["status", "subscription_plan", "business_type"]
    search_fields = ["restaurant_name", "restaurant_url_name", "email"]
    prepopulated_fields = {"restaurant_url_name": ("restaurant_name",)}
    readonly_fields = ["created_at", "updated_at", "email_confirmation_expires"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "full_name", "restaurant", "status"]
    list_filter = ["status", "is_staff", "restaurant"]
    search_fields = ["username", "email", "full_name"]
    fieldsets = (
        *BaseUserAdmin.fieldsets,  # type: ignore[misc]
        (
            "Restaurant",
            {"fields": ("restaurant", "full_name", "phone", "status")},
        ),
    )
    add_fieldsets = (
        *BaseUserAdmin.add_fieldsets,
        ("Restaurant", {"fields": ("restaurant", "email", "status")}),
    )
