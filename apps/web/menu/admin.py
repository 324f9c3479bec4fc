"""Admin registration for menu models."""

from django.contrib import admin

from .models import (
    Language,
    MenuCategory,
    MenuCategoryTranslation,
    MenuItem,
    MenuItemCategory,
    MenuItemTranslation,
    RestaurantLanguage,
)


class MenuCategoryTranslationInline(admin.TabularInline):
    """Inline for category names per language."""

    model = MenuCategoryTranslation
    extra = 0
    fields = ["language", "name", "description"]


class MenuItemTranslationInline(admin.TabularInline):
    """Inline for item names per language."""

    model = MenuItemTranslation
    extra = 0
    fields = ["language_code", "name", "description"]


class MenuItemCategoryInline(admin.TabularInline):
    model = MenuItemCategory
    extra = 0
    fields = ["category", "display_order"]


@admin.register(Language)
class LanguageAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "native_name", "display_order", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["code", "name"]


@admin.register(RestaurantLanguage)
class RestaurantLanguageAdmin(admin.ModelAdmin):
    list_display = ["restaurant", "language", "display_order", "is_default"]
    list_filter = ["is_default", "is_active"]


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    """Admin for menu categories."""

    list_display = ["__str__", "restaurant", "parent", "display_order", "status"]
    list_filter = ["status", "restaurant"]
    inlines = [MenuCategoryTranslationInline]
    readonly_fields = ["created_at", "updated_at", "created_by", "updated_by"]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """Admin for menu items."""

    list_display = [
        "__str__",
        "restaurant",
        "base_price",
        "is_available",
        "is_featured",
    ]
    list_filter = ["is_available", "is_featured", "restaurant"]
    search_fields = ["sku", "translations__name"]
    inlines = [MenuItemTranslationInline, MenuItemCategoryInline]
    readonly_fields = ["created_at", "updated_at"]
