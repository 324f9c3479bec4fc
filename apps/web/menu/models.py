"""
Menu models - Languages, categories and items with per-language translations.

Menu items link to categories through MenuItemCategory, which carries the
item's display order inside each category.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.web.core.models import Restaurant, RestaurantScopedModel


class Language(models.Model):
    """A language the platform can translate menus into."""

    code = models.CharField(max_length=10, unique=True, help_text="e.g. pt-BR")
    name = models.CharField(max_length=100)
    native_name = models.CharField(max_length=100)
    flag_file = models.CharField(max_length=100, blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class RestaurantLanguage(models.Model):
    """Languages enabled for a restaurant's menu; exactly one is the default."""

    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="languages",
    )
    language = models.ForeignKey(
        Language,
        on_delete=models.CASCADE,
        related_name="restaurant_links",
    )
    display_order = models.PositiveIntegerField(default=1)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "language"],
                name="unique_restaurant_language",
            ),
            models.UniqueConstraint(
                fields=["restaurant"],
                condition=Q(is_default=True),
                name="one_default_language_per_restaurant",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.restaurant} - {self.language.code}"


class CategoryStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class MenuCategory(RestaurantScopedModel):
    """
    Category of menu items (e.g., Appetizers, Drinks).

    Categories can be nested one under another through parent.
    """

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )
    display_order = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=CategoryStatus.choices,
        default=CategoryStatus.ACTIVE,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["display_order", "pk"]
        verbose_name_plural = "menu categories"
        indexes = [
            models.Index(
                fields=["restaurant", "status"],
                name="category_rest_status_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Category {self.pk}"


class MenuCategoryTranslation(models.Model):
    category = models.ForeignKey(
        MenuCategory,
        on_delete=models.CASCADE,
        related_name="translations",
    )
    language = models.ForeignKey(
        Language,
        on_delete=models.CASCADE,
        related_name="category_translations",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["category", "language"],
                name="unique_category_translation",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class MenuItem(RestaurantScopedModel):
    """
    Individual menu item.

    Names and descriptions live in MenuItemTranslation, one row per language.
    """

    sku = models.CharField(max_length=100, blank=True)
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    preparation_time_minutes = models.PositiveIntegerField(null=True, blank=True)
    is_available = models.BooleanField(
        default=True,
        help_text="False = temporarily unavailable",
    )
    is_featured = models.BooleanField(default=False)

    categories = models.ManyToManyField(
        MenuCategory,
        through="MenuItemCategory",
        related_name="items",
    )

    class Meta:
        ordering = ["pk"]
        indexes = [
            models.Index(
                fields=["restaurant", "is_available"],
                name="item_rest_available_idx",
            ),
        ]

    def __str__(self) -> str:
        return self.sku or f"Item {self.pk}"


class MenuItemTranslation(models.Model):
    item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="translations",
    )
    language_code = models.CharField(max_length=10)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    ingredients = models.TextField(blank=True)
    preparation_method = models.TextField(blank=True)

    class Meta:
        ordering = ["language_code"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "language_code"],
                name="unique_item_translation_language",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.language_code}]"


class MenuItemCategory(models.Model):
    """Item <-> category link with the item's position inside the category."""

    item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="category_links",
    )
    category = models.ForeignKey(
        MenuCategory,
        on_delete=models.CASCADE,
        related_name="item_links",
    )
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "category"],
                name="unique_item_category",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.item_id} in {self.category_id} (#{self.display_order})"
