"""
Pydantic schemas for menu items, categories and restaurant languages.
"""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

LANGUAGE_CODE_PATTERN = r"^[a-z]{2}(-[A-Z]{2})?$"


# =============================================================================
# Menu items
# =============================================================================


class ItemTranslationSchema(BaseModel):
    language_code: str = Field(..., pattern=LANGUAGE_CODE_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    ingredients: str = Field(default="", max_length=2000)
    preparation_method: str = Field(default="", max_length=2000)


class ItemCategorySchema(BaseModel):
    category_id: int
    display_order: int = Field(default=0, ge=0)


def _categories_from_ids(data: Any) -> Any:
    """Accept a plain category_ids list; position becomes the display order."""
    if isinstance(data, dict) and "category_ids" in data and "categories" not in data:
        data = dict(data)
        data["categories"] = [
            {"category_id": cid, "display_order": i}
            for i, cid in enumerate(data.pop("category_ids") or [])
        ]
    return data


class MenuItemCreateRequest(BaseModel):
    """
    Request body for POST /restaurants/{id}/menu-items.

    Example:
        {
            "sku": "PIZ-001",
            "base_price": "42.90",
            "translations": [{"language_code": "pt-BR", "name": "Margherita"}],
            "categories": [{"category_id": 1, "display_order": 10}]
        }
    """

    sku: str = Field(default="", max_length=100)
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    preparation_time_minutes: int | None = Field(default=None, ge=0, le=1440)
    is_available: bool = True
    is_featured: bool = False
    translations: list[ItemTranslationSchema] = Field(..., min_length=1)
    categories: list[ItemCategorySchema] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_categories(cls, data: Any) -> Any:
        return _categories_from_ids(data)


class MenuItemUpdateRequest(BaseModel):
    """Omitted fields keep their values; sent translations or categories replace all."""

    sku: str | None = Field(default=None, max_length=100)
    base_price: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )
    preparation_time_minutes: int | None = Field(default=None, ge=0, le=1440)
    is_available: bool | None = None
    is_featured: bool | None = None
    translations: list[ItemTranslationSchema] | None = Field(default=None, min_length=1)
    categories: list[ItemCategorySchema] | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_categories(cls, data: Any) -> Any:
        return _categories_from_ids(data)


# =============================================================================
# Categories
# =============================================================================


class CategoryTranslationSchema(BaseModel):
    language_id: int | None = None
    language_code: str | None = Field(default=None, pattern=LANGUAGE_CODE_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)

    @model_validator(mode="after")
    def _language_required(self) -> "CategoryTranslationSchema":
        if self.language_id is None and not self.language_code:
            raise ValueError("language_id or language_code is required")
        return self


class CategoryCreateRequest(BaseModel):
    parent_id: int | None = None
    display_order: int = Field(default=0, ge=0)
    status: Literal["active", "inactive"] = "active"
    translations: list[CategoryTranslationSchema] = Field(..., min_length=1)


class CategoryUpdateRequest(BaseModel):
    parent_id: int | None = None
    display_order: int | None = Field(default=None, ge=0)
    status: Literal["active", "inactive"] | None = None
    translations: list[CategoryTranslationSchema] | None = None


class DisplayOrderEntry(BaseModel):
    id: int
    display_order: int = Field(..., ge=0)


class DisplayOrderRequest(BaseModel):
    categories: list[DisplayOrderEntry] = Field(..., min_length=1)


class CategoryStatusRequest(BaseModel):
    status: Literal["active", "inactive"] | None = None


# =============================================================================
# Languages
# =============================================================================


class RestaurantLanguageSchema(BaseModel):
    language_id: int
    display_order: int = Field(default=1, ge=1)
    is_default: bool = False
    is_active: bool = True


class RestaurantLanguagesRequest(BaseModel):
    """Full replacement of a restaurant's languages; exactly one default."""

    languages: list[RestaurantLanguageSchema] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _exactly_one_default(self) -> "RestaurantLanguagesRequest":
        defaults = [lang for lang in self.languages if lang.is_default]
        if len(defaults) != 1:
            raise ValueError("Exactly one language must be the default")
        ids = [lang.language_id for lang in self.languages]
        if len(set(ids)) != len(ids):
            raise ValueError("Languages must not repeat")
        return self
