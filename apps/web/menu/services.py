"""
Menu services - items, categories and restaurant languages.

Multi-row writes (an item with its translations and category links, a
category with its translations, a restaurant's language list) run in a
single transaction: either every row is written or none is.
"""

import logging
from typing import Any

from django.db import transaction
from django.db.models import F, OuterRef, Prefetch, Q, QuerySet, Subquery

from apps.web.core.exceptions import NotFound, ValidationFailed
from apps.web.core.models import Restaurant

from .models import (
    CategoryStatus,
    Language,
    MenuCategory,
    MenuCategoryTranslation,
    MenuItem,
    MenuItemCategory,
    MenuItemTranslation,
    RestaurantLanguage,
)
from .serializers import (
    CategoryCreateRequest,
    CategoryTranslationSchema,
    CategoryUpdateRequest,
    DisplayOrderEntry,
    ItemCategorySchema,
    ItemTranslationSchema,
    MenuItemCreateRequest,
    MenuItemUpdateRequest,
    RestaurantLanguageSchema,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "pt-BR"

ITEM_FIELDS = (
    "sku",
    "base_price",
    "preparation_time_minutes",
    "is_available",
    "is_featured",
)


# =============================================================================
# Helpers
# =============================================================================


def category_label(category: MenuCategory, language_code: str) -> str:
    """Category name in a language, or a synthesized label when untranslated."""
    for translation in category.translations.all():
        if translation.language.code == language_code:
            return translation.name
    return f"Category {category.pk}"


def _category_translations_prefetch() -> Prefetch:
    return Prefetch(
        "translations",
        queryset=MenuCategoryTranslation.objects.select_related("language"),
    )


def _check_language_codes(translations: list[ItemTranslationSchema]) -> None:
    codes = {t.language_code for t in translations}
    known = set(
        Language.objects.filter(code__in=codes, is_active=True).values_list(
            "code", flat=True
        )
    )
    unknown = sorted(codes - known)
    if unknown:
        raise ValidationFailed(
            errors=[
                {"field": "translations", "message": f"Unknown language: {code}"}
                for code in unknown
            ]
        )


def _check_categories(restaurant_id: Any, links: list[ItemCategorySchema]) -> None:
    ids = {link.category_id for link in links}
    found = set(
        MenuCategory.objects.filter(
            restaurant_id=restaurant_id, pk__in=ids
        ).values_list("pk", flat=True)
    )
    if ids - found:
        raise ValidationFailed(
            errors=[
                {
                    "field": "categories",
                    "message": "One or more categories are invalid",
                }
            ]
        )


def _replace_translations(
    item: MenuItem, translations: list[ItemTranslationSchema]
) -> None:
    MenuItemTranslation.objects.filter(item=item).delete()
    for translation in translations:
        MenuItemTranslation.objects.create(item=item, **translation.model_dump())


def _replace_categories(item: MenuItem, links: list[ItemCategorySchema]) -> None:
    MenuItemCategory.objects.filter(item=item).delete()
    for link in links:
        MenuItemCategory.objects.create(
            item=item,
            category_id=link.category_id,
            display_order=link.display_order,
        )


# =============================================================================
# Menu items
# =============================================================================


def create_menu_item(restaurant: Restaurant, data: MenuItemCreateRequest) -> MenuItem:
    """
    Create an item with its translations and category links.

    Translations and links are inserted row by row inside the transaction;
    a duplicate language_code or category violates a unique constraint and
    rolls back the whole item.
    """
    _check_language_codes(data.translations)
    _check_categories(restaurant.pk, data.categories)

    with transaction.atomic():
        item = MenuItem.objects.create(
            restaurant=restaurant,
            **data.model_dump(include=set(ITEM_FIELDS)),
        )
        _replace_translations(item, data.translations)
        _replace_categories(item, data.categories)

    logger.info(
        "Created menu item %s for %s with %d translation(s)",
        item.pk,
        restaurant.restaurant_url_name,
        len(data.translations),
    )
    return item


def update_menu_item(item: MenuItem, data: MenuItemUpdateRequest) -> MenuItem:
    """Update item columns; sent translations/categories replace the existing rows."""
    if data.translations is not None:
        _check_language_codes(data.translations)
    if data.categories is not None:
        _check_categories(item.restaurant_id, data.categories)

    changes = data.model_dump(include=set(ITEM_FIELDS), exclude_unset=True)
    # preparation_time_minutes is the only nullable column
    changes = {
        k: v
        for k, v in changes.items()
        if v is not None or k == "preparation_time_minutes"
    }

    with transaction.atomic():
        for field, value in changes.items():
            setattr(item, field, value)
        item.save()
        if data.translations is not None:
            _replace_translations(item, data.translations)
        if data.categories is not None:
            _replace_categories(item, data.categories)

    logger.info("Updated menu item %s", item.pk)
    return item


def get_item_or_404(item_id: int) -> MenuItem:
    try:
        return MenuItem.objects.select_related("restaurant").get(pk=item_id)
    except MenuItem.DoesNotExist as exc:
        raise NotFound("Menu item not found") from exc


def _items_with_translation(
    items: QuerySet[MenuItem], language_code: str
) -> QuerySet[MenuItem]:
    translation = MenuItemTranslation.objects.filter(
        item=OuterRef("pk"), language_code=language_code
    )
    return items.annotate(
        name=Subquery(translation.values("name")[:1]),
        description=Subquery(translation.values("description")[:1]),
        ingredients=Subquery(translation.values("ingredients")[:1]),
        preparation_method=Subquery(translation.values("preparation_method")[:1]),
    )


def _serialize_list_item(item: MenuItem, language_code: str) -> dict[str, Any]:
    return {
        "id": item.pk,
        "restaurant_id": item.restaurant_id,
        "sku": item.sku,
        "base_price": item.base_price,
        "preparation_time_minutes": item.preparation_time_minutes,
        "is_available": item.is_available,
        "is_featured": item.is_featured,
        "language_code": language_code,
        "name": item.name,  # type: ignore[attr-defined]
        "description": item.description,  # type: ignore[attr-defined]
        "ingredients": item.ingredients,  # type: ignore[attr-defined]
        "preparation_method": item.preparation_method,  # type: ignore[attr-defined]
        "categories": [
            {
                "id": link.category_id,
                "name": category_label(link.category, language_code),
                "parent_id": link.category.parent_id,
                "display_order": link.display_order,
            }
            for link in item.category_links.all()
        ],
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


def list_menu_items(
    restaurant: Restaurant,
    language_code: str = DEFAULT_LANGUAGE,
    search: str | None = None,
    category_id: int | None = None,
    available_only: bool = False,
) -> list[dict[str, Any]]:
    """
    Items of a restaurant with their name in one language, ordered by name.

    Items without a translation in that language have a null name and sort
    last. Search matches SKU or any translation name/description.
    """
    items = MenuItem.objects.filter(restaurant=restaurant)
    if available_only:
        items = items.filter(is_available=True)
    if category_id:
        items = items.filter(category_links__category_id=category_id)
    if search:
        items = items.filter(
            Q(sku__icontains=search)
            | Q(translations__name__icontains=search)
            | Q(translations__description__icontains=search)
        )

    items = (
        _items_with_translation(items.distinct(), language_code)
        .prefetch_related(
            Prefetch(
                "category_links",
                queryset=MenuItemCategory.objects.select_related(
                    "category"
                ).prefetch_related(
                    Prefetch(
                        "category__translations",
                        queryset=MenuCategoryTranslation.objects.select_related(
                            "language"
                        ),
                    )
                ),
            )
        )
        .order_by(F("name").asc(nulls_last=True), "pk")
    )
    return [_serialize_list_item(item, language_code) for item in items]


def get_menu_item(item: MenuItem) -> dict[str, Any]:
    """An item with every translation and every category link."""
    languages = {
        lang.code: lang
        for lang in Language.objects.filter(
            code__in=item.translations.values_list("language_code", flat=True)
        )
    }
    links = item.category_links.select_related("category").prefetch_related(
        Prefetch(
            "category__translations",
            queryset=MenuCategoryTranslation.objects.select_related("language"),
        )
    )

    return {
        "id": item.pk,
        "restaurant_id": item.restaurant_id,
        "sku": item.sku,
        "base_price": item.base_price,
        "preparation_time_minutes": item.preparation_time_minutes,
        "is_available": item.is_available,
        "is_featured": item.is_featured,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
        "translations": [
            {
                "language_code": t.language_code,
                "name": t.name,
                "description": t.description,
                "ingredients": t.ingredients,
                "preparation_method": t.preparation_method,
                "language_name": languages[t.language_code].name
                if t.language_code in languages
                else None,
                "language_native_name": languages[t.language_code].native_name
                if t.language_code in languages
                else None,
                "flag_file": languages[t.language_code].flag_file
                if t.language_code in languages
                else None,
            }
            for t in item.translations.all()
        ],
        "categories": [
            {
                "id": link.category_id,
                "parent_id": link.category.parent_id,
                "category_order": link.category.display_order,
                "item_category_order": link.display_order,
                "translations": [
                    {"language_code": t.language.code, "name": t.name}
                    for t in link.category.translations.all()
                ],
            }
            for link in links
        ],
    }


def get_items_by_category(
    category: MenuCategory, language_code: str = DEFAULT_LANGUAGE
) -> list[dict[str, Any]]:
    """Items in a category, in the category's own order (category_order)."""
    links = (
        MenuItemCategory.objects.filter(category=category)
        .select_related("item")
        .annotate(
            item_name=Subquery(
                MenuItemTranslation.objects.filter(
                    item=OuterRef("item_id"), language_code=language_code
                ).values("name")[:1]
            )
        )
        .order_by("display_order", F("item_name").asc(nulls_last=True), "item_id")
    )
    return [
        {
            "id": link.item.pk,
            "sku": link.item.sku,
            "base_price": link.item.base_price,
            "is_available": link.item.is_available,
            "is_featured": link.item.is_featured,
            "name": link.item_name,  # type: ignore[attr-defined]
            "language_code": language_code,
            "category_order": link.display_order,
        }
        for link in links
    ]


def toggle_availability(item: MenuItem) -> MenuItem:
    with transaction.atomic():
        item = MenuItem.objects.select_for_update().get(pk=item.pk)
        item.is_available = not item.is_available
        item.save(update_fields=["is_available", "updated_at"])
    logger.info("Menu item %s availability set to %s", item.pk, item.is_available)
    return item


def delete_menu_item(item: MenuItem) -> None:
    """Hard delete; translations and category links cascade."""
    item_id = item.pk
    item.delete()
    logger.info("Deleted menu item %s", item_id)


# =============================================================================
# Categories
# =============================================================================


def get_category_or_404(category_id: int) -> MenuCategory:
    try:
        return MenuCategory.objects.get(pk=category_id)
    except MenuCategory.DoesNotExist as exc:
        raise NotFound("Category not found") from exc


def _resolve_translation_languages(
    translations: list[CategoryTranslationSchema],
) -> list[tuple[Language, CategoryTranslationSchema]]:
    ids = {t.language_id for t in translations if t.language_id}
    codes = {t.language_code for t in translations if t.language_code}
    languages = Language.objects.filter(Q(pk__in=ids) | Q(code__in=codes))
    by_id = {lang.pk: lang for lang in languages}
    by_code = {lang.code: lang for lang in languages}

    resolved = []
    errors = []
    for i, translation in enumerate(translations):
        language = (
            by_id.get(translation.language_id)
            if translation.language_id
            else by_code.get(translation.language_code or "")
        )
        if language is None:
            errors.append(
                {"field": f"translations.{i}", "message": "Unknown language"}
            )
            continue
        resolved.append((language, translation))
    if errors:
        raise ValidationFailed(errors=errors)
    return resolved


def _check_parent(
    restaurant_id: Any, parent_id: int | None, category: MenuCategory | None = None
) -> None:
    if parent_id is None:
        return
    parent = MenuCategory.objects.filter(
        restaurant_id=restaurant_id, pk=parent_id
    ).first()
    if parent is None:
        raise ValidationFailed(
            errors=[{"field": "parent_id", "message": "Parent category not found"}]
        )
    # Walk up from the new parent; reaching the category itself means a cycle
    node: MenuCategory | None = parent
    while category is not None and node is not None:
        if node.pk == category.pk:
            raise ValidationFailed(
                errors=[
                    {
                        "field": "parent_id",
                        "message": "A category cannot be its own ancestor",
                    }
                ]
            )
        node = node.parent


def _upsert_category_translations(
    category: MenuCategory, translations: list[CategoryTranslationSchema]
) -> None:
    for language, translation in _resolve_translation_languages(translations):
        MenuCategoryTranslation.objects.update_or_create(
            category=category,
            language=language,
            defaults={"name": translation.name, "description": translation.description},
        )


def create_category(
    restaurant: Restaurant, data: CategoryCreateRequest, actor: Any = None
) -> MenuCategory:
    _check_parent(restaurant.pk, data.parent_id)

    with transaction.atomic():
        category = MenuCategory.objects.create(
            restaurant=restaurant,
            parent_id=data.parent_id,
            display_order=data.display_order,
            status=data.status,
            created_by=actor,
            updated_by=actor,
        )
        _upsert_category_translations(category, data.translations)

    logger.info(
        "Created category %s for %s", category.pk, restaurant.restaurant_url_name
    )
    return category


def update_category(
    category: MenuCategory, data: CategoryUpdateRequest, actor: Any = None
) -> MenuCategory:
    changes = data.model_dump(exclude_unset=True, exclude={"translations"})
    if "parent_id" in changes:
        _check_parent(category.restaurant_id, changes["parent_id"], category)

    with transaction.atomic():
        for field, value in changes.items():
            if value is not None or field == "parent_id":
                setattr(category, field, value)
        category.updated_by = actor
        category.save()
        if data.translations:
            _upsert_category_translations(category, data.translations)

    return category


def serialize_category(category: MenuCategory) -> dict[str, Any]:
    return {
        "id": category.pk,
        "restaurant_id": category.restaurant_id,
        "parent_id": category.parent_id,
        "display_order": category.display_order,
        "status": category.status,
        "translations": [
            {
                "language_id": t.language_id,
                "language_code": t.language.code,
                "name": t.name,
                "description": t.description,
            }
            for t in category.translations.all()
        ],
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def list_categories(
    restaurant_id: Any, status: str | None = None, parent_id: Any = None
) -> QuerySet[MenuCategory]:
    categories = MenuCategory.objects.filter(restaurant_id=restaurant_id)
    if status:
        categories = categories.filter(status=status)
    if parent_id == "null":
        categories = categories.filter(parent__isnull=True)
    elif parent_id:
        categories = categories.filter(parent_id=parent_id)
    return categories.prefetch_related(_category_translations_prefetch()).order_by(
        "display_order", "pk"
    )


def category_hierarchy(
    restaurant_id: Any, status: str | None = None
) -> list[dict[str, Any]]:
    """Categories as a tree of nested "children" lists."""
    nodes = {
        c.pk: {**serialize_category(c), "children": []}
        for c in list_categories(restaurant_id, status=status)
    }
    roots = []
    for node in nodes.values():
        parent = nodes.get(node["parent_id"])
        if parent is not None:
            parent["children"].append(node)
        else:
            roots.append(node)
    return roots


def update_display_order(restaurant_id: Any, entries: list[DisplayOrderEntry]) -> int:
    ids = {entry.id for entry in entries}
    categories = {
        c.pk: c
        for c in MenuCategory.objects.filter(restaurant_id=restaurant_id, pk__in=ids)
    }
    if ids - categories.keys():
        raise ValidationFailed(
            errors=[
                {"field": "categories", "message": "One or more categories are invalid"}
            ]
        )

    with transaction.atomic():
        for entry in entries:
            category = categories[entry.id]
            category.display_order = entry.display_order
        MenuCategory.objects.bulk_update(categories.values(), ["display_order"])
    return len(entries)


def toggle_category_status(
    category: MenuCategory, status: str | None = None
) -> MenuCategory:
    if status is None:
        status = (
            CategoryStatus.INACTIVE
            if category.status == CategoryStatus.ACTIVE
            else CategoryStatus.ACTIVE
        )
    category.status = status
    category.save(update_fields=["status", "updated_at"])
    return category


def can_delete_category(category: MenuCategory) -> dict[str, Any]:
    children = category.children.count()
    items = category.item_links.count()
    reasons = []
    if children:
        reasons.append(f"Category has {children} subcategories")
    if items:
        reasons.append(f"Category has {items} menu items")
    return {
        "can_delete": not reasons,
        "children_count": children,
        "items_count": items,
        "reasons": reasons,
    }


def delete_category(category: MenuCategory) -> None:
    check = can_delete_category(category)
    if not check["can_delete"]:
        raise ValidationFailed("; ".join(check["reasons"]))
    category.delete()


# =============================================================================
# Languages
# =============================================================================


def serialize_language(language: Language) -> dict[str, Any]:
    return {
        "id": language.pk,
        "code": language.code,
        "name": language.name,
        "native_name": language.native_name,
        "flag_file": language.flag_file,
        "display_order": language.display_order,
    }


def available_languages() -> QuerySet[Language]:
    return Language.objects.filter(is_active=True).order_by("display_order", "name")


def restaurant_languages(restaurant_id: Any) -> list[dict[str, Any]]:
    links = RestaurantLanguage.objects.filter(
        restaurant_id=restaurant_id
    ).select_related("language")
    return [
        {
            **serialize_language(link.language),
            "display_order": link.display_order,
            "is_default": link.is_default,
            "is_active": link.is_active,
        }
        for link in links.order_by("display_order")
    ]


def replace_restaurant_languages(
    restaurant: Restaurant, languages: list[RestaurantLanguageSchema]
) -> list[dict[str, Any]]:
    """Delete and reinsert the restaurant's languages in one transaction."""
    ids = {lang.language_id for lang in languages}
    known = set(
        Language.objects.filter(pk__in=ids, is_active=True).values_list("pk", flat=True)
    )
    if ids - known:
        raise ValidationFailed(
            errors=[
                {"field": "languages", "message": "One or more languages are invalid"}
            ]
        )

    with transaction.atomic():
        RestaurantLanguage.objects.filter(restaurant=restaurant).delete()
        RestaurantLanguage.objects.bulk_create(
            [
                RestaurantLanguage(
                    restaurant=restaurant,
                    language_id=lang.language_id,
                    display_order=lang.display_order,
                    is_default=lang.is_default,
                    is_active=lang.is_active,
                )
                for lang in languages
            ]
        )

    logger.info(
        "Restaurant %s now has %d language(s)",
        restaurant.restaurant_url_name,
        len(languages),
    )
    return restaurant_languages(restaurant.pk)


def default_language_code(restaurant: Restaurant | None) -> str:
    if restaurant is None:
        return DEFAULT_LANGUAGE
    link = (
        RestaurantLanguage.objects.filter(restaurant=restaurant, is_default=True)
        .select_related("language")
        .first()
    )
    return link.language.code if link else DEFAULT_LANGUAGE
