"""
Menu API views - items, categories, languages and the public tenant menu.

Reads need a member of the restaurant; writes need one of its administrators.
The public menu is served for the restaurant resolved by TenantMiddleware.
"""

from typing import Any
from uuid import UUID

from django.http import HttpRequest, JsonResponse
from django.views.decorators.cache import cache_control
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

from apps.web.accounts.decorators import (
    jwt_required,
    restaurant_access_required,
    restaurant_content_required,
)
from apps.web.accounts.permissions import (
    can_access_restaurant,
    can_manage_restaurant_content,
)
from apps.web.core.exceptions import AccessDenied, NotFound
from apps.web.core.models import Restaurant
from apps.web.core.params import int_param
from apps.web.core.responses import success_response

from . import services
from .models import CategoryStatus, MenuCategory
from .serializers import (
    CategoryCreateRequest,
    CategoryStatusRequest,
    CategoryUpdateRequest,
    DisplayOrderRequest,
    MenuItemCreateRequest,
    MenuItemUpdateRequest,
    RestaurantLanguagesRequest,
)


def _language(request: HttpRequest) -> str:
    return request.GET.get("language") or services.DEFAULT_LANGUAGE


def _check_read(user: Any, restaurant_id: Any) -> None:
    if not can_access_restaurant(user, restaurant_id):
        raise AccessDenied("You do not have access to this restaurant")


def _check_write(user: Any, restaurant_id: Any) -> None:
    if not can_manage_restaurant_content(user, restaurant_id):
        raise AccessDenied("You do not have permission to manage this restaurant")


def _get_restaurant_or_404(restaurant_id: UUID) -> Restaurant:
    try:
        return Restaurant.objects.get(pk=restaurant_id)
    except Restaurant.DoesNotExist as exc:
        raise NotFound("Restaurant not found") from exc


# =============================================================================
# Public
# =============================================================================


@csrf_exempt
@require_GET
@cache_control(max_age=60, public=True)
def public_menu(request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/menu

    Active categories with their available items for the tenant restaurant
    (X-Restaurant-Slug header or subdomain). ?language= picks the
    translation; defaults to the restaurant's default language.
    """
    restaurant = getattr(request, "restaurant", None)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    language = request.GET.get("language") or services.default_language_code(
        restaurant
    )
    categories = [
        {
            "id": category.pk,
            "parent_id": category.parent_id,
            "name": services.category_label(category, language),
            "display_order": category.display_order,
            "items": [
                item
                for item in services.get_items_by_category(category, language)
                if item["is_available"]
            ],
        }
        for category in services.list_categories(
            restaurant.pk, status=CategoryStatus.ACTIVE
        )
    ]
    return success_response(
        {
            "restaurant": {
                "id": restaurant.pk,
                "restaurant_name": restaurant.restaurant_name,
                "restaurant_url_name": restaurant.restaurant_url_name,
            },
            "language": language,
            "categories": categories,
        },
        "Menu retrieved",
    )


@csrf_exempt
@require_GET
def available_languages(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/languages/available"""
    return success_response(
        [services.serialize_language(lang) for lang in services.available_languages()],
        "Languages retrieved",
    )


# =============================================================================
# Restaurant languages
# =============================================================================


@restaurant_access_required()
def get_restaurant_languages(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/languages"""
    return success_response(
        services.restaurant_languages(restaurant_id), "Restaurant languages retrieved"
    )


@restaurant_access_required(modify=True)
def update_restaurant_languages(
    request: HttpRequest, restaurant_id: UUID
) -> JsonResponse:
    """PUT /api/v1/restaurants/{id}/languages - replaces the whole list."""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = RestaurantLanguagesRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    languages = services.replace_restaurant_languages(restaurant, data.languages)
    return success_response(languages, "Restaurant languages updated")


# =============================================================================
# Menu items
# =============================================================================


@restaurant_access_required()
def list_menu_items(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """
    GET /api/v1/restaurants/{id}/menu-items

    Query: language (default pt-BR), search, category_id
    """
    restaurant = _get_restaurant_or_404(restaurant_id)
    items = services.list_menu_items(
        restaurant,
        language_code=_language(request),
        search=request.GET.get("search"),
        category_id=int_param(request.GET.get("category_id"), "category_id"),
    )
    return success_response(items, "Menu items retrieved")


@restaurant_content_required
def create_menu_item(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """POST /api/v1/restaurants/{id}/menu-items"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = MenuItemCreateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    item = services.create_menu_item(restaurant, data)
    return success_response(
        services.get_menu_item(item), "Menu item created", status=201
    )


@jwt_required
def get_menu_item(request: HttpRequest, item_id: int) -> JsonResponse:
    """GET /api/v1/menu/items/{id}"""
    item = services.get_item_or_404(item_id)
    _check_read(request.user, item.restaurant_id)
    return success_response(services.get_menu_item(item), "Menu item retrieved")


@jwt_required
def update_menu_item(request: HttpRequest, item_id: int) -> JsonResponse:
    """PUT /api/v1/menu/items/{id}"""
    item = services.get_item_or_404(item_id)
    _check_write(request.user, item.restaurant_id)
    data = MenuItemUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    item = services.update_menu_item(item, data)
    return success_response(services.get_menu_item(item), "Menu item updated")


@jwt_required
def delete_menu_item(request: HttpRequest, item_id: int) -> JsonResponse:
    """DELETE /api/v1/menu/items/{id}"""
    item = services.get_item_or_404(item_id)
    _check_write(request.user, item.restaurant_id)
    services.delete_menu_item(item)
    return success_response(None, "Menu item deleted")


@jwt_required
def toggle_availability(request: HttpRequest, item_id: int) -> JsonResponse:
    """PATCH /api/v1/menu/items/{id}/toggle-availability"""
    item = services.get_item_or_404(item_id)
    _check_write(request.user, item.restaurant_id)
    item = services.toggle_availability(item)
    return success_response(
        {"id": item.pk, "is_available": item.is_available},
        "Availability updated",
    )


# =============================================================================
# Categories
# =============================================================================


@restaurant_access_required()
def list_categories(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/menu-categories?status=&parent_id="""
    parent_id: Any = request.GET.get("parent_id")
    if parent_id != "null":
        parent_id = int_param(parent_id, "parent_id")
    categories = services.list_categories(
        restaurant_id, status=request.GET.get("status"), parent_id=parent_id
    )
    return success_response(
        [services.serialize_category(c) for c in categories], "Categories retrieved"
    )


@restaurant_access_required()
def category_hierarchy(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/menu-categories/hierarchy"""
    return success_response(
        services.category_hierarchy(restaurant_id, status=request.GET.get("status")),
        "Category hierarchy retrieved",
    )


@restaurant_content_required
def create_category(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """POST /api/v1/restaurants/{id}/menu-categories"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = CategoryCreateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    category = services.create_category(restaurant, data, actor=request.user)
    return success_response(
        services.serialize_category(category), "Category created", status=201
    )


@restaurant_content_required
def update_display_order(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """PUT /api/v1/restaurants/{id}/menu-categories/display-order"""
    data = DisplayOrderRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    updated = services.update_display_order(restaurant_id, data.categories)
    return success_response({"updated": updated}, "Display order updated")


def _category_for(request: HttpRequest, category_id: int, write: bool) -> MenuCategory:
    category = services.get_category_or_404(category_id)
    if write:
        _check_write(request.user, category.restaurant_id)
    else:
        _check_read(request.user, category.restaurant_id)
    return category


@jwt_required
def get_category(request: HttpRequest, category_id: int) -> JsonResponse:
    """GET /api/v1/menu/categories/{id}"""
    category = _category_for(request, category_id, write=False)
    return success_response(services.serialize_category(category), "Category retrieved")


@jwt_required
def update_category(request: HttpRequest, category_id: int) -> JsonResponse:
    """PUT /api/v1/menu/categories/{id}"""
    category = _category_for(request, category_id, write=True)
    data = CategoryUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    category = services.update_category(category, data, actor=request.user)
    return success_response(services.serialize_category(category), "Category updated")


@jwt_required
def delete_category(request: HttpRequest, category_id: int) -> JsonResponse:
    """DELETE /api/v1/menu/categories/{id}"""
    category = _category_for(request, category_id, write=True)
    services.delete_category(category)
    return success_response(None, "Category deleted")


@jwt_required
def category_items(request: HttpRequest, category_id: int) -> JsonResponse:
    """GET /api/v1/menu/categories/{id}/items?language="""
    category = _category_for(request, category_id, write=False)
    return success_response(
        services.get_items_by_category(category, _language(request)),
        "Category items retrieved",
    )


@jwt_required
def can_delete_category(request: HttpRequest, category_id: int) -> JsonResponse:
    """GET /api/v1/menu/categories/{id}/can-delete"""
    category = _category_for(request, category_id, write=False)
    return success_response(services.can_delete_category(category))


@jwt_required
def toggle_category_status(request: HttpRequest, category_id: int) -> JsonResponse:
    """PATCH /api/v1/menu/categories/{id}/status - explicit status or toggle."""
    category = _category_for(request, category_id, write=True)
    data = CategoryStatusRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    category = services.toggle_category_status(category, data.status)
    return success_response(
        {"id": category.pk, "status": category.status}, "Category status updated"
    )
