"""
Restaurant API views - registration, profile, locations and media.

Registration is public; everything else requires a JWT for a member of the
restaurant. Modifying a restaurant requires a restaurant administrator.
"""

import logging
from typing import Any
from uuid import UUID

from django.conf import settings
from django.http import (
    HttpRequest,
    HttpResponse,
    HttpResponseRedirect,
    JsonResponse,
)
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.web.accounts.decorators import (
    authenticate_request,
    get_bearer_token,
    jwt_required,
    restaurant_access_required,
)
from apps.web.accounts.permissions import (
    can_access_restaurant,
    can_manage_restaurant_content,
    is_superadmin,
)
from apps.web.accounts.services import restaurant_summary, serialize_user
from apps.web.core.decorators import sanitize_payload
from apps.web.core.exceptions import AccessDenied, NotFound, ValidationFailed
from apps.web.core.models import Restaurant
from apps.web.core.params import uuid_param
from apps.web.core.ratelimit import rate_limit
from apps.web.core.responses import paginate, success_response
from apps.web.core.sanitizers import (
    sanitize_location_data,
    sanitize_registration_data,
    sanitize_restaurant_data,
)

from . import services
from .models import RestaurantLocation, RestaurantMedia
from .serializers import (
    LocationSchema,
    LocationUpdateRequest,
    PaymentSchema,
    RegistrationRequest,
    RestaurantUpdateRequest,
)

logger = logging.getLogger(__name__)


def _get_restaurant_or_404(restaurant_id: UUID) -> Restaurant:
    try:
        return Restaurant.objects.get(pk=restaurant_id)
    except Restaurant.DoesNotExist as exc:
        raise NotFound("Restaurant not found") from exc


def _get_location_or_404(location_id: UUID) -> RestaurantLocation:
    try:
        return RestaurantLocation.objects.select_related("restaurant").get(
            pk=location_id
        )
    except RestaurantLocation.DoesNotExist as exc:
        raise NotFound("Location not found") from exc


def _optional_user(request: HttpRequest) -> Any:
    """Authenticated user when a bearer token is sent, otherwise None."""
    if get_bearer_token(request) is None:
        return None
    return authenticate_request(request)


# =============================================================================
# Registration
# =============================================================================


def _register(request: HttpRequest) -> JsonResponse:
    data = RegistrationRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    restaurant, admin = services.register_restaurant(data)
    return success_response(
        {
            "restaurant": restaurant_summary(restaurant),
            "user": serialize_user(admin),
            "requires_email_confirmation": True,
        },
        "Restaurant registered. Check your email to confirm the account.",
        status=201,
    )


@csrf_exempt
@require_POST
@rate_limit("auth")
@sanitize_payload(sanitize_registration_data)
def register(request: HttpRequest) -> JsonResponse:
    """
    POST /api/v1/auth/register

    Multi-step wizard submission: owner, restaurant, locations, billing and a
    tokenized card. Creates everything atomically.
    """
    return _register(request)


@rate_limit("restaurant_creation")
@sanitize_payload(sanitize_registration_data)
def create_restaurant(request: HttpRequest) -> JsonResponse:
    """POST /api/v1/restaurants"""
    return _register(request)


# =============================================================================
# Restaurants
# =============================================================================


@rate_limit("search")
def list_restaurants(request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/restaurants

    Public listing of active restaurants. Superadmins see every status.
    """
    user = _optional_user(request)
    include_all = user is not None and is_superadmin(user)
    restaurants = services.list_restaurants(request.GET, include_all=include_all)
    page, meta = paginate(
        restaurants, request.GET.get("page", 1), request.GET.get("limit", 20)
    )
    return success_response(
        [services.serialize_restaurant(r) for r in page],
        "Restaurants retrieved",
        meta=meta,
    )


@csrf_exempt
@require_GET
def restaurant_by_url(request: HttpRequest, url_name: str) -> JsonResponse:
    """GET /api/v1/restaurants/by-url/{url_name} - public profile, active only."""
    restaurant = Restaurant.objects.filter(
        restaurant_url_name=url_name.lower(), status=Restaurant.Status.ACTIVE
    ).first()
    if restaurant is None:
        raise NotFound("Restaurant not found")
    data = services.serialize_restaurant(restaurant, include_locations=True)
    data["favicon_url"] = services.favicon_url(restaurant)
    return success_response(data, "Restaurant retrieved")


@csrf_exempt
@require_GET
def check_url(request: HttpRequest, url_name: str) -> JsonResponse:
    """GET /api/v1/restaurants/check-url/{url_name}"""
    url_name = url_name.lower()
    exclude_id = uuid_param(request.GET.get("exclude_id"), "exclude_id")
    available = services.is_url_available(url_name, exclude_id=exclude_id)
    return success_response(
        {"url_name": url_name, "available": available},
        "URL is available" if available else "URL is already taken",
    )


@restaurant_access_required()
def get_restaurant(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id} - full profile including private fields."""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = services.serialize_restaurant(
        restaurant, include_locations=True, include_private=True
    )
    data["favicon_url"] = services.favicon_url(restaurant)
    return success_response(data, "Restaurant retrieved")


@restaurant_access_required(modify=True)
@sanitize_payload(sanitize_restaurant_data)
def update_restaurant(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """PUT /api/v1/restaurants/{id}"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = RestaurantUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    restaurant = services.update_restaurant(
        restaurant, data, allow_status=is_superadmin(request.user)
    )
    return success_response(
        services.serialize_restaurant(restaurant, include_private=True),
        "Restaurant updated",
    )


@restaurant_access_required(modify=True)
def delete_restaurant(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """DELETE /api/v1/restaurants/{id} - soft delete."""
    restaurant = _get_restaurant_or_404(restaurant_id)
    services.deactivate_restaurant(restaurant)
    return success_response(None, "Restaurant deactivated")


@restaurant_access_required()
def restaurant_stats(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/stats"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    return success_response(
        services.restaurant_stats(restaurant), "Restaurant statistics retrieved"
    )


@restaurant_access_required(modify=True)
def update_payment(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """PUT /api/v1/restaurants/{id}/payment - replace the card on file."""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = PaymentSchema.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    info = services.replace_payment_info(restaurant, data)
    return success_response(
        {
            "card_brand": info.card_brand,
            "card_last4": info.card_last4,
            "expiry_month": info.expiry_month,
            "expiry_year": info.expiry_year,
        },
        "Payment method updated",
    )


# =============================================================================
# Locations
# =============================================================================


@restaurant_access_required()
def list_locations(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/locations"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    locations = RestaurantLocation.objects.filter(restaurant=restaurant)
    if request.GET.get("status"):
        locations = locations.filter(status=request.GET["status"])
    return success_response(
        [services.serialize_location(loc) for loc in locations],
        "Locations retrieved",
    )


@restaurant_access_required(modify=True)
@sanitize_payload(sanitize_location_data)
def create_location(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """POST /api/v1/restaurants/{id}/locations"""
    restaurant = _get_restaurant_or_404(restaurant_id)
    data = LocationSchema.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    location = services.add_location(restaurant, data)
    return success_response(
        services.serialize_location(location), "Location created", status=201
    )


@jwt_required
def get_location(request: HttpRequest, location_id: UUID) -> JsonResponse:
    """GET /api/v1/locations/{id}"""
    location = _get_location_or_404(location_id)
    if not can_access_restaurant(request.user, location.restaurant_id):
        raise AccessDenied("You do not have access to this location")
    return success_response(services.serialize_location(location), "Location retrieved")


@jwt_required
@sanitize_payload(sanitize_location_data)
def update_location(request: HttpRequest, location_id: UUID) -> JsonResponse:
    """PUT /api/v1/locations/{id} - restaurant or location administrators."""
    location = _get_location_or_404(location_id)
    if not can_manage_restaurant_content(request.user, location.restaurant_id):
        raise AccessDenied("You do not have permission to modify this location")
    data = LocationUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    location = services.update_location(location, data)
    return success_response(services.serialize_location(location), "Location updated")


@jwt_required
def delete_location(request: HttpRequest, location_id: UUID) -> JsonResponse:
    """DELETE /api/v1/locations/{id} - soft delete."""
    location = _get_location_or_404(location_id)
    if not can_access_restaurant(request.user, location.restaurant_id, modify=True):
        raise AccessDenied("You do not have permission to modify this location")
    services.deactivate_location(location)
    return success_response(None, "Location deactivated")


@csrf_exempt
@require_POST
@jwt_required
def set_primary_location(request: HttpRequest, location_id: UUID) -> JsonResponse:
    """POST /api/v1/locations/{id}/primary"""
    location = _get_location_or_404(location_id)
    if not can_access_restaurant(request.user, location.restaurant_id, modify=True):
        raise AccessDenied("You do not have permission to modify this location")
    location = services.set_primary_location(location)
    return success_response(
        services.serialize_location(location), "Primary location updated"
    )


# =============================================================================
# Media
# =============================================================================


@restaurant_access_required()
def list_media(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/restaurants/{id}/media"""
    media = RestaurantMedia.objects.filter(restaurant_id=restaurant_id, is_active=True)
    if request.GET.get("media_type"):
        media = media.filter(media_type=request.GET["media_type"])
    return success_response(
        [services.serialize_media(m) for m in media], "Media retrieved"
    )


@rate_limit("upload")
@restaurant_access_required(modify=True)
def upload_media(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """
    POST /api/v1/restaurants/{id}/media

    multipart/form-data with "file", "media_type" and optional "location_id".
    """
    restaurant = _get_restaurant_or_404(restaurant_id)
    upload = request.FILES.get("file")
    if upload is None:
        raise ValidationFailed(
            errors=[{"field": "file", "message": "File is required"}]
        )

    location = None
    location_id = uuid_param(
        request.payload.get("location_id"),  # type: ignore[attr-defined]
        "location_id",
    )
    if location_id:
        location = RestaurantLocation.objects.filter(
            restaurant=restaurant, pk=location_id
        ).first()
        if location is None:
            raise NotFound("Location not found")

    media = services.upload_media(
        restaurant,
        upload,
        request.payload.get("media_type", ""),  # type: ignore[attr-defined]
        location=location,
    )
    return success_response(
        services.serialize_media(media), "File uploaded", status=201
    )


@restaurant_access_required(modify=True)
def delete_media(
    request: HttpRequest, restaurant_id: UUID, media_id: int
) -> JsonResponse:
    """DELETE /api/v1/restaurants/{id}/media/{media_id}"""
    services.delete_media(restaurant_id, media_id)
    return success_response(None, "Media removed")


@require_GET
def favicon(request: HttpRequest) -> HttpResponse:
    """
    GET /favicon.ico

    Redirects to the tenant's uploaded favicon, falling back to the platform
    default.
    """
    url = services.favicon_url(getattr(request, "restaurant", None))
    url = url or settings.DEFAULT_FAVICON_URL
    if not url:
        return HttpResponse(status=204)
    return HttpResponseRedirect(url)
