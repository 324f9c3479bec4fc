"""
Restaurant services - registration, profile, locations, payment and media.
"""

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.db.models import Count, Q, QuerySet

from apps.web.accounts.emails import send_confirmation_email
from apps.web.accounts.models import Role, UserLocationAssignment, UserRole
from apps.web.accounts.roles import ensure_role
from apps.web.accounts.services import username_from_email, issue_confirmation_token
from apps.web.core.exceptions import Conflict, NotFound, ValidationFailed
from apps.web.core.models import Restaurant
from apps.web.payments.services import (
    PaymentError,
    describe_payment_method,
    detach_payment_method,
)

from .models import (
    BillingAddress,
    LocationStatus,
    MediaType,
    PaymentInfo,
    RestaurantLocation,
    RestaurantMedia,
)
from .serializers import (
    LocationSchema,
    LocationUpdateRequest,
    PaymentSchema,
    RegistrationRequest,
    RestaurantUpdateRequest,
)

logger = logging.getLogger(__name__)

User = get_user_model()

ALLOWED_MEDIA_TYPES = {
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
    "image/x-icon",
    "image/vnd.microsoft.icon",
}

# Media types where only the latest upload stays active
SINGLE_ACTIVE_MEDIA = {MediaType.LOGO, MediaType.FAVICON, MediaType.COVER}

# Storage prefix of every upload, see media_upload_path
MEDIA_DIRECTORY = "restaurants"


# =============================================================================
# Serialization
# =============================================================================


def serialize_location(location: RestaurantLocation) -> dict[str, Any]:
    return {
        "id": location.pk,
        "restaurant_id": location.restaurant_id,
        "name": location.name,
        "url_name": location.url_name,
        "phone": location.phone,
        "whatsapp": location.whatsapp,
        "address": {
            "zip_code": location.address_zip_code,
            "street": location.address_street,
            "street_number": location.address_street_number,
            "complement": location.address_complement,
            "city": location.address_city,
            "state": location.address_state,
        },
        "operating_hours": location.operating_hours,
        "selected_features": location.selected_features,
        "is_primary": location.is_primary,
        "status": location.status,
        "created_at": location.created_at,
        "updated_at": location.updated_at,
    }


def serialize_restaurant(
    restaurant: Restaurant,
    include_locations: bool = False,
    include_private: bool = False,
) -> dict[str, Any]:
    """
    Public fields by default; include_private adds owner contact details,
    billing address and the masked payment card.
    """
    data: dict[str, Any] = {
        "id": restaurant.pk,
        "restaurant_name": restaurant.restaurant_name,
        "restaurant_url_name": restaurant.restaurant_url_name,
        "business_type": restaurant.business_type,
        "cuisine_type": restaurant.cuisine_type,
        "website": restaurant.website,
        "description": restaurant.description,
        "status": restaurant.status,
        "created_at": restaurant.created_at,
    }

    if include_private:
        billing = BillingAddress.objects.filter(restaurant=restaurant).first()
        payment = PaymentInfo.objects.filter(
            restaurant=restaurant, is_active=True
        ).first()
        data.update(
            {
                "owner_name": restaurant.owner_name,
                "email": restaurant.email,
                "phone": restaurant.phone,
                "whatsapp": restaurant.whatsapp,
                "subscription_plan": restaurant.subscription_plan,
                "max_locations": restaurant.max_locations,
                "marketing_consent": restaurant.marketing_consent,
                "email_confirmed": restaurant.email_confirmed,
                "updated_at": restaurant.updated_at,
                "billing_address": {
                    "zip_code": billing.zip_code,
                    "street": billing.street,
                    "street_number": billing.street_number,
                    "complement": billing.complement,
                    "city": billing.city,
                    "state": billing.state,
                    "same_as_restaurant": billing.same_as_restaurant,
                }
                if billing
                else None,
                "payment": {
                    "card_brand": payment.card_brand,
                    "card_last4": payment.card_last4,
                    "expiry_month": payment.expiry_month,
                    "expiry_year": payment.expiry_year,
                    "cardholder_name": payment.cardholder_name,
                }
                if payment
                else None,
            }
        )

    if include_locations:
        locations = RestaurantLocation.objects.filter(restaurant=restaurant)
        if not include_private:
            locations = locations.filter(status=LocationStatus.ACTIVE)
        data["locations"] = [serialize_location(loc) for loc in locations]

    return data


# =============================================================================
# Registration
# =============================================================================


def is_url_available(url_name: str, exclude_id: Any = None) -> bool:
    restaurants = Restaurant.objects.filter(restaurant_url_name__iexact=url_name)
    if exclude_id:
        restaurants = restaurants.exclude(pk=exclude_id)
    return not restaurants.exists()


def _location_fields(
    location: LocationSchema | LocationUpdateRequest,
) -> dict[str, Any]:
    """Map a location schema onto RestaurantLocation columns (set fields only)."""
    data = location.model_dump(exclude_unset=True, exclude={"is_primary"})
    fields: dict[str, Any] = {}
    for key in ("name", "url_name", "phone", "whatsapp", "selected_features"):
        if key in data and data[key] is not None:
            fields[key] = data[key]
    if data.get("address") is not None:
        address = location.address.model_dump()  # type: ignore[union-attr]
        for key, value in address.items():
            fields[f"address_{key}"] = value
    if data.get("operating_hours") is not None:
        hours = location.operating_hours  # type: ignore[union-attr]
        fields["operating_hours"] = hours.model_dump(exclude_none=True)
    return fields


def _validate_locations(
    business_type: str, plan: str, locations: list[LocationSchema]
) -> int:
    """
    Check location rules for a registration.

    Returns:
        Index of the primary location

    Raises:
        ValidationFailed: listing every broken rule
    """
    errors: list[dict[str, str]] = []

    if business_type == Restaurant.BusinessType.SINGLE and len(locations) != 1:
        errors.append(
            {
                "field": "locations",
                "message": "Single-location restaurants must have exactly one location",
            }
        )

    url_names = [loc.url_name for loc in locations]
    if len(set(url_names)) != len(url_names):
        errors.append(
            {"field": "locations", "message": "Location URL names must be unique"}
        )

    limit = Restaurant.PLAN_LOCATION_LIMITS[plan]
    if len(locations) > limit:
        errors.append(
            {
                "field": "locations",
                "message": f"The {plan} plan allows up to {limit} location(s)",
            }
        )

    primaries = [i for i, loc in enumerate(locations) if loc.is_primary]
    if len(primaries) > 1:
        errors.append(
            {"field": "locations", "message": "Only one location can be primary"}
        )

    if errors:
        raise ValidationFailed(errors=errors)
    return primaries[0] if primaries else 0


def _payment_details(payment: PaymentSchema) -> dict[str, Any]:
    try:
        details = describe_payment_method(payment.payment_method_token)
    except PaymentError as e:
        raise ValidationFailed(
            errors=[{"field": "payment.payment_method_token", "message": e.message}]
        ) from e
    details["cardholder_name"] = payment.cardholder_name
    return details


def register_restaurant(data: RegistrationRequest) -> tuple[Restaurant, Any]:
    """
    Register a restaurant with its locations, billing, payment reference and
    administrator account.

    Everything is written in one transaction: any failure leaves no rows
    behind. The confirmation email goes out after commit.

    Raises:
        Conflict: URL name or email already taken
        ValidationFailed: location rules or payment method rejected
    """
    details, owner = data.restaurant, data.owner

    if not is_url_available(details.restaurant_url_name):
        raise Conflict("Restaurant URL name is already taken")
    if User.objects.filter(email__iexact=owner.email).exists():
        raise Conflict("Email is already registered")
    if owner.username and User.objects.filter(username__iexact=owner.username).exists():
        raise Conflict("Username is already taken")

    primary_index = _validate_locations(
        details.business_type, details.subscription_plan, data.locations
    )

    # External call stays outside the transaction
    payment = _payment_details(data.payment) if data.payment else None

    with transaction.atomic():
        restaurant = Restaurant(
            restaurant_name=details.restaurant_name,
            restaurant_url_name=details.restaurant_url_name,
            owner_name=owner.full_name,
            email=owner.email.lower(),
            phone=owner.phone,
            whatsapp=owner.whatsapp,
            business_type=details.business_type,
            cuisine_type=details.cuisine_type,
            website=details.website,
            description=details.description,
            subscription_plan=details.subscription_plan,
            marketing_consent=details.marketing_consent,
            terms_accepted=details.terms_accepted,
            status=Restaurant.Status.PENDING,
        )
        token = issue_confirmation_token(restaurant)
        restaurant.save()

        locations = [
            RestaurantLocation.objects.create(
                restaurant=restaurant,
                is_primary=i == primary_index,
                **_location_fields(location),
            )
            for i, location in enumerate(data.locations)
        ]
        primary = locations[primary_index]

        if data.billing_address:
            billing = data.billing_address
            if billing.same_as_restaurant:
                address = {
                    "zip_code": primary.address_zip_code,
                    "street": primary.address_street,
                    "street_number": primary.address_street_number,
                    "complement": primary.address_complement,
                    "city": primary.address_city,
                    "state": primary.address_state,
                }
            else:
                address = billing.model_dump(exclude={"same_as_restaurant"})
            BillingAddress.objects.create(
                restaurant=restaurant,
                same_as_restaurant=billing.same_as_restaurant,
                **address,
            )

        if payment:
            PaymentInfo.objects.create(restaurant=restaurant, **payment)

        admin = User(
            username=owner.username or username_from_email(owner.email),
            email=owner.email.lower(),
            full_name=owner.full_name,
            phone=owner.phone,
            restaurant=restaurant,
            status=User.Status.PENDING,
            email_confirmation_token=token,
            email_confirmation_expires=restaurant.email_confirmation_expires,
        )
        admin.set_password(owner.password)
        admin.save()

        UserRole.objects.create(
            user=admin,
            role=ensure_role(Role.RESTAURANT_ADMINISTRATOR),
            restaurant=restaurant,
            is_primary=True,
        )
        UserLocationAssignment.objects.create(
            user=admin, location=primary, is_primary=True
        )

        transaction.on_commit(lambda: send_confirmation_email(admin))

    logger.info(
        "Registered restaurant %s with %d location(s)",
        restaurant.restaurant_url_name,
        len(locations),
    )
    return restaurant, admin


# =============================================================================
# Restaurants
# =============================================================================


def list_restaurants(params: Any, include_all: bool = False) -> QuerySet[Restaurant]:
    """Filter by status, business_type, cuisine_type and a name/URL search term."""
    restaurants = Restaurant.objects.all()
    if include_all:
        if params.get("status"):
            restaurants = restaurants.filter(status=params["status"])
    else:
        restaurants = restaurants.filter(status=Restaurant.Status.ACTIVE)

    if params.get("business_type"):
        restaurants = restaurants.filter(business_type=params["business_type"])
    if params.get("cuisine_type"):
        restaurants = restaurants.filter(cuisine_type__iexact=params["cuisine_type"])
    if params.get("search"):
        term = params["search"]
        restaurants = restaurants.filter(
            Q(restaurant_name__icontains=term) | Q(restaurant_url_name__icontains=term)
        )
    return restaurants.order_by("restaurant_name")


def restaurant_stats(restaurant: Restaurant) -> dict[str, Any]:
    # Late imports: menu and orders depend on this app
    from apps.web.menu.models import MenuCategory, MenuItem  # noqa: PLC0415
    from apps.web.orders.models import Order  # noqa: PLC0415

    locations = RestaurantLocation.objects.filter(restaurant=restaurant).aggregate(
        total=Count("pk"),
        active=Count("pk", filter=Q(status=LocationStatus.ACTIVE)),
    )
    items = MenuItem.objects.filter(restaurant=restaurant).aggregate(
        total=Count("pk"),
        available=Count("pk", filter=Q(is_available=True)),
    )
    users = User.objects.filter(restaurant=restaurant).aggregate(
        total=Count("pk"),
        active=Count("pk", filter=Q(status=User.Status.ACTIVE)),
    )
    orders_by_status = dict(
        Order.objects.filter(restaurant=restaurant)
        .order_by()
        .values("status")
        .annotate(count=Count("pk"))
        .values_list("status", "count")
    )

    return {
        "locations": locations,
        "menu_items": items,
        "categories": MenuCategory.objects.filter(restaurant=restaurant).count(),
        "users": users,
        "orders": {
            "total": sum(orders_by_status.values()),
            "by_status": orders_by_status,
        },
    }


def update_restaurant(
    restaurant: Restaurant, data: RestaurantUpdateRequest, allow_status: bool = False
) -> Restaurant:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "status" in changes and not allow_status:
        changes.pop("status")

    url_name = changes.get("restaurant_url_name")
    if url_name and not is_url_available(url_name, exclude_id=restaurant.pk):
        raise Conflict("Restaurant URL name is already taken")

    plan = changes.get("subscription_plan")
    if plan:
        active = RestaurantLocation.objects.filter(
            restaurant=restaurant, status=LocationStatus.ACTIVE
        ).count()
        if active > Restaurant.PLAN_LOCATION_LIMITS[plan]:
            raise ValidationFailed(
                errors=[
                    {
                        "field": "subscription_plan",
                        "message": f"Restaurant has {active} active locations, "
                        f"more than the {plan} plan allows",
                    }
                ]
            )

    for field, value in changes.items():
        setattr(restaurant, field, value)
    restaurant.save()
    logger.info("Updated restaurant %s", restaurant.restaurant_url_name)
    return restaurant


def deactivate_restaurant(restaurant: Restaurant) -> None:
    """Soft delete: the restaurant and its locations become inactive."""
    with transaction.atomic():
        restaurant.status = Restaurant.Status.INACTIVE
        restaurant.save(update_fields=["status", "updated_at"])
        RestaurantLocation.objects.filter(restaurant=restaurant).update(
            status=LocationStatus.INACTIVE
        )
    logger.info("Deactivated restaurant %s", restaurant.restaurant_url_name)


def replace_payment_info(restaurant: Restaurant, payment: PaymentSchema) -> PaymentInfo:
    """Swap the active card for a newly tokenized one and detach the old card."""
    details = _payment_details(payment)
    previous = PaymentInfo.objects.filter(restaurant=restaurant, is_active=True).first()

    with transaction.atomic():
        if previous:
            previous.is_active = False
            previous.save(update_fields=["is_active", "updated_at"])
        info = PaymentInfo.objects.create(restaurant=restaurant, **details)

    if previous and previous.card_token != info.card_token:
        try:
            detach_payment_method(previous.card_token)
        except PaymentError as e:
            logger.warning(
                "Could not detach old card for %s: %s", restaurant.pk, e.message
            )
    return info


# =============================================================================
# Locations
# =============================================================================


def add_location(restaurant: Restaurant, data: LocationSchema) -> RestaurantLocation:
    """Add a location within the plan limit; the first location is primary."""
    existing = RestaurantLocation.objects.filter(restaurant=restaurant)
    active_count = existing.filter(status=LocationStatus.ACTIVE).count()
    if active_count >= restaurant.max_locations:
        raise ValidationFailed(
            f"The {restaurant.subscription_plan} plan allows up to "
            f"{restaurant.max_locations} location(s)"
        )
    if existing.filter(url_name=data.url_name).exists():
        raise Conflict("Location URL name is already in use for this restaurant")

    make_primary = data.is_primary or not existing.filter(is_primary=True).exists()

    with transaction.atomic():
        if make_primary:
            existing.filter(is_primary=True).update(is_primary=False)
        location = RestaurantLocation.objects.create(
            restaurant=restaurant,
            is_primary=make_primary,
            **_location_fields(data),
        )
        single = restaurant.business_type == Restaurant.BusinessType.SINGLE
        if active_count >= 1 and single:
            restaurant.business_type = Restaurant.BusinessType.MULTI
            restaurant.save(update_fields=["business_type", "updated_at"])

    logger.info(
        "Added location %s to %s", location.url_name, restaurant.restaurant_url_name
    )
    return location


def update_location(
    location: RestaurantLocation, data: LocationUpdateRequest
) -> RestaurantLocation:
    fields = _location_fields(data)
    url_name = fields.get("url_name")
    if (
        url_name
        and RestaurantLocation.objects.filter(
            restaurant_id=location.restaurant_id, url_name=url_name
        )
        .exclude(pk=location.pk)
        .exists()
    ):
        raise Conflict("Location URL name is already in use for this restaurant")

    for field, value in fields.items():
        setattr(location, field, value)
    location.save()
    return location


def set_primary_location(location: RestaurantLocation) -> RestaurantLocation:
    if location.status != LocationStatus.ACTIVE:
        raise ValidationFailed("Inactive locations cannot be primary")

    with transaction.atomic():
        RestaurantLocation.objects.filter(
            restaurant_id=location.restaurant_id, is_primary=True
        ).exclude(pk=location.pk).update(is_primary=False)
        location.is_primary = True
        location.save(update_fields=["is_primary", "updated_at"])
    return location


def deactivate_location(location: RestaurantLocation) -> None:
    if location.is_primary:
        raise ValidationFailed("The primary location cannot be deactivated")
    location.status = LocationStatus.INACTIVE
    location.save(update_fields=["status", "updated_at"])


# =============================================================================
# Media
# =============================================================================


def upload_media(
    restaurant: Restaurant,
    upload: UploadedFile,
    media_type: str,
    location: RestaurantLocation | None = None,
) -> RestaurantMedia:
    errors: list[dict[str, str]] = []
    if media_type not in MediaType.values:
        errors.append(
            {
                "field": "media_type",
                "message": f"Must be one of: {', '.join(MediaType.values)}",
            }
        )
    if upload.content_type not in ALLOWED_MEDIA_TYPES:
        errors.append({"field": "file", "message": "Unsupported file type"})
    if upload.size and upload.size > settings.MAX_UPLOAD_SIZE:
        errors.append({"field": "file", "message": "File is too large"})
    if errors:
        raise ValidationFailed(errors=errors)

    with transaction.atomic():
        if media_type in SINGLE_ACTIVE_MEDIA:
            RestaurantMedia.objects.filter(
                restaurant=restaurant,
                location=location,
                media_type=media_type,
                is_active=True,
            ).update(is_active=False)
        media = RestaurantMedia.objects.create(
            restaurant=restaurant,
            location=location,
            media_type=media_type,
            file=upload,
            original_name=upload.name or "upload",
            mime_type=upload.content_type or "",
            size=upload.size or 0,
        )

    logger.info(
        "Uploaded %s for %s (%d bytes)",
        media_type,
        restaurant.restaurant_url_name,
        media.size,
    )
    return media


def delete_media(restaurant_id: Any, media_id: Any) -> None:
    """Soft-delete active media. The stored file stays until cleanup_media runs."""
    updated = RestaurantMedia.objects.filter(
        restaurant_id=restaurant_id, pk=media_id, is_active=True
    ).update(is_active=False)
    if not updated:
        raise NotFound("Media not found")
    logger.info("Removed media %s from restaurant %s", media_id, restaurant_id)


def remove_inactive_media(dry_run: bool = False) -> list[str]:
    """
    Delete inactive media records along with their stored files.

    Returns the storage names of the removed files.
    """
    removed = []
    for media in RestaurantMedia.objects.filter(is_active=False).order_by("pk"):
        name = media.file.name
        if not dry_run:
            if name and default_storage.exists(name):
                default_storage.delete(name)
            media.delete()
        removed.append(name)
    return removed


def _stored_files(path: str) -> list[str]:
    if not default_storage.exists(path):
        return []
    dirs, files = default_storage.listdir(path)
    names = [f"{path}/{name}" for name in files]
    for directory in dirs:
        names.extend(_stored_files(f"{path}/{directory}"))
    return names


def remove_orphaned_media(dry_run: bool = False) -> list[str]:
    """Delete uploaded files that no media record points to."""
    known = set(RestaurantMedia.objects.values_list("file", flat=True))
    orphans = sorted(
        name for name in _stored_files(MEDIA_DIRECTORY) if name not in known
    )
    if not dry_run:
        for name in orphans:
            default_storage.delete(name)
    return orphans


def serialize_media(media: RestaurantMedia) -> dict[str, Any]:
    return {
        "id": media.pk,
        "media_type": media.media_type,
        "location_id": media.location_id,
        "url": media.file.url,
        "original_name": media.original_name,
        "mime_type": media.mime_type,
        "size": media.size,
        "is_active": media.is_active,
        "created_at": media.created_at,
    }


def favicon_url(restaurant: Restaurant | None) -> str | None:
    if restaurant is None:
        return None
    media = (
        RestaurantMedia.objects.filter(
            restaurant=restaurant,
            media_type=MediaType.FAVICON,
            is_active=True,
            location__isnull=True,
        )
        .order_by("-created_at")
        .first()
    )
    return media.file.url if media else None
