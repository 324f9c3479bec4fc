"""
Account services - login, user management and email confirmation.
"""

import logging
import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.web.core.exceptions import (
    AccessDenied,
    AuthenticationFailed,
    Conflict,
    NotFound,
    PendingConfirmation,
    ValidationFailed,
)
from apps.web.core.models import Restaurant
from apps.web.restaurant.models import LocationStatus, RestaurantLocation

from .emails import send_confirmation_email
from .models import Role, UserLocationAssignment, UserRole
from .permissions import (
    active_grants,
    assignable_roles,
    can_access_user,
    is_superadmin,
    managed_location_ids,
)
from .serializers import (
    ChangePasswordRequest,
    CustomerRegisterRequest,
    RoleLocationPair,
    UserCreateRequest,
    UserUpdateRequest,
)
from .tokens import create_access_token

logger = logging.getLogger(__name__)

User = get_user_model()

CONFIRMATION_TTL = timedelta(hours=24)

SORTABLE_FIELDS = {
    "created_at": "date_joined",
    "full_name": "full_name",
    "username": "username",
    "email": "email",
    "last_login": "last_login",
    "status": "status",
}


def issue_confirmation_token(obj: Any) -> str:
    """Set a fresh email confirmation token and expiry on a User or Restaurant."""
    obj.email_confirmation_token = secrets.token_urlsafe(32)
    obj.email_confirmation_expires = timezone.now() + CONFIRMATION_TTL
    return obj.email_confirmation_token


def restaurant_summary(restaurant: Restaurant | None) -> dict[str, Any] | None:
    if restaurant is None:
        return None
    return {
        "id": restaurant.pk,
        "restaurant_name": restaurant.restaurant_name,
        "restaurant_url_name": restaurant.restaurant_url_name,
        "business_type": restaurant.business_type,
        "subscription_plan": restaurant.subscription_plan,
        "status": restaurant.status,
    }


def serialize_user(user: Any) -> dict[str, Any]:
    """User with roles, role-location pairs and accessible locations."""
    grants = list(active_grants(user).order_by("-is_primary", "role__level"))
    primary = next((g for g in grants if g.is_primary), grants[0] if grants else None)
    assignments = list(
        UserLocationAssignment.objects.filter(user=user).select_related("location")
    )
    primary_location = next((a for a in assignments if a.is_primary), None)

    return {
        "id": user.pk,
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "status": user.status,
        "email_confirmed": user.email_confirmed,
        "restaurant_id": user.restaurant_id,
        "first_login_password_change": user.first_login_password_change,
        "last_login": user.last_login,
        "created_at": user.date_joined,
        "primary_role": primary.role.name if primary else None,
        "roles": [
            {
                "role": g.role.name,
                "display_name": g.role.display_name,
                "level": g.role.level,
                "is_admin_role": g.role.is_admin_role,
                "location_id": g.location_id,
                "location_name": g.location.name if g.location else None,
                "is_primary": g.is_primary,
            }
            for g in grants
        ],
        "role_location_pairs": [
            {"role": g.role.name, "location_id": g.location_id} for g in grants
        ],
        "locations": [
            {
                "id": a.location.pk,
                "name": a.location.name,
                "url_name": a.location.url_name,
                "is_primary": a.is_primary,
            }
            for a in assignments
        ],
        "primary_location_id": (
            primary_location.location_id if primary_location else None
        ),
    }


# =============================================================================
# Authentication
# =============================================================================


def login(identifier: str, password: str, remember_me: bool = False) -> dict[str, Any]:
    """
    Authenticate by email or username.

    Raises:
        AuthenticationFailed: unknown user or wrong password
        PendingConfirmation: email not confirmed yet
        AccessDenied: account inactive or suspended
    """
    user = (
        User.objects.select_related("restaurant")
        .filter(Q(username__iexact=identifier) | Q(email__iexact=identifier))
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Failed login attempt for %s", identifier)
        raise AuthenticationFailed("Invalid credentials")

    if user.status == User.Status.PENDING:
        raise PendingConfirmation(details={"email": user.email})

    if user.status != User.Status.ACTIVE or not user.is_active:
        raise AccessDenied(f"Account is {user.status}")

    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])

    token, expires_in = create_access_token(user, remember_me=remember_me)
    logger.info("User %s logged in (remember_me=%s)", user.username, remember_me)

    return {
        "user": serialize_user(user),
        "token": token,
        "expires_in": expires_in,
        "remember_me": remember_me,
        "restaurant": restaurant_summary(user.restaurant),
    }


# =============================================================================
# User lifecycle
# =============================================================================


def _ensure_unique(
    username: str | None, email: str | None, exclude_pk: Any = None
) -> None:
    others = User.objects.exclude(pk=exclude_pk) if exclude_pk else User.objects.all()
    if username and others.filter(username__iexact=username).exists():
        raise Conflict("Username is already taken")
    if email and others.filter(email__iexact=email).exists():
        raise Conflict("Email is already registered")


def username_from_email(email: str) -> str:
    local_part = email.split("@")[0].lower()
    base = "".join(ch for ch in local_part if ch.isalnum())[:40] or "user"
    username = base
    while User.objects.filter(username__iexact=username).exists():
        username = f"{base}{secrets.token_hex(2)}"
    return username


def register_customer(data: CustomerRegisterRequest) -> Any:
    """Create a pending customer account and email the confirmation link."""
    _ensure_unique(data.username, data.email)

    with transaction.atomic():
        user = User(
            username=data.username or username_from_email(data.email),
            email=data.email.lower(),
            full_name=data.full_name,
            phone=data.phone,
            status=User.Status.PENDING,
        )
        user.set_password(data.password)
        issue_confirmation_token(user)
        user.save()
        transaction.on_commit(lambda: send_confirmation_email(user))

    logger.info("Registered customer %s", user.username)
    return user


def replace_role_grants(
    actor: Any,
    user: Any,
    restaurant: Restaurant,
    pairs: list[RoleLocationPair],
    primary_location_id: UUID | None = None,
) -> None:
    """
    Replace a user's role grants and location assignments.

    Must run inside a transaction. Every role must be assignable by the actor
    and every location must belong to the restaurant.
    """
    allowed = set(assignable_roles(actor).values_list("name", flat=True))
    roles = {
        r.name: r
        for r in Role.objects.filter(name__in=[p.role for p in pairs], is_active=True)
    }
    wanted_locations = {p.location_id for p in pairs if p.location_id}
    if primary_location_id:
        wanted_locations.add(primary_location_id)
    locations = {
        loc.pk: loc
        for loc in RestaurantLocation.objects.filter(
            restaurant=restaurant, pk__in=wanted_locations
        )
    }
    managed = managed_location_ids(actor)

    errors: list[dict[str, str]] = []
    for i, pair in enumerate(pairs):
        field = f"role_location_pairs.{i}"
        role = roles.get(pair.role)
        if role is None:
            errors.append({"field": f"{field}.role", "message": "Unknown role"})
            continue
        if pair.role not in allowed:
            raise AccessDenied(f"You cannot assign the role '{pair.role}'")
        if pair.location_id and pair.location_id not in locations:
            errors.append(
                {
                    "field": f"{field}.location_id",
                    "message": "Location not found in this restaurant",
                }
            )
        if role.scope == Role.Scope.LOCATION and not pair.location_id:
            errors.append(
                {
                    "field": f"{field}.location_id",
                    "message": "Location is required for this role",
                }
            )
        if managed is not None and pair.location_id not in managed:
            raise AccessDenied("You can only assign roles for locations you manage")

    if primary_location_id and primary_location_id not in locations:
        errors.append(
            {
                "field": "primary_location_id",
                "message": "Location not found in this restaurant",
            }
        )
    if errors:
        raise ValidationFailed(errors=errors)

    primary_index = next((i for i, p in enumerate(pairs) if p.is_primary), 0)

    UserRole.objects.filter(user=user).delete()
    UserRole.objects.bulk_create(
        [
            UserRole(
                user=user,
                role=roles[pair.role],
                restaurant=restaurant,
                location=locations.get(pair.location_id) if pair.location_id else None,
                is_primary=i == primary_index,
                assigned_by=actor,
            )
            for i, pair in enumerate(pairs)
        ]
    )

    ordered_locations: list[Any] = []
    for pair in pairs:
        if pair.location_id and pair.location_id not in ordered_locations:
            ordered_locations.append(pair.location_id)
    if primary_location_id and primary_location_id not in ordered_locations:
        ordered_locations.insert(0, primary_location_id)
    primary_location = primary_location_id or pairs[primary_index].location_id
    if primary_location is None and ordered_locations:
        primary_location = ordered_locations[0]

    UserLocationAssignment.objects.filter(user=user).delete()
    UserLocationAssignment.objects.bulk_create(
        [
            UserLocationAssignment(
                user=user,
                location=locations[location_id],
                is_primary=location_id == primary_location,
                assigned_by=actor,
            )
            for location_id in ordered_locations
        ]
    )


def _target_restaurant(actor: Any, restaurant_id: UUID | None) -> Restaurant:
    if restaurant_id and is_superadmin(actor):
        restaurant = Restaurant.objects.filter(pk=restaurant_id).first()
        if restaurant is None:
            raise NotFound("Restaurant not found")
        return restaurant
    if restaurant_id and str(restaurant_id) != str(actor.restaurant_id):
        raise AccessDenied("You cannot create users for another restaurant")
    if actor.restaurant is None:
        raise ValidationFailed(
            errors=[{"field": "restaurant_id", "message": "Restaurant is required"}]
        )
    return actor.restaurant


def create_user(actor: Any, data: UserCreateRequest) -> Any:
    """Create a staff user with role grants; all-or-nothing."""
    restaurant = _target_restaurant(actor, data.restaurant_id)
    _ensure_unique(data.username, data.email)

    with transaction.atomic():
        user = User(
            username=data.username,
            email=data.email.lower() if data.email else None,
            full_name=data.full_name,
            phone=data.phone,
            restaurant=restaurant,
            status=data.status,
            is_active=data.status == User.Status.ACTIVE,
            email_confirmed=data.status == User.Status.ACTIVE,
            first_login_password_change=True,
            created_by=actor,
        )
        user.set_password(data.password)
        if data.status == User.Status.PENDING:
            issue_confirmation_token(user)
        user.save()

        replace_role_grants(
            actor, user, restaurant, data.role_location_pairs, data.primary_location_id
        )

        if user.status == User.Status.PENDING:
            transaction.on_commit(lambda: send_confirmation_email(user))

    logger.info(
        "User %s created %s in restaurant %s",
        actor.username,
        user.username,
        restaurant.restaurant_url_name,
    )
    return user


def get_accessible_user(actor: Any, user_id: Any) -> Any:
    user = User.objects.select_related("restaurant").filter(pk=user_id).first()
    if user is None:
        raise NotFound("User not found")
    if not can_access_user(actor, user):
        raise AccessDenied("You do not have access to this user")
    return user


def update_user(actor: Any, user: Any, data: UserUpdateRequest) -> Any:
    """Apply the fields present in the request (PUT and PATCH behave alike)."""
    changes = data.model_dump(exclude_unset=True)
    managing = actor.pk != user.pk or is_superadmin(actor)

    if not managing and ({"status", "role_location_pairs"} & changes.keys()):
        raise AccessDenied("You cannot change your own status or roles")

    _ensure_unique(changes.get("username"), changes.get("email"), exclude_pk=user.pk)

    with transaction.atomic():
        for field in ("full_name", "username", "phone"):
            if changes.get(field) is not None:
                setattr(user, field, changes[field])
        if "email" in changes:
            user.email = changes["email"].lower() if changes["email"] else None
        if changes.get("status"):
            user.status = changes["status"]
            user.is_active = user.status == User.Status.ACTIVE
        user.save()

        if data.role_location_pairs:
            if user.restaurant is None:
                raise ValidationFailed("User does not belong to a restaurant")
            replace_role_grants(
                actor,
                user,
                user.restaurant,
                data.role_location_pairs,
                data.primary_location_id,
            )

    logger.info("User %s updated %s", actor.username, user.username)
    return user


def deactivate_user(actor: Any, user: Any) -> None:
    """Soft delete: the account is kept but can no longer log in."""
    if actor.pk == user.pk:
        raise ValidationFailed("You cannot delete your own account")

    user.status = User.Status.INACTIVE
    user.is_active = False
    user.save(update_fields=["status", "is_active", "updated_at"])
    logger.info("User %s deactivated %s", actor.username, user.username)


def change_password(actor: Any, user: Any, data: ChangePasswordRequest) -> None:
    """Users changing their own password must supply the current one."""
    if actor.pk == user.pk and not user.check_password(data.current_password or ""):
        raise ValidationFailed(
            errors=[
                {
                    "field": "current_password",
                    "message": "Current password is incorrect",
                }
            ]
        )

    user.set_password(data.new_password)
    user.first_login_password_change = False
    user.save(update_fields=["password", "first_login_password_change", "updated_at"])
    logger.info("Password changed for %s by %s", user.username, actor.username)


def confirm_email(token: str) -> Any:
    """Activate the pending user (and their pending restaurant) owning the token."""
    user = User.objects.filter(email_confirmation_token=token).first()
    if user is None:
        raise ValidationFailed("Invalid or expired confirmation token")
    expires = user.email_confirmation_expires
    if expires and expires < timezone.now():
        raise ValidationFailed("Confirmation token has expired")

    with transaction.atomic():
        if user.status == User.Status.PENDING:
            user.status = User.Status.ACTIVE
            user.is_active = True
        user.email_confirmed = True
        user.email_confirmation_token = ""
        user.email_confirmation_expires = None
        user.save()

        Restaurant.objects.filter(
            email_confirmation_token=token, status=Restaurant.Status.PENDING
        ).update(
            status=Restaurant.Status.ACTIVE,
            email_confirmed=True,
            email_confirmation_token="",
            email_confirmation_expires=None,
        )

    logger.info("Email confirmed for %s", user.username)
    return user


def resend_confirmation(email: str) -> bool:
    """Issue a new token for a pending account. Returns False when none matches."""
    user = User.objects.filter(
        email__iexact=email, status=User.Status.PENDING
    ).first()
    if user is None:
        return False

    with transaction.atomic():
        old_token = user.email_confirmation_token
        token = issue_confirmation_token(user)
        user.save()
        if old_token:
            Restaurant.objects.filter(email_confirmation_token=old_token).update(
                email_confirmation_token=token,
                email_confirmation_expires=user.email_confirmation_expires,
            )
        transaction.on_commit(lambda: send_confirmation_email(user))
    return True


# =============================================================================
# Queries
# =============================================================================


def list_users(actor: Any, params: Any) -> QuerySet[Any]:
    """Users visible to the actor, filtered by status, role, location and search."""
    users = User.objects.select_related("restaurant")

    if is_superadmin(actor):
        if params.get("restaurant_id"):
            users = users.filter(restaurant_id=params["restaurant_id"])
    else:
        users = users.filter(restaurant_id=actor.restaurant_id)
        managed = managed_location_ids(actor)
        if managed is not None:
            users = users.filter(
                Q(pk=actor.pk) | Q(role_grants__location_id__in=managed)
            )

    if params.get("status"):
        users = users.filter(status=params["status"])
    if params.get("role"):
        users = users.filter(
            role_grants__role__name=params["role"], role_grants__is_active=True
        )
    if params.get("location_id"):
        users = users.filter(role_grants__location_id=params["location_id"])
    if params.get("search"):
        term = params["search"]
        users = users.filter(
            Q(full_name__icontains=term)
            | Q(username__icontains=term)
            | Q(email__icontains=term)
        )

    sort_field = SORTABLE_FIELDS.get(params.get("sort_by", ""), "date_joined")
    if params.get("sort_order", "desc").lower() == "desc":
        sort_field = f"-{sort_field}"
    return users.distinct().order_by(sort_field, "pk")


def users_for_restaurant(actor: Any, restaurant_id: Any) -> QuerySet[Any]:
    if not is_superadmin(actor) and str(actor.restaurant_id) != str(restaurant_id):
        raise AccessDenied("You do not have access to this restaurant")
    return User.objects.filter(restaurant_id=restaurant_id).order_by("full_name")


def available_locations(actor: Any) -> QuerySet[RestaurantLocation]:
    """Active locations the actor can assign staff to."""
    locations = RestaurantLocation.objects.filter(status=LocationStatus.ACTIVE)
    if not is_superadmin(actor):
        locations = locations.filter(restaurant_id=actor.restaurant_id)
        managed = managed_location_ids(actor)
        if managed is not None:
            locations = locations.filter(pk__in=managed)
    return locations.order_by("-is_primary", "name")
