"""
Role-based access rules.

Role hierarchy for assigning roles to other users:
- superadmin and restaurant_administrator: every role except superadmin
- location_administrator: every role except superadmin and
  restaurant_administrator, and only for locations they administer
- everyone else: non-administrative roles only
"""

from typing import Any

from django.db.models import QuerySet

from .models import Role, UserRole

_ASSIGNMENT_EXCLUSIONS = {
    Role.SUPERADMIN: {Role.SUPERADMIN},
    Role.RESTAURANT_ADMINISTRATOR: {Role.SUPERADMIN},
    Role.LOCATION_ADMINISTRATOR: {Role.SUPERADMIN, Role.RESTAURANT_ADMINISTRATOR},
}
_DEFAULT_EXCLUSIONS = set(Role.ADMIN_ROLES)


def active_grants(user: Any) -> QuerySet[UserRole]:
    return UserRole.objects.filter(
        user=user, is_active=True, role__is_active=True
    ).select_related("role", "location")


def role_names(user: Any) -> set[str]:
    return set(active_grants(user).values_list("role__name", flat=True))


def is_superadmin(user: Any) -> bool:
    return bool(user.is_superuser) or Role.SUPERADMIN in role_names(user)


def effective_role(user: Any) -> str | None:
    """Highest-authority role the user holds (lowest level number)."""
    if user.is_superuser:
        return Role.SUPERADMIN
    grant = active_grants(user).order_by("role__level").first()
    return grant.role.name if grant else None


def assignable_roles(user: Any) -> QuerySet[Role]:
    role = effective_role(user) or ""
    excluded = _ASSIGNMENT_EXCLUSIONS.get(role, _DEFAULT_EXCLUSIONS)
    return Role.objects.filter(is_active=True).exclude(name__in=excluded)


def can_manage_users(user: Any) -> bool:
    if is_superadmin(user):
        return True
    return active_grants(user).filter(role__can_manage_users=True).exists()


def managed_location_ids(user: Any) -> set[Any] | None:
    """
    Locations whose staff the user may manage.

    Returns None when the user manages every location of their restaurant.
    """
    if is_superadmin(user):
        return None
    names = role_names(user)
    if Role.RESTAURANT_ADMINISTRATOR in names:
        return None
    return set(
        active_grants(user)
        .filter(role__name=Role.LOCATION_ADMINISTRATOR, location__isnull=False)
        .values_list("location_id", flat=True)
    )


def can_access_restaurant(user: Any, restaurant_id: Any, modify: bool = False) -> bool:
    """
    Read access: any member of the restaurant.
    Modify access: restaurant administrators of that restaurant.
    """
    if is_superadmin(user):
        return True
    if str(user.restaurant_id) != str(restaurant_id):
        return False
    if not modify:
        return True
    return Role.RESTAURANT_ADMINISTRATOR in role_names(user)


def can_manage_restaurant_content(user: Any, restaurant_id: Any) -> bool:
    """Menu, category and location-level content: any admin role of the restaurant."""
    if is_superadmin(user):
        return True
    if str(user.restaurant_id) != str(restaurant_id):
        return False
    return bool(role_names(user) & set(Role.ADMIN_ROLES))


def can_access_user(actor: Any, target: Any) -> bool:
    """Users can access themselves; managers can access staff they manage."""
    if actor.pk == target.pk:
        return True
    if is_superadmin(actor):
        return True
    if actor.restaurant_id is None or actor.restaurant_id != target.restaurant_id:
        return False
    if not can_manage_users(actor):
        return False

    locations = managed_location_ids(actor)
    if locations is None:
        return True
    return UserRole.objects.filter(
        user=target, is_active=True, location_id__in=locations
    ).exists()
