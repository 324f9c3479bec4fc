"""Factory helpers for roles and grants."""

from typing import Any

from apps.web.accounts.models import UserLocationAssignment, UserRole
from apps.web.accounts.roles import ensure_role


def grant_role(
    user: Any,
    role_name: str,
    restaurant: Any = None,
    location: Any = None,
    is_primary: bool = True,
) -> UserRole:
    """Grant a built-in role, assigning the location too when one is given."""
    grant = UserRole.objects.create(
        user=user,
        role=ensure_role(role_name),
        restaurant=restaurant or (location.restaurant if location else None),
        location=location,
        is_primary=is_primary,
    )
    if location is not None:
        UserLocationAssignment.objects.get_or_create(
            user=user, location=location, defaults={"is_primary": is_primary}
        )
    return grant
