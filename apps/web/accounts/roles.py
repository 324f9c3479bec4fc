"""Built-in role definitions, seeded by setup_database."""

from .models import Role

ROLE_DEFINITIONS: dict[str, dict[str, object]] = {
    Role.SUPERADMIN: {
        "display_name": "Super Administrator",
        "description": "Platform-wide administration",
        "level": 1,
        "is_admin_role": True,
        "can_manage_users": True,
        "can_manage_locations": True,
        "scope": Role.Scope.SYSTEM,
    },
    Role.RESTAURANT_ADMINISTRATOR: {
        "display_name": "Restaurant Administrator",
        "description": "Full control over one restaurant and all its locations",
        "level": 2,
        "is_admin_role": True,
        "can_manage_users": True,
        "can_manage_locations": True,
        "scope": Role.Scope.RESTAURANT,
    },
    Role.LOCATION_ADMINISTRATOR: {
        "display_name": "Location Administrator",
        "description": "Manages staff and operations of assigned locations",
        "level": 3,
        "is_admin_role": True,
        "can_manage_users": True,
        "can_manage_locations": False,
        "scope": Role.Scope.LOCATION,
    },
    Role.WAITER: {
        "display_name": "Waiter",
        "description": "Takes orders and serves tables",
        "level": 4,
        "scope": Role.Scope.LOCATION,
    },
    Role.POS_OPERATOR: {
        "display_name": "POS Operator",
        "description": "Operates the point of sale",
        "level": 4,
        "scope": Role.Scope.LOCATION,
    },
    Role.FOOD_RUNNER: {
        "display_name": "Food Runner",
        "description": "Delivers dishes from the kitchen to tables",
        "level": 5,
        "scope": Role.Scope.LOCATION,
    },
    Role.KDS_OPERATOR: {
        "display_name": "KDS Operator",
        "description": "Operates the kitchen display system",
        "level": 5,
        "scope": Role.Scope.LOCATION,
    },
}


def ensure_role(name: str) -> Role:
    """Fetch a built-in role, creating it from its definition if missing."""
    role, _created = Role.objects.get_or_create(
        name=name, defaults=ROLE_DEFINITIONS[name]
    )
    return role


def seed_roles() -> int:
    """Create or refresh every built-in role. Returns the number created."""
    created = 0
    for name, definition in ROLE_DEFINITIONS.items():
        _role, was_created = Role.objects.update_or_create(
            name=name, defaults=definition
        )
        created += int(was_created)
    return created
