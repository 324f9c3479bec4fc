"""Admin registrations for roles and grants."""

from django.contrib import admin

from .models import Role, UserLocationAssignment, UserRole


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "display_name", "level", "scope", "is_active"]
    list_filter = ["scope", "is_admin_role", "is_active"]
    search_fields = ["name", "display_name"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(UserRole)
class UserRoleAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "role", "restaurant", "location", "is_primary", "is_active"]
    list_filter = ["role", "is_primary", "is_active"]
    search_fields = ["user__username", "user__email"]
    raw_id_fields = ["user", "assigned_by"]


@admin.register(UserLocationAssignment)
class UserLocationAssignmentAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "location", "is_primary"]
    search_fields = ["user__username", "location__name"]
    raw_id_fields = ["user", "assigned_by"]
