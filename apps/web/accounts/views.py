"""
Authentication and user management API views.

Login issues a JWT; /auth/me rehydrates a session from a stored token.
User management endpoints follow the role hierarchy in permissions.py.
"""

import logging
from typing import Any
from uuid import UUID

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from apps.web.core.decorators import sanitize_payload
from apps.web.core.ratelimit import rate_limit
from apps.web.core.responses import paginate, success_response
from apps.web.core.sanitizers import sanitize_user_data

from . import services
from .decorators import jwt_required, user_management_required
from .permissions import assignable_roles
from .serializers import (
    ChangePasswordRequest,
    ConfirmEmailRequest,
    CustomerRegisterRequest,
    LoginRequest,
    ResendConfirmationRequest,
    UserCreateRequest,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Authentication
# =============================================================================


@csrf_exempt
@require_POST
@rate_limit("auth")
def login(request: HttpRequest) -> JsonResponse:
    """
    POST /api/v1/auth/login

    Body: {"email" | "username", "password", "remember_me"}
    Pending accounts get 403 with code PENDING_CONFIRMATION.
    """
    data = LoginRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    result = services.login(data.identifier, data.password, data.remember_me)
    return success_response(result, "Login successful")


@csrf_exempt
@require_GET
@jwt_required
def me(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/auth/me - current user, roles, locations and restaurant."""
    user: Any = request.user
    return success_response(
        {
            "user": services.serialize_user(user),
            "restaurant": services.restaurant_summary(user.restaurant),
        },
        "User retrieved",
    )


@csrf_exempt
@require_POST
def logout(request: HttpRequest) -> JsonResponse:
    """POST /api/v1/auth/logout - tokens are stateless; the client discards it."""
    return success_response(None, "Logged out")


# =============================================================================
# Registration and confirmation
# =============================================================================


@csrf_exempt
@require_POST
@rate_limit("user_creation")
@sanitize_payload(sanitize_user_data)
def register_customer(request: HttpRequest) -> JsonResponse:
    """POST /api/v1/users/register"""
    data = CustomerRegisterRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    user = services.register_customer(data)
    return success_response(
        services.serialize_user(user),
        "Account created. Check your email to confirm it.",
        status=201,
    )


@csrf_exempt
@require_http_methods(["GET", "POST"])
def confirm_email(request: HttpRequest) -> JsonResponse:
    """
    POST /api/v1/users/confirm-email {"token"}
    GET  /api/v1/users/confirm-email?token=
    """
    if request.method == "GET":
        raw = request.GET
    else:
        raw = request.payload  # type: ignore[attr-defined]
    data = ConfirmEmailRequest.model_validate({"token": raw.get("token")})
    user = services.confirm_email(data.token)
    return success_response(
        {"user": services.serialize_user(user)}, "Email confirmed successfully"
    )


@csrf_exempt
@require_POST
@rate_limit("auth")
def resend_confirmation(request: HttpRequest) -> JsonResponse:
    """
    POST /api/v1/users/resend-confirmation

    Always answers the same way so the endpoint cannot be used to probe
    which emails are registered.
    """
    data = ResendConfirmationRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    sent = services.resend_confirmation(data.email)
    logger.info("Resend confirmation for %s (pending account: %s)", data.email, sent)
    return success_response(
        None, "If a pending account exists for this email, a new link was sent"
    )


# =============================================================================
# User management
# =============================================================================


@rate_limit("search")
@user_management_required
def list_users(request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/users

    Query: status, role, location_id, search, restaurant_id (superadmin),
    sort_by, sort_order, page, limit
    """
    users, meta = paginate(
        services.list_users(request.user, request.GET),
        request.GET.get("page", 1),
        request.GET.get("limit", 20),
    )
    return success_response(
        [services.serialize_user(u) for u in users], "Users retrieved", meta=meta
    )


@rate_limit("user_creation")
@user_management_required
@sanitize_payload(sanitize_user_data)
def create_user(request: HttpRequest) -> JsonResponse:
    """POST /api/v1/users"""
    data = UserCreateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    user = services.create_user(request.user, data)
    return success_response(services.serialize_user(user), "User created", status=201)


@jwt_required
def get_user(request: HttpRequest, user_id: UUID) -> JsonResponse:
    """GET /api/v1/users/{id}"""
    user = services.get_accessible_user(request.user, user_id)
    return success_response(services.serialize_user(user), "User retrieved")


@rate_limit("user_management")
@jwt_required
@sanitize_payload(sanitize_user_data)
def update_user(request: HttpRequest, user_id: UUID) -> JsonResponse:
    """PUT/PATCH /api/v1/users/{id} - only the fields sent are changed."""
    user = services.get_accessible_user(request.user, user_id)
    data = UserUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    user = services.update_user(request.user, user, data)
    return success_response(services.serialize_user(user), "User updated")


@rate_limit("user_management")
@user_management_required
def delete_user(request: HttpRequest, user_id: UUID) -> JsonResponse:
    """DELETE /api/v1/users/{id} - soft delete."""
    user = services.get_accessible_user(request.user, user_id)
    services.deactivate_user(request.user, user)
    return success_response(None, "User deactivated")


@rate_limit("password_change")
@jwt_required
def change_password(request: HttpRequest, user_id: UUID) -> JsonResponse:
    """POST /api/v1/users/{id}/change-password"""
    user = services.get_accessible_user(request.user, user_id)
    data = ChangePasswordRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    services.change_password(request.user, user, data)
    return success_response(None, "Password changed successfully")


@csrf_exempt
@require_GET
@jwt_required
def restaurant_users(request: HttpRequest, restaurant_id: UUID) -> JsonResponse:
    """GET /api/v1/users/restaurant/{restaurant_id}"""
    users = services.users_for_restaurant(request.user, restaurant_id)
    return success_response(
        [services.serialize_user(u) for u in users], "Users retrieved"
    )


@csrf_exempt
@require_GET
@jwt_required
def available_roles(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/users/roles/available - roles the caller may assign."""
    roles = assignable_roles(request.user).order_by("level", "name")
    return success_response(
        [
            {
                "id": role.pk,
                "name": role.name,
                "display_name": role.display_name,
                "description": role.description,
                "level": role.level,
                "scope": role.scope,
                "is_admin_role": role.is_admin_role,
            }
            for role in roles
        ],
        "Roles retrieved",
    )


@csrf_exempt
@require_GET
@jwt_required
def available_locations(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/users/locations/available"""
    return success_response(
        [
            {
                "id": loc.pk,
                "name": loc.name,
                "url_name": loc.url_name,
                "restaurant_id": loc.restaurant_id,
                "is_primary": loc.is_primary,
            }
            for loc in services.available_locations(request.user)
        ],
        "Locations retrieved",
    )
