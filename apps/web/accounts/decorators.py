"""
Authentication and authorization decorators for API views.

Usage:
    @jwt_required
    def me(request):
        ...

    @restaurant_access_required(modify=True)
    def update_restaurant(request, restaurant_id):
        ...
"""

from collections.abc import Callable
from functools import wraps
from typing import Any

from django.contrib.auth import get_user_model
from django.http import HttpRequest

from apps.web.core.exceptions import AccessDenied, AuthenticationFailed

from .permissions import (
    can_access_restaurant,
    can_manage_restaurant_content,
    can_manage_users,
)
from .tokens import decode_access_token

User = get_user_model()


def get_bearer_token(request: HttpRequest) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_request(request: HttpRequest) -> Any:
    """
    Resolve the user from the bearer token and attach it to the request.

    Raises:
        AuthenticationFailed: missing token or unknown user
        AccessDenied: account is not active
        jose.JWTError: invalid or expired token
    """
    token = get_bearer_token(request)
    if token is None:
        raise AuthenticationFailed("Access token required")

    payload = decode_access_token(token)

    user = (
        User.objects.select_related("restaurant")
        .filter(pk=payload.get("sub"))
        .first()
    )
    if user is None:
        raise AuthenticationFailed("User not found")
    if user.status != User.Status.ACTIVE or not user.is_active:
        raise AccessDenied("Account is not active")

    request.user = user
    request.token_payload = payload  # type: ignore[attr-defined]
    return user


def jwt_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        authenticate_request(request)
        return view_func(request, *args, **kwargs)

    return wrapper


def restaurant_access_required(
    modify: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Require an authenticated member of the restaurant in the restaurant_id
    URL parameter. modify=True additionally requires a restaurant administrator.
    """

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            user = authenticate_request(request)
            restaurant_id = kwargs.get("restaurant_id")
            if not can_access_restaurant(user, restaurant_id, modify=modify):
                raise AccessDenied(
                    "You do not have permission to modify this restaurant"
                    if modify
                    else "You do not have access to this restaurant"
                )
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def user_management_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        user = authenticate_request(request)
        if not can_manage_users(user):
            raise AccessDenied("You do not have permission to manage users")
        return view_func(request, *args, **kwargs)

    return wrapper


def restaurant_content_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """Menu and location content: any administrator of the restaurant_id restaurant."""

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        user = authenticate_request(request)
        if not can_manage_restaurant_content(user, kwargs.get("restaurant_id")):
            raise AccessDenied("You do not have permission to manage this restaurant")
        return view_func(request, *args, **kwargs)

    return wrapper
