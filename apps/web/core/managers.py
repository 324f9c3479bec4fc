"""
Custom managers for multi-tenancy.

RestaurantScopedManager filters queries by the current restaurant.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models

if TYPE_CHECKING:
    from django.http import HttpRequest

    from .models import Restaurant, RestaurantScopedModel

_T = TypeVar("_T", bound="RestaurantScopedModel")


class RestaurantScopedManager(models.Manager[_T]):
    """
    Manager that filters by restaurant.

    Usage in views:
        # Scoped to the tenant resolved by TenantMiddleware
        items = MenuItem.objects.for_tenant(request).all()

        # Scoped to an explicit restaurant (authenticated admin routes)
        items = MenuItem.objects.for_restaurant(restaurant)

    SECURITY: Always scope querysets in views, never use raw querysets.
    """

    def for_restaurant(self, restaurant: "Restaurant | str") -> models.QuerySet[_T]:
        """Filter queryset by a restaurant instance or primary key."""
        if isinstance(restaurant, models.Model):
            return self.filter(restaurant=restaurant)
        return self.filter(restaurant_id=restaurant)

    def for_tenant(self, request: "HttpRequest") -> models.QuerySet[_T]:
        """
        Filter queryset by the restaurant attached to the request.

        Args:
            request: HttpRequest with .restaurant attribute (set by TenantMiddleware)

        Returns:
            QuerySet filtered to the request's restaurant

        Raises:
            ValueError: If request has no restaurant attached
        """
        restaurant: Any = getattr(request, "restaurant", None)
        if restaurant is None:
            msg = "Request has no restaurant attached. Is TenantMiddleware enabled?"
            raise ValueError(msg)
        return self.filter(restaurant=restaurant)
