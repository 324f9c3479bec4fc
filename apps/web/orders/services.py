"""
Order services - cart checkout and order lifecycle.
"""

import logging
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.db.models import QuerySet

from apps.web.accounts.permissions import can_access_restaurant
from apps.web.core.exceptions import AccessDenied, NotFound, ValidationFailed
from apps.web.core.models import Restaurant
from apps.web.menu.models import MenuItem
from apps.web.menu.services import default_language_code
from apps.web.restaurant.models import LocationStatus, RestaurantLocation

from .models import Order, OrderItem, OrderStatus
from .serializers import (
    OrderCreateRequest,
    OrderItemResponseSchema,
    OrderResponse,
)

logger = logging.getLogger(__name__)


def _item_names(items: list[MenuItem], language_code: str) -> dict[int, str]:
    """Snapshot names: the restaurant's default language, else any translation."""
    names: dict[int, str] = {}
    for item in items:
        translations = {t.language_code: t.name for t in item.translations.all()}
        names[item.pk] = (
            translations.get(language_code)
            or next(iter(translations.values()), "")
            or item.sku
            or f"Item {item.pk}"
        )
    return names


def create_order(user: Any, restaurant: Restaurant, data: OrderCreateRequest) -> Order:
    """
    Create an order from cart lines.

    Every item must belong to the restaurant and be available. Prices come
    from the menu, never from the client.

    Raises:
        ValidationFailed: unknown, foreign or unavailable items
    """
    if restaurant.status != Restaurant.Status.ACTIVE:
        raise ValidationFailed("Restaurant is not accepting orders")

    location = None
    if data.location_id:
        location = RestaurantLocation.objects.filter(
            pk=data.location_id, restaurant=restaurant, status=LocationStatus.ACTIVE
        ).first()
        if location is None:
            raise ValidationFailed(
                errors=[{"field": "location_id", "message": "Location not found"}]
            )

    item_ids = {line.menu_item_id for line in data.items}
    items = {
        item.pk: item
        for item in MenuItem.objects.filter(
            pk__in=item_ids, restaurant=restaurant
        ).prefetch_related("translations")
    }

    errors: list[dict[str, str]] = []
    for i, line in enumerate(data.items):
        item = items.get(line.menu_item_id)
        if item is None:
            errors.append(
                {"field": f"items.{i}.menu_item_id", "message": "Menu item not found"}
            )
        elif not item.is_available:
            errors.append(
                {
                    "field": f"items.{i}.menu_item_id",
                    "message": "Menu item is not available",
                }
            )
    if errors:
        raise ValidationFailed(errors=errors)

    names = _item_names(list(items.values()), default_language_code(restaurant))

    with transaction.atomic():
        order = Order.objects.create(
            restaurant=restaurant,
            user=user,
            location=location,
            total_amount=Decimal("0"),
            delivery_address=data.delivery_address,
            special_instructions=data.special_instructions,
        )

        total = Decimal("0")
        for line in data.items:
            item = items[line.menu_item_id]
            line_total = item.base_price * line.quantity
            OrderItem.objects.create(
                restaurant=restaurant,
                order=order,
                menu_item=item,
                item_name=names[item.pk],
                quantity=line.quantity,
                unit_price=item.base_price,
                line_total=line_total,
                special_instructions=line.special_instructions,
            )
            total += line_total

        order.total_amount = total
        order.save(update_fields=["total_amount", "updated_at"])

    logger.info(
        "Order %s created by %s at %s (total %s)",
        order.pk,
        user.username,
        restaurant.restaurant_url_name,
        total,
    )
    return order


def user_orders(user: Any) -> QuerySet[Order]:
    return Order.objects.filter(user=user).prefetch_related("items")


def get_order_for(user: Any, order_id: int) -> Order:
    """The order, if the user placed it or works at its restaurant."""
    order = Order.objects.prefetch_related("items").filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")
    is_owner = order.user_id == user.pk
    if not is_owner and not can_access_restaurant(user, order.restaurant_id):
        raise AccessDenied("You do not have access to this order")
    return order


def update_status(user: Any, order: Order, status: str) -> Order:
    if not can_access_restaurant(user, order.restaurant_id):
        raise AccessDenied("Only restaurant staff can update order status")
    if order.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        raise ValidationFailed(f"Order is already {order.status}")

    previous = order.status
    order.status = status
    order.save(update_fields=["status", "updated_at"])
    logger.info("Order %s status %s -> %s", order.pk, previous, status)
    return order


def serialize_order(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.pk,
        restaurant_id=order.restaurant_id,
        location_id=order.location_id,
        user_id=order.user_id,
        status=order.status,
        total_amount=order.total_amount,
        delivery_address=order.delivery_address,
        special_instructions=order.special_instructions,
        items=[
            OrderItemResponseSchema(
                id=oi.pk,
                menu_item_id=oi.menu_item_id,
                item_name=oi.item_name,
                quantity=oi.quantity,
                unit_price=oi.unit_price,
                line_total=oi.line_total,
                special_instructions=oi.special_instructions,
            )
            for oi in order.items.all()
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
