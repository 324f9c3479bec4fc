"""Factory classes for order models."""

from decimal import Decimal

import factory

from apps.web.core.tests.factories import RestaurantFactory, UserFactory
from apps.web.orders.models import Order, OrderItem, OrderStatus


class OrderFactory(factory.django.DjangoModelFactory):
    """Factory for Order model."""

    class Meta:
        model = Order

    restaurant = factory.SubFactory(RestaurantFactory)
    user = factory.SubFactory(UserFactory, restaurant=None)
    status = OrderStatus.PENDING
    total_amount = Decimal("50.00")


class OrderItemFactory(factory.django.DjangoModelFactory):
    """Factory for OrderItem model."""

    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    restaurant = factory.SelfAttribute("order.restaurant")
    item_name = "Margherita"
    quantity = 2
    unit_price = Decimal("25.00")
    line_total = Decimal("50.00")
