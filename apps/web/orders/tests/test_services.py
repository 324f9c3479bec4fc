"""
Tests for order services.
"""

from decimal import Decimal

import pytest

from apps.web.core.exceptions import AccessDenied, NotFound, ValidationFailed
from apps.web.core.models import Restaurant
from apps.web.core.tests.factories import RestaurantFactory, UserFactory
from apps.web.menu.tests.factories import (
    ItemTranslationFactory,
    MenuItemFactory,
    translated_item,
)
from apps.web.orders import services
from apps.web.orders.models import OrderStatus
from apps.web.orders.serializers import OrderCreateRequest
from apps.web.orders.tests.factories import OrderFactory, OrderItemFactory
from apps.web.restaurant.models import LocationStatus
from apps.web.restaurant.tests.factories import LocationFactory


def cart(*lines, **extra):
    return OrderCreateRequest.model_validate(
        {
            "items": [
                {"menu_item_id": item.pk, "quantity": quantity}
                for item, quantity in lines
            ],
            **extra,
        }
    )


@pytest.mark.django_db
class TestCreateOrder:
    def test_prices_come_from_menu(self, restaurant, customer):
        pizza = translated_item(restaurant, "Margherita", price="42.90")
        soda = translated_item(restaurant, "Guaraná", price="6.50")

        order = services.create_order(customer, restaurant, cart((pizza, 2), (soda, 3)))

        assert order.total_amount == Decimal("105.30")
        assert order.status == OrderStatus.PENDING
        lines = list(order.items.all())
        assert [line.item_name for line in lines] == ["Margherita", "Guaraná"]
        assert lines[0].unit_price == Decimal("42.90")
        assert lines[0].line_total == Decimal("85.80")
        assert lines[1].line_total == Decimal("19.50")

    def test_name_falls_back_to_any_translation(self, restaurant, customer):
        item = MenuItemFactory(restaurant=restaurant, sku="DRK-1")
        ItemTranslationFactory(item=item, language_code="en", name="Lemonade")

        order = services.create_order(customer, restaurant, cart((item, 1)))

        assert order.items.get().item_name == "Lemonade"

    def test_name_falls_back_to_sku(self, restaurant, customer):
        item = MenuItemFactory(restaurant=restaurant, sku="DRK-2")

        order = services.create_order(customer, restaurant, cart((item, 1)))

        assert order.items.get().item_name == "DRK-2"

    def test_snapshot_survives_menu_changes(self, restaurant, customer):
        pizza = translated_item(restaurant, "Calabresa", price="30.00")
        order = services.create_order(customer, restaurant, cart((pizza, 1)))

        pizza.base_price = Decimal("99.00")
        pizza.save()
        pizza.translations.update(name="Renamed")

        line = order.items.get()
        assert line.unit_price == Decimal("30.00")
        assert line.item_name == "Calabresa"

    def test_unavailable_item_rejected(self, restaurant, customer):
        item = translated_item(restaurant, "Seasonal", is_available=False)

        with pytest.raises(ValidationFailed) as exc_info:
            services.create_order(customer, restaurant, cart((item, 1)))

        assert exc_info.value.errors == [
            {"field": "items.0.menu_item_id", "message": "Menu item is not available"}
        ]

    def test_item_of_other_restaurant_rejected(self, restaurant, customer):
        mine = translated_item(restaurant, "Mine")
        foreign = translated_item(RestaurantFactory(), "Foreign")

        with pytest.raises(ValidationFailed) as exc_info:
            services.create_order(customer, restaurant, cart((mine, 1), (foreign, 1)))

        assert exc_info.value.errors == [
            {"field": "items.1.menu_item_id", "message": "Menu item not found"}
        ]
        assert not restaurant.orders.exists()

    def test_inactive_restaurant_rejected(self, customer):
        closed = RestaurantFactory(status=Restaurant.Status.INACTIVE)
        item = translated_item(closed, "Margherita")

        with pytest.raises(ValidationFailed, match="not accepting orders"):
            services.create_order(customer, closed, cart((item, 1)))

    def test_location_must_belong_to_restaurant(self, restaurant, location, customer):
        item = translated_item(restaurant, "Margherita")
        elsewhere = LocationFactory(restaurant=RestaurantFactory())

        with pytest.raises(ValidationFailed) as exc_info:
            services.create_order(
                customer, restaurant, cart((item, 1), location_id=str(elsewhere.pk))
            )
        assert exc_info.value.errors[0]["field"] == "location_id"

        order = services.create_order(
            customer, restaurant, cart((item, 1), location_id=str(location.pk))
        )
        assert order.location == location

    def test_inactive_location_rejected(self, restaurant, customer):
        item = translated_item(restaurant, "Margherita")
        closed = LocationFactory(restaurant=restaurant, status=LocationStatus.INACTIVE)

        with pytest.raises(ValidationFailed):
            services.create_order(
                customer, restaurant, cart((item, 1), location_id=str(closed.pk))
            )


@pytest.mark.django_db
class TestOrderAccess:
    def test_owner_can_read(self, restaurant, customer):
        order = OrderFactory(restaurant=restaurant, user=customer)

        assert services.get_order_for(customer, order.pk) == order

    def test_staff_can_read(self, restaurant, waiter, customer):
        order = OrderFactory(restaurant=restaurant, user=customer)

        assert services.get_order_for(waiter, order.pk) == order

    def test_other_customer_denied(self, restaurant, customer):
        order = OrderFactory(restaurant=restaurant, user=customer)
        stranger = UserFactory(restaurant=None)

        with pytest.raises(AccessDenied):
            services.get_order_for(stranger, order.pk)

    def test_unknown_order(self, customer):
        with pytest.raises(NotFound):
            services.get_order_for(customer, 999999)

    def test_user_orders_only_own(self, restaurant, customer):
        OrderFactory(restaurant=restaurant, user=customer)
        OrderFactory(restaurant=restaurant)

        assert services.user_orders(customer).count() == 1


@pytest.mark.django_db
class TestUpdateStatus:
    def test_staff_moves_order_forward(self, restaurant, waiter):
        order = OrderFactory(restaurant=restaurant)

        services.update_status(waiter, order, OrderStatus.PREPARING)

        order.refresh_from_db()
        assert order.status == OrderStatus.PREPARING

    def test_customer_cannot_update(self, restaurant, customer):
        order = OrderFactory(restaurant=restaurant, user=customer)

        with pytest.raises(AccessDenied, match="Only restaurant staff"):
            services.update_status(customer, order, OrderStatus.CANCELLED)

    @pytest.mark.parametrize("final", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_final_states_are_locked(self, restaurant, waiter, final):
        order = OrderFactory(restaurant=restaurant, status=final)

        with pytest.raises(ValidationFailed, match=f"Order is already {final}"):
            services.update_status(waiter, order, OrderStatus.PENDING)


@pytest.mark.django_db
def test_serialize_order(restaurant, customer):
    line = OrderItemFactory(order=OrderFactory(restaurant=restaurant, user=customer))

    payload = services.serialize_order(line.order).model_dump(mode="json")

    assert payload["user_id"] == str(customer.pk)
    assert payload["restaurant_id"] == str(restaurant.pk)
    assert payload["items"][0]["item_name"] == "Margherita"
    assert payload["items"][0]["menu_item_id"] is None
    assert Decimal(payload["total_amount"]) == Decimal("50.00")
