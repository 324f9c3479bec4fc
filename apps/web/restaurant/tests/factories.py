"""Factory classes for restaurant models."""

import factory

from apps.web.core.tests.factories import RestaurantFactory
from apps.web.restaurant.models import (
    BillingAddress,
    LocationStatus,
    PaymentInfo,
    RestaurantLocation,
)


class LocationFactory(factory.django.DjangoModelFactory):
    """Factory for RestaurantLocation model."""

    class Meta:
        model = RestaurantLocation

    restaurant = factory.SubFactory(RestaurantFactory)
    name = factory.Sequence(lambda n: f"Location {n}")
    url_name = factory.Sequence(lambda n: f"location-{n}")
    phone = "11999990000"
    address_street = "Rua Augusta"
    address_street_number = "100"
    address_city = "São Paulo"
    address_state = "SP"
    address_zip_code = "01305000"
    operating_hours = factory.LazyFunction(
        lambda: {"monday": {"open": "11:00", "close": "23:00", "closed": False}}
    )
    is_primary = False
    status = LocationStatus.ACTIVE


class BillingAddressFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = BillingAddress

    restaurant = factory.SubFactory(RestaurantFactory)
    street = "Av. Paulista"
    street_number = "1000"
    city = "São Paulo"
    state = "SP"
    zip_code = "01310100"


class PaymentInfoFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PaymentInfo

    restaurant = factory.SubFactory(RestaurantFactory)
    card_token = factory.Sequence(lambda n: f"pm_card_{n}")
    card_brand = "visa"
    card_last4 = "4242"
    expiry_month = 12
    expiry_year = 2030
