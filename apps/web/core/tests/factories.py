"""Factory classes for core models."""

import factory

from apps.web.core.models import Restaurant, User


class RestaurantFactory(factory.django.DjangoModelFactory):
    """Factory for Restaurant model."""

    class Meta:
        model = Restaurant

    restaurant_url_name = factory.Sequence(lambda n: f"restaurant-{n}")
    restaurant_name = factory.Sequence(lambda n: f"Restaurant {n}")
    owner_name = factory.Faker("name")
    email = factory.LazyAttribute(lambda obj: f"{obj.restaurant_url_name}@example.com")
    cuisine_type = "Italian"
    status = Restaurant.Status.ACTIVE
    email_confirmed = True
    terms_accepted = True


class UserFactory(factory.django.DjangoModelFactory):
    """Active, confirmed user; password is "testpass123"."""

    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    full_name = factory.Faker("name")
    password = factory.django.Password("testpass123")
    restaurant = factory.SubFactory(RestaurantFactory)
    status = User.Status.ACTIVE
    email_confirmed = True
