"""
URL routing for restaurant endpoints (/api/v1/restaurants/).

Menu, category and language routes scoped to a restaurant live here too so
that every /restaurants/{id}/... path is defined in one place.
"""

from django.urls import path

from apps.web.core.decorators import dispatch_by_method
from apps.web.menu import views as menu_views
from apps.web.restaurant import views

app_name = "restaurants"

restaurants_root = dispatch_by_method(
    GET=views.list_restaurants, POST=views.create_restaurant
)

urlpatterns = [
    path("", restaurants_root, name="list"),
    path("by-url/<str:url_name>", views.restaurant_by_url, name="by_url"),
    path("check-url/<str:url_name>", views.check_url, name="check_url"),
    path(
        "<uuid:restaurant_id>",
        dispatch_by_method(
            GET=views.get_restaurant,
            PUT=views.update_restaurant,
            PATCH=views.update_restaurant,
            DELETE=views.delete_restaurant,
        ),
        name="detail",
    ),
    path(
        "<uuid:restaurant_id>/stats",
        dispatch_by_method(GET=views.restaurant_stats),
        name="stats",
    ),
    path(
        "<uuid:restaurant_id>/payment",
        dispatch_by_method(PUT=views.update_payment),
        name="payment",
    ),
    # Locations
    path(
        "<uuid:restaurant_id>/locations",
        dispatch_by_method(GET=views.list_locations, POST=views.create_location),
        name="locations",
    ),
    # Media
    path(
        "<uuid:restaurant_id>/media",
        dispatch_by_method(GET=views.list_media, POST=views.upload_media),
        name="media",
    ),
    path(
        "<uuid:restaurant_id>/media/<int:media_id>",
        dispatch_by_method(DELETE=views.delete_media),
        name="media_detail",
    ),
    # Languages
    path(
        "<uuid:restaurant_id>/languages",
        dispatch_by_method(
            GET=menu_views.get_restaurant_languages,
            PUT=menu_views.update_restaurant_languages,
        ),
        name="languages",
    ),
    # Menu categories
    path(
        "<uuid:restaurant_id>/menu-categories",
        dispatch_by_method(
            GET=menu_views.list_categories, POST=menu_views.create_category
        ),
        name="menu_categories",
    ),
    path(
        "<uuid:restaurant_id>/menu-categories/hierarchy",
        dispatch_by_method(GET=menu_views.category_hierarchy),
        name="menu_category_hierarchy",
    ),
    path(
        "<uuid:restaurant_id>/menu-categories/display-order",
        dispatch_by_method(PUT=menu_views.update_display_order),
        name="menu_category_display_order",
    ),
    # Menu items
    path(
        "<uuid:restaurant_id>/menu-items",
        dispatch_by_method(
            GET=menu_views.list_menu_items, POST=menu_views.create_menu_item
        ),
        name="menu_items",
    ),
]
