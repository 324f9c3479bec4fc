"""
URL routing for menu endpoints (/api/v1/menu/).

Restaurant-scoped listing and creation live under /restaurants/{id}/.
"""

from django.urls import path

from apps.web.core.decorators import dispatch_by_method
from apps.web.menu import views

app_name = "menu"

urlpatterns = [
    # Public tenant menu
    path("", views.public_menu, name="public"),
    # Items
    path(
        "items/<int:item_id>",
        dispatch_by_method(
            GET=views.get_menu_item,
            PUT=views.update_menu_item,
            PATCH=views.update_menu_item,
            DELETE=views.delete_menu_item,
        ),
        name="item_detail",
    ),
    path(
        "items/<int:item_id>/toggle-availability",
        dispatch_by_method(
            PATCH=views.toggle_availability, POST=views.toggle_availability
        ),
        name="item_toggle_availability",
    ),
    # Categories
    path(
        "categories/<int:category_id>",
        dispatch_by_method(
            GET=views.get_category,
            PUT=views.update_category,
            DELETE=views.delete_category,
        ),
        name="category_detail",
    ),
    path(
        "categories/<int:category_id>/items",
        dispatch_by_method(GET=views.category_items),
        name="category_items",
    ),
    path(
        "categories/<int:category_id>/can-delete",
        dispatch_by_method(GET=views.can_delete_category),
        name="category_can_delete",
    ),
    path(
        "categories/<int:category_id>/status",
        dispatch_by_method(
            PATCH=views.toggle_category_status, PUT=views.toggle_category_status
        ),
        name="category_status",
    ),
]
