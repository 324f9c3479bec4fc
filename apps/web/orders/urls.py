"""URL routing for order endpoints (/api/v1/orders/)."""

from django.urls import path

from apps.web.core.decorators import dispatch_by_method
from apps.web.orders import views

app_name = "orders"

urlpatterns = [
    path("", views.create_order, name="create"),
    path("my-orders", views.my_orders, name="my_orders"),
    path("<int:order_id>", views.get_order, name="detail"),
    path(
        "<int:order_id>/status",
        dispatch_by_method(
            PATCH=views.update_order_status, PUT=views.update_order_status
        ),
        name="status",
    ),
]
