"""URL routing for user endpoints (/api/v1/users/)."""

from django.urls import path

from apps.web.accounts import views
from apps.web.core.decorators import dispatch_by_method

app_name = "users"

users_root = dispatch_by_method(GET=views.list_users, POST=views.create_user)

urlpatterns = [
    path("", users_root, name="list"),
    path("register", views.register_customer, name="register"),
    path("confirm-email", views.confirm_email, name="confirm_email"),
    path(
        "resend-confirmation", views.resend_confirmation, name="resend_confirmation"
    ),
    path("roles/available", views.available_roles, name="available_roles"),
    path(
        "locations/available", views.available_locations, name="available_locations"
    ),
    path(
        "restaurant/<uuid:restaurant_id>",
        views.restaurant_users,
        name="restaurant_users",
    ),
    path(
        "<uuid:user_id>",
        dispatch_by_method(
            GET=views.get_user,
            PUT=views.update_user,
            PATCH=views.update_user,
            DELETE=views.delete_user,
        ),
        name="detail",
    ),
    path(
        "<uuid:user_id>/change-password",
        dispatch_by_method(POST=views.change_password, PUT=views.change_password),
        name="change_password",
    ),
]
