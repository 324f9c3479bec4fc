"""URL routing for authentication endpoints (/api/v1/auth/)."""

from django.urls import path

from apps.web.accounts import views
from apps.web.restaurant import views as restaurant_views

app_name = "auth"

urlpatterns = [
    path("register", restaurant_views.register, name="register"),
    path("login", views.login, name="login"),
    path("me", views.me, name="me"),
    path("logout", views.logout, name="logout"),
]
