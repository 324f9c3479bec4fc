"""
Versioned API routes, mounted at /api/v1/ and at the legacy /api/ prefix.

Collection roots are routed without a trailing slash (/api/v1/restaurants)
as well as with one.
"""

from django.conf import settings
from django.urls import include, path

from apps.web.accounts.urls import users_root
from apps.web.core import views
from apps.web.menu import views as menu_views
from apps.web.orders import views as order_views
from apps.web.restaurant.urls import restaurants_root

urlpatterns = [
    path("auth/", include("apps.web.accounts.auth_urls")),
    path("users", users_root),
    path("users/", include("apps.web.accounts.urls")),
    path("restaurants", restaurants_root),
    path("restaurants/", include("apps.web.restaurant.urls")),
    path("locations/", include("apps.web.restaurant.location_urls")),
    path("menu", menu_views.public_menu),
    path("menu/", include("apps.web.menu.urls")),
    path("languages/", include("apps.web.menu.language_urls")),
    path("orders", order_views.create_order),
    path("orders/", include("apps.web.orders.urls")),
    path("health", views.api_health, name="health"),
    path("docs", views.docs, name="docs"),
]

if settings.ENVIRONMENT != "production":
    urlpatterns += [
        path("test/simple", views.test_simple, name="test_simple"),
        path("test/auth", views.test_auth, name="test_auth"),
        path("test/xss", views.xss_test, name="test_xss"),
    ]
