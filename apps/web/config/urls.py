"""
URL configuration for the restaurant platform API.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path, re_path

from apps.web.core import views as core_views
from apps.web.restaurant import views as restaurant_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", core_views.health, name="health"),
    path("favicon.ico", restaurant_views.favicon, name="favicon"),
    # Versioned API
    path("api/v1/", include(("apps.web.core.urls", "api"), namespace="v1")),
    # Legacy unversioned aliases
    path("api/", include(("apps.web.core.urls", "api"), namespace="legacy")),
    re_path(r"^api/.*$", core_views.route_not_found),
    *static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT),
]

handler404 = "apps.web.core.views.route_not_found"
