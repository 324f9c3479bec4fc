"""URL routing for location endpoints (/api/v1/locations/)."""

from django.urls import path

from apps.web.core.decorators import dispatch_by_method
from apps.web.restaurant import views

app_name = "locations"

urlpatterns = [
    path(
        "<uuid:location_id>",
        dispatch_by_method(
            GET=views.get_location,
            PUT=views.update_location,
            PATCH=views.update_location,
            DELETE=views.delete_location,
        ),
        name="detail",
    ),
    path("<uuid:location_id>/primary", views.set_primary_location, name="primary"),
]
