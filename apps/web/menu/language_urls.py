"""URL routing for system languages (/api/v1/languages/)."""

from django.urls import path

from apps.web.menu import views

app_name = "languages"

urlpatterns = [
    path("available", views.available_languages, name="available"),
]
