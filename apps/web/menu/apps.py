"""Django app configuration for menu module."""

from django.apps import AppConfig


class MenuConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.menu"
    verbose_name = "Menu"
