"""Django app configuration for accounts module."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Roles, authentication and user management."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.accounts"
    verbose_name = "Accounts"
