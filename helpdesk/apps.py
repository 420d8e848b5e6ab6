"""AppConfig for the `helpdesk` app."""

from django.apps import AppConfig


class HelpdeskAppConfig(AppConfig):
    """Help desk configuration, sessions, CSRF guard, uploads and system log."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "helpdesk"
    verbose_name = "Help desk"
