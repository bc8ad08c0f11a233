# dues/apps.py
"""Dues app configuration."""

from django.apps import AppConfig


class DuesConfig(AppConfig):
    """Configuration for the membership dues app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "dues"
    verbose_name = "Dues"
