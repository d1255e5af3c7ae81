"""
Boards application configuration.
"""

from django.apps import AppConfig


class BoardsConfig(AppConfig):
    """Configuration for the boards Django application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "boards"
    verbose_name = "Snowboard Catalog"

    def ready(self):
        """
        Perform application initialization.

        Loads the brand-scoped normalization rule table once so a malformed
        rules file fails at startup instead of on the first normalize call.
        """
        from boards.identity.rules import get_rule_table

        get_rule_table()
