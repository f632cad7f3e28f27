"""
Projects app configuration.

A project is the work agreed when a gestionnaire accepts an artisan's
proposal: it carries the timeline, the chat and the phase photos until
the payment closes it.
"""

from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    """Configuration for the projects app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'projects'
    verbose_name = 'Projects'

    def ready(self):
        """Import signal handlers when app is ready."""
        import projects.signals  # noqa: F401
