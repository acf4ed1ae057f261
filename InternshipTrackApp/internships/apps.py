"""Internships app configuration (registers signal handlers)."""

from django.apps import AppConfig


class InternshipsConfig(AppConfig):
    """AppConfig for internship artifacts (placements, tasks, reports, check-ins, evaluations)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "InternshipTrackApp.internships"
    label = "internships"

    def ready(self):
        """Import signal handlers to connect Django model signals."""
        from InternshipTrackApp.internships import signals  # noqa: F401
