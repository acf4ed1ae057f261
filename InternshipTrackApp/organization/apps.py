"""Organization app configuration (faculties, departments, reviewer assignments)."""

from django.apps import AppConfig


class OrganizationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "InternshipTrackApp.organization"
    label = "organization"
