from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

from simple_history.models import HistoricalRecords

from InternshipTrackApp.core.choices import AccountStatus, Role


class SubjectManager(UserManager):
    """User manager with directory lookups used by the assignment resolver."""

    def students(self):
        return self.filter(role=Role.STUDENT)

    def students_in_department(self, department_id):
        return self.students().filter(department_id=department_id)


class User(AbstractUser):
    """A subject of the portal: one role plus its organizational placement.

    Students and lecturers sit in a faculty/department; supervisors carry a
    company affiliation instead. Accounts are deactivated through ``status``,
    never deleted.
    """
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=Role.choices)
    status = models.CharField(
        max_length=24, choices=AccountStatus.choices, default=AccountStatus.ACTIVE
    )
    faculty = models.ForeignKey(
        "organization.Faculty", null=True, blank=True, on_delete=models.SET_NULL, related_name="members"
    )
    department = models.ForeignKey(
        "organization.Department", null=True, blank=True, on_delete=models.SET_NULL, related_name="members"
    )
    school_id = models.CharField(max_length=64, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    company_address = models.CharField(max_length=255, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords(excluded_fields=["password", "last_login"])

    objects = SubjectManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    @property
    def is_active_subject(self) -> bool:
        return self.status != AccountStatus.INACTIVE

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"
