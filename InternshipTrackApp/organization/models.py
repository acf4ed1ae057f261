"""Organization models: Faculty, Department, Assignment (reviewer -> student)."""

from django.conf import settings
from django.db import models
from django.db.models import Q

from simple_history.models import HistoricalRecords

from InternshipTrackApp.core.choices import ReviewerRole

User = settings.AUTH_USER_MODEL


class Faculty(models.Model):
    name = models.CharField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "faculties"

    def __str__(self) -> str:
        return self.name


class Department(models.Model):
    """A department inside a faculty; HODs see students by department."""
    faculty = models.ForeignKey(Faculty, on_delete=models.PROTECT, related_name="departments")
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["faculty", "name"], name="uq_faculty_department_name"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.faculty})"


class Assignment(models.Model):
    """Directed relation authorizing a lecturer or supervisor to act on a student.

    Fields:
        student: The student being overseen.
        reviewer: Lecturer or company supervisor.
        reviewer_role: Which hat the reviewer wears for this student.
        is_active: Only active rows grant access.
        created_at: Timestamp.
        history: Audit history (django-simple-history).
    Constraints:
        uq_active_reviewer_per_role: at most one active lecturer and one
        active supervisor per student.
    """
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reviewer_assignments")
    reviewer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="student_assignments")
    reviewer_role = models.CharField(max_length=16, choices=ReviewerRole.choices)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    history = HistoricalRecords()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "reviewer_role"],
                condition=Q(is_active=True),
                name="uq_active_reviewer_per_role",
            ),
        ]

    def __str__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"{self.reviewer_id} -> {self.student_id} ({self.reviewer_role}, {state})"
