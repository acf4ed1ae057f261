"""Internship artifact models: Placement, Task, Report, CheckIn, Evaluation, EvaluationScore."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from simple_history.models import HistoricalRecords

from InternshipTrackApp.core.choices import (
    PlacementStatus,
    ReviewerRole,
    ScoringMetric,
    VerificationStatus,
    WorkItemStatus,
)
from InternshipTrackApp.core.validators import (
    validate_attachment_mime,
    validate_file_size,
    validate_photo_mime,
)
from InternshipTrackApp.internships.querysets import (
    CheckInQuerySet,
    EvaluationQuerySet,
    PlacementQuerySet,
    WorkItemQuerySet,
)

User = settings.AUTH_USER_MODEL


class Placement(models.Model):
    """A student's internship placement, approved or rejected by the HOD.

    Fields:
        student: Owning student.
        company_* / supervisor_*: Where and under whom the internship runs.
        company_latitude / company_longitude / geofence_radius_meters:
            Workplace geofence used to verify check-ins (radius falls back to
            GEOFENCE_DEFAULT_RADIUS_METERS).
        status: PlacementStatus value.
        rejection_reason / hod_comments: Reviewer feedback.
        decided_by / approved_at: Who decided and when it was approved.
    Constraints:
        uq_open_placement_per_student: one pending-or-approved placement per student.
    """
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="placements")
    company_name = models.CharField(max_length=200)
    company_address = models.CharField(max_length=255, blank=True)
    supervisor_name = models.CharField(max_length=200)
    supervisor_email = models.EmailField()
    start_date = models.DateField()
    end_date = models.DateField()
    location = models.CharField(max_length=255, blank=True)
    company_latitude = models.FloatField(null=True, blank=True)
    company_longitude = models.FloatField(null=True, blank=True)
    geofence_radius_meters = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=PlacementStatus.choices, default=PlacementStatus.PENDING_APPROVAL
    )
    rejection_reason = models.TextField(blank=True)
    hod_comments = models.TextField(blank=True)
    decided_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="decided_placements"
    )
    submitted_at = models.DateTimeField(auto_now_add=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = PlacementQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student"],
                condition=Q(status__in=[PlacementStatus.PENDING_APPROVAL, PlacementStatus.APPROVED]),
                name="uq_open_placement_per_student",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=models.F("start_date")),
                name="ck_placement_dates_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.company_name} for {self.student_id} ({self.status})"


class WorkItem(models.Model):
    """Shared shape of a daily task and a daily report.

    ``reviewer_comments`` is keyed by the reviewing role so a lecturer's and a
    supervisor's feedback never overwrite each other.
    """
    status = models.CharField(
        max_length=16, choices=WorkItemStatus.choices, default=WorkItemStatus.PENDING
    )
    description = models.TextField()
    outcomes = models.TextField()
    learning_objectives = models.TextField()
    attachment = models.FileField(
        upload_to="attachments/", blank=True, null=True,
        validators=[validate_file_size, validate_attachment_mime]
    )
    reviewer_comments = models.JSONField(default=dict, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = WorkItemQuerySet.as_manager()

    class Meta:
        abstract = True


class Task(WorkItem):
    """A student's daily task log entry."""
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="tasks")
    task_date = models.DateField()
    department_outcome_link = models.CharField(max_length=255, blank=True)
    reviewed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="reviewed_tasks"
    )
    history = HistoricalRecords()

    class Meta:
        ordering = ["-task_date", "-id"]

    def __str__(self) -> str:
        return f"Task #{self.pk} {self.task_date} ({self.status})"


class Report(WorkItem):
    """A student's daily report, optionally with challenges faced."""
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reports")
    report_date = models.DateField()
    title = models.CharField(max_length=200, blank=True)
    challenges_faced = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="reviewed_reports"
    )
    history = HistoricalRecords()

    class Meta:
        ordering = ["-report_date", "-id"]

    def __str__(self) -> str:
        return f"Report #{self.pk} {self.report_date} ({self.status})"


class CheckIn(models.Model):
    """A single attendance check-in; only the assigned supervisor changes it afterwards."""
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="check_ins")
    placement = models.ForeignKey(
        Placement, null=True, blank=True, on_delete=models.SET_NULL, related_name="check_ins"
    )
    checked_in_at = models.DateTimeField(auto_now_add=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    address_resolved = models.CharField(max_length=255, blank=True)
    manual_reason = models.TextField(blank=True)
    photo = models.FileField(
        upload_to="check-ins/", blank=True, null=True,
        validators=[validate_file_size, validate_photo_mime]
    )
    gps_verified = models.BooleanField(default=False)
    outside_geofence = models.BooleanField(default=False)
    supervisor_status = models.CharField(
        max_length=16, choices=VerificationStatus.choices, default=VerificationStatus.PENDING
    )
    supervisor_comments = models.TextField(blank=True)
    verified_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name="verified_check_ins"
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = CheckInQuerySet.as_manager()

    class Meta:
        ordering = ["-checked_in_at", "-id"]


class Evaluation(models.Model):
    """A lecturer's or supervisor's scored evaluation of a student for one date.

    Unique per (student, evaluator, evaluation_date); saving again for the same
    key updates in place and replaces the score set.
    """
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="evaluations")
    evaluator = models.ForeignKey(User, on_delete=models.PROTECT, related_name="authored_evaluations")
    evaluator_role = models.CharField(max_length=16, choices=ReviewerRole.choices)
    evaluation_date = models.DateField()
    overall_comments = models.TextField()
    strengths = models.TextField(blank=True)
    areas_for_improvement = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = EvaluationQuerySet.as_manager()

    class Meta:
        ordering = ["-evaluation_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "evaluator", "evaluation_date"],
                name="uq_evaluation_student_evaluator_date",
            ),
        ]


class EvaluationScore(models.Model):
    """One metric score (1..5) inside an evaluation."""
    evaluation = models.ForeignKey(Evaluation, on_delete=models.CASCADE, related_name="scores")
    metric_key = models.CharField(max_length=32, choices=ScoringMetric.choices)
    metric_label = models.CharField(max_length=64)
    score = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["evaluation", "metric_key"], name="uq_evaluation_metric"),
        ]
