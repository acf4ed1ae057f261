"""Serializers for subjects, organization, tasks, reports, placements, evaluations and check-ins."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from InternshipTrackApp.core.choices import (
    AccountStatus,
    PlacementStatus,
    Role,
    VerificationStatus,
    WorkItemStatus,
)
from InternshipTrackApp.internships.models import (
    CheckIn,
    Evaluation,
    EvaluationScore,
    Placement,
    Report,
    Task,
)
from InternshipTrackApp.organization.models import Department, Faculty

User = get_user_model()


# ---------- Directory ----------
class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a subject."""

    class Meta:
        model = User
        fields = [
            "id", "email", "first_name", "last_name", "role", "status",
            "faculty", "department", "school_id", "company_name",
        ]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """The caller's own profile; only name and contact number are writable."""

    class Meta:
        model = User
        fields = [
            "id", "email", "first_name", "last_name", "role", "status", "faculty", "department",
            "school_id", "company_name", "company_address", "contact_number",
        ]
        read_only_fields = [
            "id", "email", "role", "status", "faculty", "department",
            "school_id", "company_name", "company_address",
        ]


class ProvisionSubjectSerializer(serializers.ModelSerializer):
    """Admin account creation."""
    password = serializers.CharField(write_only=True, required=False, help_text="Initial password (write-only).")

    class Meta:
        model = User
        fields = [
            "email", "password", "first_name", "last_name", "role", "status", "faculty",
            "department", "school_id", "company_name", "company_address", "contact_number",
        ]
        extra_kwargs = {"role": {"required": True}}

    def validate(self, data):
        department = data.get("department")
        faculty = data.get("faculty")
        if department and faculty and department.faculty_id != faculty.pk:
            raise serializers.ValidationError({"department": "Department does not belong to the faculty."})
        if department and not faculty:
            data["faculty"] = department.faculty
        return data


class RoleStatusSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    status = serializers.ChoiceField(choices=AccountStatus.choices, required=False)

    def validate(self, data):
        if not data:
            raise serializers.ValidationError("Provide role or status to update.")
        return data


class FacultySerializer(serializers.ModelSerializer):
    class Meta:
        model = Faculty
        fields = ["id", "name", "created_at"]


class DepartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = ["id", "faculty", "name", "created_at"]
        read_only_fields = ["faculty"]


# ---------- Tasks & reports ----------
WORK_ITEM_READ_FIELDS = [
    "id", "student", "status", "description", "outcomes", "learning_objectives", "attachment",
    "reviewer_comments", "reviewed_by", "reviewed_at", "created_at", "updated_at",
]


class TaskWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating a daily task (student only)."""

    class Meta:
        model = Task
        fields = [
            "task_date", "description", "outcomes", "learning_objectives",
            "department_outcome_link", "attachment",
        ]


class TaskReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Task
        fields = ["task_date", "department_outcome_link", *WORK_ITEM_READ_FIELDS]


class ReportWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating a daily report (student only)."""

    class Meta:
        model = Report
        fields = [
            "report_date", "title", "description", "outcomes", "learning_objectives",
            "challenges_faced", "attachment",
        ]


class ReportReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Report
        fields = ["report_date", "title", "challenges_faced", *WORK_ITEM_READ_FIELDS]


class WorkItemReviewSerializer(serializers.Serializer):
    """Reviewer decision on a task or report."""
    status = serializers.ChoiceField(choices=[WorkItemStatus.APPROVED, WorkItemStatus.REJECTED])
    comments = serializers.CharField(required=False, allow_blank=True, default="")


# ---------- Placements ----------
class PlacementWriteSerializer(serializers.ModelSerializer):
    """Serializer for submitting or resubmitting a placement."""

    class Meta:
        model = Placement
        fields = [
            "company_name", "company_address", "supervisor_name", "supervisor_email",
            "start_date", "end_date", "location", "company_latitude", "company_longitude",
            "geofence_radius_meters",
        ]
        validators = []

    def validate(self, data):
        if data["end_date"] < data["start_date"]:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        has_lat = data.get("company_latitude") is not None
        has_lon = data.get("company_longitude") is not None
        if has_lat != has_lon:
            raise serializers.ValidationError("Company latitude and longitude must be provided together.")
        if has_lat and not -90 <= data["company_latitude"] <= 90:
            raise serializers.ValidationError({"company_latitude": "Must be between -90 and 90."})
        if has_lon and not -180 <= data["company_longitude"] <= 180:
            raise serializers.ValidationError({"company_longitude": "Must be between -180 and 180."})
        return data


class PlacementReadSerializer(serializers.ModelSerializer):
    student = UserSerializer(read_only=True)

    class Meta:
        model = Placement
        fields = [
            "id", "student", "company_name", "company_address", "supervisor_name", "supervisor_email",
            "start_date", "end_date", "location", "company_latitude", "company_longitude",
            "geofence_radius_meters", "status", "rejection_reason", "hod_comments", "decided_by",
            "submitted_at", "approved_at", "updated_at",
        ]


class PlacementReviewSerializer(serializers.Serializer):
    """HOD decision on a placement; a rejection needs a reason."""
    status = serializers.ChoiceField(choices=[PlacementStatus.APPROVED, PlacementStatus.REJECTED])
    comments = serializers.CharField(required=False, allow_blank=True, default="")
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


# ---------- Evaluations ----------
class EvaluationScoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = EvaluationScore
        fields = ["metric_key", "metric_label", "score"]


class EvaluationWriteSerializer(serializers.Serializer):
    """Upsert payload; ``scores`` maps metric key to a 1..5 score."""
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role=Role.STUDENT))
    evaluation_date = serializers.DateField()
    scores = serializers.DictField(child=serializers.IntegerField())
    overall_comments = serializers.CharField()
    strengths = serializers.CharField(required=False, allow_blank=True, default="")
    areas_for_improvement = serializers.CharField(required=False, allow_blank=True, default="")


class EvaluationReadSerializer(serializers.ModelSerializer):
    scores = EvaluationScoreSerializer(many=True, read_only=True)

    class Meta:
        model = Evaluation
        fields = [
            "id", "student", "evaluator", "evaluator_role", "evaluation_date", "scores",
            "overall_comments", "strengths", "areas_for_improvement", "created_at", "updated_at",
        ]


# ---------- Check-ins ----------
class CheckInWriteSerializer(serializers.ModelSerializer):
    """Check-in payload: a GPS fix, or a manual reason and/or photo."""
    within_geofence = serializers.BooleanField(
        required=False, allow_null=True, default=None,
        help_text="Client's own in-bounds answer; used only when no workplace coordinates exist.",
    )

    class Meta:
        model = CheckIn
        fields = ["latitude", "longitude", "within_geofence", "manual_reason", "photo", "address_resolved"]


class CheckInReadSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckIn
        fields = [
            "id", "student", "placement", "checked_in_at", "latitude", "longitude", "address_resolved",
            "manual_reason", "photo", "gps_verified", "outside_geofence", "supervisor_status",
            "supervisor_comments", "verified_by", "verified_at",
        ]


class CheckInReviewSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[VerificationStatus.VERIFIED, VerificationStatus.FLAGGED])
    comments = serializers.CharField(required=False, allow_blank=True, default="")
