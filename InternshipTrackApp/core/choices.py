"""Typed enumerations (TextChoices) for roles, account states, artifact lifecycles and permissions."""
from django.db import models


class Role(models.TextChoices):
    """System-level role assigned to a subject account."""
    STUDENT = "STUDENT", "Student"
    LECTURER = "LECTURER", "Lecturer"
    SUPERVISOR = "SUPERVISOR", "Company supervisor"
    HOD = "HOD", "Head of department"
    ADMIN = "ADMIN", "Administrator"


class AccountStatus(models.TextChoices):
    """Soft lifecycle of a subject account (accounts are never hard-deleted)."""
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"
    PENDING_VERIFICATION = "PENDING_VERIFICATION", "Pending verification"


class ReviewerRole(models.TextChoices):
    """Roles that can hold an explicit student assignment."""
    LECTURER = "LECTURER", "Lecturer"
    SUPERVISOR = "SUPERVISOR", "Company supervisor"


class WorkItemStatus(models.TextChoices):
    """Lifecycle states for daily tasks and daily reports."""
    PENDING = "PENDING", "Pending"
    SUBMITTED = "SUBMITTED", "Submitted"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class PlacementStatus(models.TextChoices):
    """Lifecycle states for an internship placement."""
    PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class VerificationStatus(models.TextChoices):
    """Supervisor verification states for a check-in."""
    PENDING = "PENDING", "Pending"
    VERIFIED = "VERIFIED", "Verified"
    FLAGGED = "FLAGGED", "Flagged"


class ScoringMetric(models.TextChoices):
    """Fixed metric set an evaluator scores (1..5 each)."""
    TECHNICAL_SKILLS = "technical_skills", "Technical Skills"
    COMMUNICATION = "communication", "Communication"
    PROBLEM_SOLVING = "problem_solving", "Problem Solving"
    PROFESSIONALISM = "professionalism", "Professionalism"
    TIMELINESS_INITIATIVE = "timeliness_initiative", "Timeliness & Initiative"


class Resource(models.TextChoices):
    """Things the authorization guard makes decisions about."""
    TASK = "TASK", "Task"
    REPORT = "REPORT", "Report"
    PLACEMENT = "PLACEMENT", "Placement"
    EVALUATION = "EVALUATION", "Evaluation"
    CHECK_IN = "CHECK_IN", "Check-in"
    DIRECTORY = "DIRECTORY", "Directory"


class Operation(models.TextChoices):
    READ = "READ", "Read"
    CREATE = "CREATE", "Create"
    UPDATE = "UPDATE", "Update"
    DELETE = "DELETE", "Delete"
    SUBMIT = "SUBMIT", "Submit"
    REVIEW = "REVIEW", "Review"
    ADMINISTER = "ADMINISTER", "Administer"


REVIEWER_ROLES = frozenset({Role.LECTURER, Role.SUPERVISOR, Role.HOD})
