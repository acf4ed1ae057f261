"""Custom querysets encapsulating ownership and reviewer-scope filtering for internship artifacts."""

from typing import Self

from django.db.models import Q, QuerySet

from InternshipTrackApp.core.choices import (
    PlacementStatus,
    Role,
    VerificationStatus,
)
from InternshipTrackApp.domain.services.assignment_resolver import StudentScope, resolve_scope


class ArtifactQuerySet(QuerySet):
    """QuerySet helpers shared by every student-owned artifact."""

    def for_student(self, user) -> Self:
        """Artifacts owned by the given student."""
        return self.filter(student=user)

    def in_scope(self, scope: StudentScope) -> Self:
        """Artifacts whose owner is inside a resolved reviewer scope."""
        return scope.apply(self)

    def visible_to(self, user) -> Self:
        """Artifacts visible to user:
        - Student: their own
        - Lecturer/Supervisor/HOD: students in their resolved scope
        - Admin: all
        """
        if not user or not user.is_authenticated:
            return self.none()
        if user.role == Role.STUDENT:
            return self.for_student(user)
        return self.in_scope(resolve_scope(user))


class WorkItemQuerySet(ArtifactQuerySet):
    """Tasks and reports."""


class PlacementQuerySet(ArtifactQuerySet):

    def pending_approval(self) -> Self:
        return self.filter(status=PlacementStatus.PENDING_APPROVAL)

    def approved(self) -> Self:
        return self.filter(status=PlacementStatus.APPROVED)


class EvaluationQuerySet(ArtifactQuerySet):

    def visible_to(self, user) -> Self:
        """Evaluations visible to user: the student's own, the evaluator's own,
        and those of students in a reviewer's scope."""
        if not user or not user.is_authenticated:
            return self.none()
        if user.role == Role.STUDENT:
            return self.for_student(user)
        scope = resolve_scope(user)
        if scope.unrestricted:
            return self
        return self.filter(Q(evaluator=user) | Q(student_id__in=scope.student_ids))


class CheckInQuerySet(ArtifactQuerySet):

    def pending_verification(self) -> Self:
        return self.filter(supervisor_status=VerificationStatus.PENDING)
