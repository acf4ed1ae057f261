"""Assignment resolver: which students may a reviewer act upon?

- LECTURER / SUPERVISOR: students with an active assignment to the reviewer
  in that role.
- HOD: every student of the HOD's own department.
- ADMIN: every student, without touching assignments.
- Anyone else: nobody.

The result is computed per call; nothing is cached because assignments can
change between requests.
"""
import logging
from dataclasses import dataclass

from django.db import DatabaseError
from django.db.models import QuerySet

from InternshipTrackApp.core.choices import Role
from InternshipTrackApp.core.exceptions import DepartmentNotFound, DependencyUnavailable
from InternshipTrackApp.organization.models import Assignment
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentScope:
    """Set of student ids a reviewer is authorized over (or all of them)."""
    student_ids: frozenset = frozenset()
    unrestricted: bool = False

    def __contains__(self, student_id) -> bool:
        if self.unrestricted:
            return True
        return student_id in self.student_ids

    def is_empty(self) -> bool:
        return not self.unrestricted and not self.student_ids

    def apply(self, queryset: QuerySet, field: str = "student_id") -> QuerySet:
        """Restrict ``queryset`` to rows whose ``field`` is in scope."""
        if self.unrestricted:
            return queryset
        if self.is_empty():
            return queryset.none()
        return queryset.filter(**{f"{field}__in": self.student_ids})


EMPTY_SCOPE = StudentScope()
ALL_STUDENTS = StudentScope(unrestricted=True)


def _assigned_student_ids(reviewer: User) -> frozenset:
    return frozenset(
        Assignment.objects.filter(
            reviewer=reviewer, reviewer_role=reviewer.role, is_active=True
        ).values_list("student_id", flat=True)
    )


def _department_student_ids(hod: User) -> frozenset:
    department_id = (
        User.objects.filter(pk=hod.pk).values_list("department_id", flat=True).first()
    )
    if department_id is None:
        logger.warning("HOD %s has no department; refusing to resolve scope", hod.pk)
        raise DepartmentNotFound()
    return frozenset(
        User.objects.students_in_department(department_id).values_list("id", flat=True)
    )


def resolve_scope(reviewer: User) -> StudentScope:
    """Resolve the reviewer's current student scope.

    Raises:
        DepartmentNotFound: HOD without a department.
        DependencyUnavailable: the directory or assignment lookup failed.
    """
    role = getattr(reviewer, "role", None)
    if role == Role.ADMIN:
        return ALL_STUDENTS
    try:
        if role in (Role.LECTURER, Role.SUPERVISOR):
            return StudentScope(student_ids=_assigned_student_ids(reviewer))
        if role == Role.HOD:
            return StudentScope(student_ids=_department_student_ids(reviewer))
    except DatabaseError as exc:
        logger.exception("Scope lookup failed for reviewer %s", getattr(reviewer, "pk", None))
        raise DependencyUnavailable() from exc
    return EMPTY_SCOPE


def students_for(reviewer: User) -> QuerySet:
    """Student subjects in the reviewer's scope, for listing."""
    return resolve_scope(reviewer).apply(User.objects.students(), field="id")
