import pytest
from django.db import DatabaseError
from model_bakery import baker

from InternshipTrackApp.core.choices import Role
from InternshipTrackApp.core.exceptions import DepartmentNotFound, DependencyUnavailable
from InternshipTrackApp.domain.services import assignment_resolver
from InternshipTrackApp.domain.services.assignment_resolver import resolve_scope, students_for

pytestmark = pytest.mark.django_db


def test_lecturer_scope_is_active_assignments_only(lecturer, student, other_student, assign):
    assign(student, lecturer)
    assign(other_student, lecturer, is_active=False)
    scope = resolve_scope(lecturer)
    assert student.id in scope
    assert other_student.id not in scope


def test_reviewer_without_assignments_gets_empty_scope(supervisor, student):
    scope = resolve_scope(supervisor)
    assert scope.is_empty()
    assert list(students_for(supervisor)) == []


def test_assignment_in_other_role_does_not_leak(make_subject, student, assign):
    # Same person assigned as supervisor does not gain lecturer scope after a role change.
    reviewer = make_subject(Role.SUPERVISOR)
    assign(student, reviewer)
    reviewer.role = Role.LECTURER
    reviewer.save()
    assert student.id not in resolve_scope(reviewer)


def test_hod_scope_is_department_students_regardless_of_faculty(hod, student, other_student, make_subject, department):
    far_faculty = baker.make("organization.Faculty", name="Sciences")
    cross = make_subject(Role.STUDENT, department=department, faculty=far_faculty)
    scope = resolve_scope(hod)
    assert student.id in scope
    assert cross.id in scope
    assert other_student.id not in scope


def test_hod_without_department_fails(make_subject):
    hod = make_subject(Role.HOD)
    with pytest.raises(DepartmentNotFound):
        resolve_scope(hod)
    assert issubclass(DepartmentNotFound, DependencyUnavailable)


def test_admin_scope_is_unrestricted(admin_user, student, other_student):
    scope = resolve_scope(admin_user)
    assert scope.unrestricted
    assert {student.id, other_student.id} <= set(students_for(admin_user).values_list("id", flat=True))


def test_student_scope_is_empty(student, other_student):
    assert resolve_scope(student).is_empty()


def test_scope_reflects_assignment_changes_between_calls(lecturer, student, assign):
    assert student.id not in resolve_scope(lecturer)
    link = assign(student, lecturer)
    assert student.id in resolve_scope(lecturer)
    link.is_active = False
    link.save()
    assert student.id not in resolve_scope(lecturer)


def test_database_failure_becomes_dependency_unavailable(lecturer, monkeypatch):
    def boom(reviewer):
        raise DatabaseError("connection reset")

    monkeypatch.setattr(assignment_resolver, "_assigned_student_ids", boom)
    with pytest.raises(DependencyUnavailable):
        resolve_scope(lecturer)
