import pytest
from model_bakery import baker

from InternshipTrackApp.core.access import authorize, is_allowed
from InternshipTrackApp.core.capabilities import CAPABILITIES, allowed_operations, has_capability
from InternshipTrackApp.core.choices import Operation, Resource, Role, WorkItemStatus
from InternshipTrackApp.core.exceptions import NOT_FOUND_OR_DENIED, AccessDenied

pytestmark = pytest.mark.django_db


def test_every_role_has_a_row_and_can_read_directory():
    assert set(CAPABILITIES) == set(Role.values)
    for role in Role.values:
        assert has_capability(role, Resource.DIRECTORY, Operation.READ)


@pytest.mark.parametrize("role,resource,operation,expected", [
    (Role.STUDENT, Resource.TASK, Operation.SUBMIT, True),
    (Role.STUDENT, Resource.TASK, Operation.REVIEW, False),
    (Role.LECTURER, Resource.EVALUATION, Operation.CREATE, True),
    (Role.HOD, Resource.EVALUATION, Operation.CREATE, False),
    (Role.HOD, Resource.PLACEMENT, Operation.REVIEW, True),
    (Role.LECTURER, Resource.PLACEMENT, Operation.REVIEW, False),
    (Role.SUPERVISOR, Resource.CHECK_IN, Operation.REVIEW, True),
    (Role.ADMIN, Resource.CHECK_IN, Operation.REVIEW, False),
    (Role.ADMIN, Resource.DIRECTORY, Operation.ADMINISTER, True),
    (Role.HOD, Resource.DIRECTORY, Operation.ADMINISTER, False),
])
def test_capability_table(role, resource, operation, expected):
    assert has_capability(role, resource, operation) is expected


def test_unknown_role_has_no_operations():
    assert allowed_operations("JANITOR", Resource.TASK) == frozenset()


def test_owner_student_allowed_other_student_denied(student, other_student):
    task = baker.make("internships.Task", student=student)
    assert is_allowed(student, Operation.UPDATE, Resource.TASK, artifact=task)
    with pytest.raises(AccessDenied) as exc:
        authorize(other_student, Operation.READ, Resource.TASK, artifact=task)
    assert str(exc.value.detail) == NOT_FOUND_OR_DENIED


def test_guard_leaves_status_checks_to_workflow(student):
    task = baker.make("internships.Task", student=student, status=WorkItemStatus.APPROVED)
    assert is_allowed(student, Operation.UPDATE, Resource.TASK, artifact=task)


def test_reviewer_needs_assignment(lecturer, student, assign):
    task = baker.make("internships.Task", student=student)
    assert not is_allowed(lecturer, Operation.REVIEW, Resource.TASK, artifact=task)
    assign(student, lecturer)
    assert is_allowed(lecturer, Operation.REVIEW, Resource.TASK, artifact=task)


def test_hod_limited_to_department(hod, student, other_student):
    own = baker.make("internships.Task", student=student)
    foreign = baker.make("internships.Task", student=other_student)
    assert is_allowed(hod, Operation.REVIEW, Resource.TASK, artifact=own)
    assert not is_allowed(hod, Operation.REVIEW, Resource.TASK, artifact=foreign)


def test_admin_reads_and_reviews_anything(admin_user, other_student):
    task = baker.make("internships.Task", student=other_student)
    assert is_allowed(admin_user, Operation.READ, Resource.TASK, artifact=task)
    assert is_allowed(admin_user, Operation.REVIEW, Resource.TASK, artifact=task)
    assert not is_allowed(admin_user, Operation.UPDATE, Resource.TASK, artifact=task)


def test_evaluator_reads_but_cannot_change_own_evaluation_out_of_scope(lecturer, student):
    evaluation = baker.make("internships.Evaluation", student=student, evaluator=lecturer,
                            evaluator_role=Role.LECTURER)
    assert is_allowed(lecturer, Operation.READ, Resource.EVALUATION, artifact=evaluation)
    assert not is_allowed(lecturer, Operation.UPDATE, Resource.EVALUATION, artifact=evaluation)
    assert not is_allowed(lecturer, Operation.CREATE, Resource.EVALUATION, student_id=student.id)


def test_student_cannot_act_for_another_student(student, other_student):
    assert not is_allowed(student, Operation.READ, Resource.EVALUATION, student_id=other_student.id)
    assert is_allowed(student, Operation.READ, Resource.EVALUATION, student_id=student.id)


def test_supervisor_reviews_only_assigned_check_ins(supervisor, student, assign):
    check_in = baker.make("internships.CheckIn", student=student)
    assert not is_allowed(supervisor, Operation.REVIEW, Resource.CHECK_IN, artifact=check_in)
    assign(student, supervisor)
    assert is_allowed(supervisor, Operation.REVIEW, Resource.CHECK_IN, artifact=check_in)


def test_anonymous_is_denied():
    from django.contrib.auth.models import AnonymousUser

    assert not is_allowed(AnonymousUser(), Operation.READ, Resource.DIRECTORY)
