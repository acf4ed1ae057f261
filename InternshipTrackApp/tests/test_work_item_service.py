import datetime

import pytest

from InternshipTrackApp.core.choices import Resource, Role, WorkItemStatus
from InternshipTrackApp.core.exceptions import AccessDenied, Conflict, InvalidStateTransition
from InternshipTrackApp.domain.services import work_item_service
from InternshipTrackApp.internships.models import Report, Task

pytestmark = pytest.mark.django_db

TASK = Resource.TASK


def make_task(student, **overrides):
    data = {
        "task_date": datetime.date(2025, 3, 3),
        "description": "Set up CI pipeline",
        "outcomes": "Pipeline green",
        "learning_objectives": "GitHub Actions",
    }
    data.update(overrides)
    return work_item_service.create_work_item(TASK, student, data)


def test_created_task_is_pending_and_owned(student):
    task = make_task(student)
    assert task.status == WorkItemStatus.PENDING
    assert task.student_id == student.id
    assert task.history.first().history_user_id == student.id


def test_reviewer_cannot_create_work_items(lecturer):
    with pytest.raises(AccessDenied):
        make_task(lecturer)


def test_owner_updates_while_pending(student):
    task = make_task(student)
    updated = work_item_service.update_work_item(TASK, task, student, {"outcomes": "Pipeline faster"})
    assert updated.outcomes == "Pipeline faster"


def test_other_student_cannot_update(student, other_student):
    task = make_task(student)
    with pytest.raises(AccessDenied):
        work_item_service.update_work_item(TASK, task, other_student, {"outcomes": "x"})


def test_submit_then_student_loses_write_access(student):
    task = make_task(student)
    submitted = work_item_service.submit_work_item(TASK, task, student)
    assert submitted.status == WorkItemStatus.SUBMITTED
    with pytest.raises(InvalidStateTransition):
        work_item_service.update_work_item(TASK, submitted, student, {"outcomes": "late edit"})
    with pytest.raises(InvalidStateTransition):
        work_item_service.delete_work_item(TASK, submitted, student)


def test_delete_pending_task(student):
    task = make_task(student)
    work_item_service.delete_work_item(TASK, task, student)
    assert not Task.objects.filter(pk=task.pk).exists()


def test_assigned_lecturer_reviews_and_second_approval_fails(student, lecturer, assign):
    assign(student, lecturer)
    task = make_task(student)
    approved = work_item_service.review_work_item(TASK, task, lecturer, WorkItemStatus.APPROVED, "Nice work")
    assert approved.status == WorkItemStatus.APPROVED
    assert approved.reviewed_by_id == lecturer.id
    with pytest.raises(InvalidStateTransition):
        work_item_service.review_work_item(TASK, approved, lecturer, WorkItemStatus.APPROVED)


def test_unassigned_reviewer_denied(student, lecturer):
    task = make_task(student)
    with pytest.raises(AccessDenied):
        work_item_service.review_work_item(TASK, task, lecturer, WorkItemStatus.APPROVED)


def test_stale_review_loses_compare_and_swap(student, lecturer, supervisor, assign):
    assign(student, lecturer)
    assign(student, supervisor)
    task = make_task(student)
    stale_copy = Task.objects.get(pk=task.pk)
    work_item_service.review_work_item(TASK, task, supervisor, WorkItemStatus.REJECTED, "Incomplete")
    with pytest.raises(Conflict):
        work_item_service.review_work_item(TASK, stale_copy, lecturer, WorkItemStatus.APPROVED)
    task.refresh_from_db()
    assert task.status == WorkItemStatus.REJECTED


def test_comments_are_kept_per_reviewer_role(student, hod):
    report = work_item_service.create_work_item(Resource.REPORT, student, {
        "report_date": datetime.date(2025, 3, 4),
        "description": "Weekly",
        "outcomes": "Shipped",
        "learning_objectives": "Docker",
    })
    report.reviewer_comments = {Role.LECTURER: "Earlier note"}
    report.save()
    reviewed = work_item_service.review_work_item(
        Resource.REPORT, report, hod, WorkItemStatus.APPROVED, "Fine by me"
    )
    assert reviewed.reviewer_comments == {"LECTURER": "Earlier note", "HOD": "Fine by me"}
    assert isinstance(reviewed, Report)


def test_status_change_is_recorded_in_history(student, admin_user):
    task = make_task(student)
    work_item_service.review_work_item(TASK, task, admin_user, WorkItemStatus.REJECTED)
    latest = task.history.first()
    assert latest.status == WorkItemStatus.REJECTED
    assert latest.history_user_id == admin_user.id
