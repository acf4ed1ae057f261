"""Domain service functions for daily tasks and daily reports.

Rules:
- Only the owning student creates, edits, deletes or submits, and only while
  the item is PENDING.
- Reviewers (assigned lecturer/supervisor, department HOD, admin) decide
  APPROVED or REJECTED from PENDING or SUBMITTED; decisions are final.
- Reviewer comments are stored per acting role.
"""
import logging
from typing import Any

from django.db import transaction
from django.utils import timezone

from InternshipTrackApp.core.access import authorize
from InternshipTrackApp.core.choices import Operation, Resource
from InternshipTrackApp.domain.services.artifact_store import (
    binding_for,
    create_artifact,
    update_artifact_status,
)
from InternshipTrackApp.domain.workflow import (
    ensure_editable,
    ensure_reviewable,
    ensure_submittable,
    lifecycle_for,
)
from InternshipTrackApp.internships.models import Report, Task
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)

WORK_ITEM_KINDS = (Resource.TASK, Resource.REPORT)
WorkItem = Task | Report


def _check_kind(kind: str) -> None:
    if kind not in WORK_ITEM_KINDS:
        raise ValueError(f"{kind} is not a work item")


@transaction.atomic
def create_work_item(kind: str, student: User, data: dict[str, Any]) -> WorkItem:
    """Create a task or report for the calling student in PENDING status."""
    _check_kind(kind)
    authorize(student, Operation.CREATE, kind)
    item = create_artifact(
        kind, actor=student, student=student, status=lifecycle_for(kind).initial, **data
    )
    logger.info("%s %s created by student %s", kind, item.pk, student.pk)
    return item


def _lock(kind: str, item: WorkItem) -> WorkItem:
    return binding_for(kind).model.objects.select_for_update().get(pk=item.pk)


@transaction.atomic
def update_work_item(kind: str, item: WorkItem, actor: User, data: dict[str, Any]) -> WorkItem:
    """Edit a PENDING item (owner only).

    Raises:
        AccessDenied: caller is not the owner.
        InvalidStateTransition: the item already left PENDING.
    """
    _check_kind(kind)
    authorize(actor, Operation.UPDATE, kind, artifact=item)
    locked = _lock(kind, item)
    ensure_editable(kind, locked.status)
    for field, value in data.items():
        setattr(locked, field, value)
    locked._history_user = actor
    locked.save()
    return locked


@transaction.atomic
def delete_work_item(kind: str, item: WorkItem, actor: User) -> None:
    _check_kind(kind)
    authorize(actor, Operation.DELETE, kind, artifact=item)
    locked = _lock(kind, item)
    ensure_editable(kind, locked.status)
    locked._history_user = actor
    locked.delete()
    logger.info("%s %s deleted by student %s", kind, item.pk, actor.pk)


def submit_work_item(kind: str, item: WorkItem, actor: User) -> WorkItem:
    """PENDING -> SUBMITTED; afterwards the student can no longer edit it."""
    _check_kind(kind)
    authorize(actor, Operation.SUBMIT, kind, artifact=item)
    target = ensure_submittable(kind, item.status)
    return update_artifact_status(kind, item.pk, item.status, target, actor, reason="submitted")


def review_work_item(
    kind: str,
    item: WorkItem,
    reviewer: User,
    decision: str,
    comments: str = "",
) -> WorkItem:
    """Approve or reject a task/report awaiting review.

    Raises:
        AccessDenied: reviewer has no authority over the owning student.
        ValidationError: decision is not APPROVED/REJECTED.
        InvalidStateTransition: the item is already decided.
        Conflict: another reviewer decided concurrently.
    """
    _check_kind(kind)
    authorize(reviewer, Operation.REVIEW, kind, artifact=item)
    ensure_reviewable(kind, item.status, decision)
    reviewer_comments = dict(item.reviewer_comments or {})
    if comments:
        reviewer_comments[reviewer.role] = comments
    return update_artifact_status(
        kind,
        item.pk,
        item.status,
        decision,
        reviewer,
        reason=f"{reviewer.role.lower()} review",
        reviewer_comments=reviewer_comments,
        reviewed_by=reviewer,
        reviewed_at=timezone.now(),
    )
