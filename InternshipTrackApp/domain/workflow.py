"""Status lifecycles for reviewable artifacts.

Task / Report:   PENDING -> SUBMITTED -> {APPROVED, REJECTED}
                 (reviewers may also decide straight from PENDING)
Placement:       PENDING_APPROVAL -> {APPROVED, REJECTED}, rejection needs a reason
Check-in:        PENDING -> {VERIFIED, FLAGGED}

Terminal states have no way out; a new artifact is needed instead.
Evaluations have no lifecycle, they are upserted.
"""
from dataclasses import dataclass

from InternshipTrackApp.core.choices import (
    PlacementStatus,
    Resource,
    VerificationStatus,
    WorkItemStatus,
)
from InternshipTrackApp.core.exceptions import InvalidStateTransition, ValidationError


@dataclass(frozen=True)
class Lifecycle:
    label: str
    initial: str
    editable: frozenset
    reviewable: frozenset
    decisions: frozenset
    terminal: frozenset
    submitted: str | None = None
    reason_required_for: frozenset = frozenset()


WORK_ITEM = Lifecycle(
    label="Work item",
    initial=WorkItemStatus.PENDING,
    editable=frozenset({WorkItemStatus.PENDING}),
    reviewable=frozenset({WorkItemStatus.PENDING, WorkItemStatus.SUBMITTED}),
    decisions=frozenset({WorkItemStatus.APPROVED, WorkItemStatus.REJECTED}),
    terminal=frozenset({WorkItemStatus.APPROVED, WorkItemStatus.REJECTED}),
    submitted=WorkItemStatus.SUBMITTED,
)

PLACEMENT = Lifecycle(
    label="Placement",
    initial=PlacementStatus.PENDING_APPROVAL,
    editable=frozenset({PlacementStatus.PENDING_APPROVAL}),
    reviewable=frozenset({PlacementStatus.PENDING_APPROVAL}),
    decisions=frozenset({PlacementStatus.APPROVED, PlacementStatus.REJECTED}),
    terminal=frozenset({PlacementStatus.APPROVED, PlacementStatus.REJECTED}),
    reason_required_for=frozenset({PlacementStatus.REJECTED}),
)

CHECK_IN = Lifecycle(
    label="Check-in",
    initial=VerificationStatus.PENDING,
    editable=frozenset(),
    reviewable=frozenset({VerificationStatus.PENDING}),
    decisions=frozenset({VerificationStatus.VERIFIED, VerificationStatus.FLAGGED}),
    terminal=frozenset({VerificationStatus.VERIFIED, VerificationStatus.FLAGGED}),
)

LIFECYCLES = {
    Resource.TASK: WORK_ITEM,
    Resource.REPORT: WORK_ITEM,
    Resource.PLACEMENT: PLACEMENT,
    Resource.CHECK_IN: CHECK_IN,
}


def lifecycle_for(kind: str) -> Lifecycle:
    try:
        return LIFECYCLES[kind]
    except KeyError:
        raise ValueError(f"{kind} has no review lifecycle") from None


def _already_in(lifecycle: Lifecycle, status: str) -> InvalidStateTransition:
    return InvalidStateTransition(f"{lifecycle.label} is already in {status} status.")


def ensure_editable(kind: str, status: str) -> None:
    """Student update/delete is legal only while the artifact is still the student's."""
    lifecycle = lifecycle_for(kind)
    if status not in lifecycle.editable:
        raise _already_in(lifecycle, status)


def ensure_submittable(kind: str, status: str) -> str:
    """Return the status a student submission moves to."""
    lifecycle = lifecycle_for(kind)
    if lifecycle.submitted is None:
        raise InvalidStateTransition(f"{lifecycle.label} has no submit step.")
    if status not in lifecycle.editable:
        raise _already_in(lifecycle, status)
    return lifecycle.submitted


def ensure_reviewable(kind: str, status: str, decision: str, reason: str = "") -> None:
    """Validate a reviewer decision against the current status.

    Raises:
        ValidationError: unknown decision, or a required reason is missing.
        InvalidStateTransition: the artifact is not awaiting review.
    """
    lifecycle = lifecycle_for(kind)
    if decision not in lifecycle.decisions:
        allowed = ", ".join(sorted(lifecycle.decisions))
        raise ValidationError({"status": [f"Invalid status. Must be one of: {allowed}."]})
    if status not in lifecycle.reviewable:
        raise _already_in(lifecycle, status)
    if decision in lifecycle.reason_required_for and not (reason or "").strip():
        raise ValidationError({"rejection_reason": ["A reason is required when rejecting."]})
