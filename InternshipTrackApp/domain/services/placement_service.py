"""Domain service functions for internship placements.

A student keeps at most one open placement (PENDING_APPROVAL or APPROVED):
resubmitting while pending edits it in place, an approved placement blocks
resubmission, and a rejected one lets the student start over. The HOD of the
student's department decides; a rejection needs a reason.
"""
import logging
from typing import Any

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from InternshipTrackApp.core.access import authorize
from InternshipTrackApp.core.choices import Operation, PlacementStatus, Resource
from InternshipTrackApp.core.exceptions import Conflict
from InternshipTrackApp.core.geofence import Workplace
from InternshipTrackApp.domain.services.artifact_store import create_artifact, update_artifact_status
from InternshipTrackApp.domain.workflow import ensure_editable, ensure_reviewable
from InternshipTrackApp.internships.models import Placement
from InternshipTrackApp.internships.signals import placement_decided
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)

KIND = Resource.PLACEMENT


def submit_placement(student: User, data: dict[str, Any]) -> tuple[Placement, bool]:
    """Create or update the student's open placement.

    Returns:
        (placement, created)

    Raises:
        InvalidStateTransition: the student already has an approved placement.
        Conflict: a concurrent submission created the open placement first.
    """
    authorize(student, Operation.CREATE, KIND)
    try:
        with transaction.atomic():
            current = (
                Placement.objects.select_for_update()
                .for_student(student)
                .filter(status__in=[PlacementStatus.PENDING_APPROVAL, PlacementStatus.APPROVED])
                .first()
            )
            if current is None:
                placement = create_artifact(
                    KIND, actor=student, student=student,
                    status=PlacementStatus.PENDING_APPROVAL, **data
                )
                logger.info("Placement %s submitted by student %s", placement.pk, student.pk)
                return placement, True

            authorize(student, Operation.UPDATE, KIND, artifact=current)
            ensure_editable(KIND, current.status)
            for field, value in data.items():
                setattr(current, field, value)
            current._history_user = student
            current.save()
            logger.info("Placement %s resubmitted by student %s", current.pk, student.pk)
            return current, False
    except IntegrityError as exc:
        logger.warning("Concurrent placement submission for student %s", student.pk)
        raise Conflict("An open placement already exists for this student.") from exc


def review_placement(
    placement: Placement,
    reviewer: User,
    decision: str,
    comments: str = "",
    rejection_reason: str = "",
) -> Placement:
    """HOD approval/rejection of a pending placement.

    Raises:
        AccessDenied: reviewer is not the student's HOD (or an admin).
        ValidationError: bad decision, or rejecting without a reason.
        InvalidStateTransition: placement is already decided.
        Conflict: decided concurrently.
    """
    authorize(reviewer, Operation.REVIEW, KIND, artifact=placement)
    ensure_reviewable(KIND, placement.status, decision, reason=rejection_reason)
    changes: dict[str, Any] = {"decided_by": reviewer, "hod_comments": comments or ""}
    if decision == PlacementStatus.APPROVED:
        changes["approved_at"] = timezone.now()
    else:
        changes["rejection_reason"] = rejection_reason.strip()

    decided = update_artifact_status(
        KIND, placement.pk, placement.status, decision, reviewer, reason="hod decision", **changes
    )
    placement_decided.send(sender=Placement, placement=decided, decision=decision, actor=reviewer)
    return decided


def pending_for_hod(reviewer: User) -> QuerySet:
    """Placements awaiting a decision from this HOD (all of them for an admin)."""
    authorize(reviewer, Operation.REVIEW, KIND)
    return Placement.objects.pending_approval().visible_to(reviewer).select_related("student")


def current_workplace(student: User) -> tuple[Placement | None, Workplace | None]:
    """The student's approved placement and its geofence, when coordinates are known."""
    placement = Placement.objects.approved().for_student(student).first()
    if placement is None:
        return None, None
    return placement, workplace_of(placement)


def workplace_of(placement: Placement) -> Workplace | None:
    if placement.company_latitude is None or placement.company_longitude is None:
        return None
    radius = placement.geofence_radius_meters or settings.GEOFENCE_DEFAULT_RADIUS_METERS
    return Workplace(placement.company_latitude, placement.company_longitude, float(radius))
