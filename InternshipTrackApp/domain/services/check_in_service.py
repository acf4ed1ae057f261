"""Domain service functions for attendance check-ins.

A check-in is created once and never deleted. The geofence verdict only
records where the student was; verification (VERIFIED / FLAGGED) is always
the assigned company supervisor's decision.
"""
import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from InternshipTrackApp.core.access import authorize
from InternshipTrackApp.core.choices import Operation, Resource, VerificationStatus
from InternshipTrackApp.core.geofence import evaluate_check_in, is_within
from InternshipTrackApp.domain.services.artifact_store import create_artifact, update_artifact_status
from InternshipTrackApp.domain.services.placement_service import current_workplace, workplace_of
from InternshipTrackApp.domain.workflow import ensure_reviewable
from InternshipTrackApp.internships.models import CheckIn
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)

KIND = Resource.CHECK_IN


@transaction.atomic
def record_check_in(
    student: User,
    latitude: float | None = None,
    longitude: float | None = None,
    within_geofence: bool | None = None,
    manual_reason: str = "",
    photo: Any = None,
    address_resolved: str = "",
) -> CheckIn:
    """Record a check-in for the calling student.

    Raises:
        ValidationError: half a coordinate pair, out-of-range coordinates, or
            a manual check-in with neither reason nor photo.
    """
    authorize(student, Operation.CREATE, KIND)
    placement, workplace = current_workplace(student)
    verdict = evaluate_check_in(
        latitude,
        longitude,
        workplace=workplace,
        declared_within=within_geofence,
        manual_reason=manual_reason,
        has_photo=bool(photo),
    )
    check_in = create_artifact(
        KIND,
        actor=student,
        student=student,
        placement=placement,
        latitude=latitude,
        longitude=longitude,
        address_resolved=address_resolved or "",
        manual_reason=manual_reason or "",
        photo=photo,
        gps_verified=verdict.gps_verified,
        outside_geofence=verdict.outside_geofence,
        supervisor_status=VerificationStatus.PENDING,
    )
    if verdict.outside_geofence:
        logger.warning(
            "Check-in %s by student %s is outside the geofence (distance=%s m)",
            check_in.pk, student.pk,
            None if verdict.distance_meters is None else round(verdict.distance_meters, 1),
        )
    else:
        logger.info("Check-in %s recorded for student %s", check_in.pk, student.pk)
    return check_in


def review_check_in(
    check_in: CheckIn,
    supervisor: User,
    decision: str,
    comments: str = "",
) -> CheckIn:
    """Supervisor verification: PENDING -> VERIFIED or FLAGGED, exactly once."""
    authorize(supervisor, Operation.REVIEW, KIND, artifact=check_in)
    ensure_reviewable(KIND, check_in.supervisor_status, decision)
    return update_artifact_status(
        KIND,
        check_in.pk,
        check_in.supervisor_status,
        decision,
        supervisor,
        reason="supervisor verification",
        supervisor_comments=comments or "",
        verified_by=supervisor,
        verified_at=timezone.now(),
    )


def recompute_outside_geofence(queryset: QuerySet | None = None) -> int:
    """Re-evaluate ``outside_geofence`` for pending GPS check-ins.

    Only check-ins whose placement carries coordinates are touched. Returns
    the number of rows changed.
    """
    if queryset is None:
        queryset = CheckIn.objects.all()
    candidates = (
        queryset.pending_verification()
        .filter(gps_verified=True, placement__isnull=False)
        .select_related("placement")
    )
    updated = 0
    for check_in in candidates:
        workplace = workplace_of(check_in.placement)
        if workplace is None or check_in.latitude is None:
            continue
        outside = not is_within(check_in.latitude, check_in.longitude, workplace)
        if check_in.outside_geofence != outside:
            check_in.outside_geofence = outside
            check_in.save(update_fields=["outside_geofence", "updated_at"])
            updated += 1
    if updated:
        logger.info("Recomputed geofence flag on %d check-ins", updated)
    return updated
