"""Signal handlers for internships (placement decisions, geofence upkeep on workplace change)."""

import logging
from typing import Any

from django.db.models.signals import post_save
from django.dispatch import Signal, receiver

from InternshipTrackApp.core.choices import PlacementStatus
from InternshipTrackApp.internships.models import Placement

logger = logging.getLogger(__name__)

# Sent after an HOD decision is committed; kwargs: placement, decision, actor.
placement_decided = Signal()


@receiver(placement_decided)
def invite_company_supervisor(
    sender: type[Placement],
    placement: Placement,
    decision: str,
    actor: Any = None,
    **kwargs: Any,
) -> None:
    """Queue the supervisor invitation for an approved placement (delivery is external)."""
    if decision != PlacementStatus.APPROVED:
        return
    logger.info(
        "Supervisor invitation queued for %s (placement %s, student %s)",
        placement.supervisor_email, placement.pk, placement.student_id,
    )


@receiver(post_save, sender=Placement)
def recompute_check_in_geofence(
    sender: type[Placement],
    instance: Placement,
    created: bool,
    **kwargs: Any,
) -> None:
    """Re-evaluate pending GPS check-ins when an approved workplace is edited."""
    if created or instance.status != PlacementStatus.APPROVED:
        return
    from InternshipTrackApp.domain.services.check_in_service import recompute_outside_geofence

    recompute_outside_geofence(instance.check_ins.all())
