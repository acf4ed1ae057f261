import datetime
import logging

import pytest

from InternshipTrackApp.core.choices import PlacementStatus
from InternshipTrackApp.core.exceptions import (
    AccessDenied,
    Conflict,
    InvalidStateTransition,
    ValidationError,
)
from InternshipTrackApp.domain.services import placement_service
from InternshipTrackApp.internships.models import Placement

pytestmark = pytest.mark.django_db

PAYLOAD = {
    "company_name": "Acme Ltd",
    "supervisor_name": "Ada Mensah",
    "supervisor_email": "ada@acme.test",
    "start_date": datetime.date(2025, 1, 6),
    "end_date": datetime.date(2025, 6, 27),
    "company_latitude": 5.6037,
    "company_longitude": -0.1870,
}


def test_submit_then_resubmit_updates_in_place(student):
    first, created = placement_service.submit_placement(student, PAYLOAD)
    assert created and first.status == PlacementStatus.PENDING_APPROVAL
    second, created = placement_service.submit_placement(student, {**PAYLOAD, "company_name": "Beta"})
    assert not created
    assert second.pk == first.pk
    assert Placement.objects.for_student(student).count() == 1
    assert second.company_name == "Beta"


def test_approved_placement_blocks_resubmission(student, make_placement):
    make_placement(student, status=PlacementStatus.APPROVED)
    with pytest.raises(InvalidStateTransition):
        placement_service.submit_placement(student, PAYLOAD)


def test_rejected_placement_allows_new_one(student, make_placement):
    old = make_placement(student, status=PlacementStatus.REJECTED)
    new, created = placement_service.submit_placement(student, PAYLOAD)
    assert created and new.pk != old.pk


def test_database_refuses_second_open_placement(student, make_placement):
    from django.db import IntegrityError, transaction

    make_placement(student)
    with pytest.raises(IntegrityError), transaction.atomic():
        make_placement(student, status=PlacementStatus.APPROVED)


def test_hod_approves_once_and_signal_fires(student, hod, make_placement, caplog):
    placement = make_placement(student)
    with caplog.at_level(logging.INFO, logger="InternshipTrackApp.internships.signals"):
        decided = placement_service.review_placement(placement, hod, PlacementStatus.APPROVED, "Go ahead")
    assert decided.status == PlacementStatus.APPROVED
    assert decided.approved_at is not None
    assert decided.decided_by_id == hod.id
    assert "Supervisor invitation queued" in caplog.text
    with pytest.raises(InvalidStateTransition, match="already in APPROVED status"):
        placement_service.review_placement(decided, hod, PlacementStatus.REJECTED, rejection_reason="x")


def test_rejection_needs_reason(student, hod, make_placement):
    placement = make_placement(student)
    with pytest.raises(ValidationError):
        placement_service.review_placement(placement, hod, PlacementStatus.REJECTED)
    rejected = placement_service.review_placement(
        placement, hod, PlacementStatus.REJECTED, rejection_reason="Company not accredited"
    )
    assert rejected.rejection_reason == "Company not accredited"


def test_hod_of_other_department_denied(other_student, hod, make_placement):
    placement = make_placement(other_student)
    with pytest.raises(AccessDenied):
        placement_service.review_placement(placement, hod, PlacementStatus.APPROVED)


def test_lecturer_cannot_decide_placements(student, lecturer, assign, make_placement):
    assign(student, lecturer)
    with pytest.raises(AccessDenied):
        placement_service.review_placement(make_placement(student), lecturer, PlacementStatus.APPROVED)


def test_concurrent_decision_is_conflict(student, hod, admin_user, make_placement):
    placement = make_placement(student)
    stale = Placement.objects.get(pk=placement.pk)
    placement_service.review_placement(placement, admin_user, PlacementStatus.APPROVED)
    with pytest.raises(Conflict):
        placement_service.review_placement(stale, hod, PlacementStatus.APPROVED)


def test_pending_for_hod_only_lists_department(student, other_student, hod, make_placement):
    mine = make_placement(student)
    make_placement(other_student)
    assert list(placement_service.pending_for_hod(hod)) == [mine]


def test_workplace_uses_default_radius(student, make_placement, settings):
    settings.GEOFENCE_DEFAULT_RADIUS_METERS = 250
    make_placement(student, status=PlacementStatus.APPROVED, company_latitude=1.0, company_longitude=2.0)
    placement, workplace = placement_service.current_workplace(student)
    assert placement is not None
    assert workplace.radius_meters == 250


def test_no_workplace_without_coordinates(student, make_placement):
    make_placement(student, status=PlacementStatus.APPROVED)
    placement, workplace = placement_service.current_workplace(student)
    assert placement is not None and workplace is None
