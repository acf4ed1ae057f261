import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from model_bakery import baker

from InternshipTrackApp.core.choices import PlacementStatus, VerificationStatus
from InternshipTrackApp.core.exceptions import AccessDenied, InvalidStateTransition, ValidationError
from InternshipTrackApp.domain.services import check_in_service

pytestmark = pytest.mark.django_db

OFFICE = {"company_latitude": 5.6037, "company_longitude": -0.1870, "geofence_radius_meters": 100}


@pytest.fixture
def workplace(student, make_placement):
    return make_placement(student, status=PlacementStatus.APPROVED, **OFFICE)


def test_gps_inside_geofence_is_pending_and_verified(student, workplace):
    check_in = check_in_service.record_check_in(student, latitude=5.6038, longitude=-0.1871)
    assert check_in.gps_verified is True
    assert check_in.outside_geofence is False
    assert check_in.supervisor_status == VerificationStatus.PENDING
    assert check_in.placement_id == workplace.id


def test_gps_outside_geofence_is_flagged_not_rejected(student, workplace):
    check_in = check_in_service.record_check_in(student, latitude=5.70, longitude=-0.1870, within_geofence=True)
    assert check_in.outside_geofence is True
    assert check_in.supervisor_status == VerificationStatus.PENDING


def test_manual_check_in_requires_reason_or_photo(student, settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    with pytest.raises(ValidationError):
        check_in_service.record_check_in(student)
    with_reason = check_in_service.record_check_in(student, manual_reason="Location services off")
    assert with_reason.gps_verified is False
    photo = SimpleUploadedFile("desk.png", b"\x89PNG\r\n\x1a\n", content_type="image/png")
    with_photo = check_in_service.record_check_in(student, photo=photo)
    assert with_photo.photo.name.startswith("check-ins/")


def test_reviewers_cannot_create_check_ins(supervisor):
    with pytest.raises(AccessDenied):
        check_in_service.record_check_in(supervisor, manual_reason="not a student")


def test_assigned_supervisor_verifies_once(student, supervisor, assign):
    assign(student, supervisor)
    check_in = check_in_service.record_check_in(student, manual_reason="GPS denied")
    verified = check_in_service.review_check_in(check_in, supervisor, VerificationStatus.VERIFIED, "Seen at desk")
    assert verified.supervisor_status == VerificationStatus.VERIFIED
    assert verified.verified_by_id == supervisor.id
    with pytest.raises(InvalidStateTransition):
        check_in_service.review_check_in(verified, supervisor, VerificationStatus.FLAGGED)


def test_lecturer_and_admin_cannot_verify(student, lecturer, admin_user, assign):
    assign(student, lecturer)
    check_in = check_in_service.record_check_in(student, manual_reason="GPS denied")
    for reviewer in (lecturer, admin_user):
        with pytest.raises(AccessDenied):
            check_in_service.review_check_in(check_in, reviewer, VerificationStatus.VERIFIED)


def test_unassigned_supervisor_cannot_verify(student, supervisor):
    check_in = check_in_service.record_check_in(student, manual_reason="GPS denied")
    with pytest.raises(AccessDenied):
        check_in_service.review_check_in(check_in, supervisor, VerificationStatus.FLAGGED)


def test_moving_workplace_recomputes_pending_check_ins(student, workplace):
    check_in = check_in_service.record_check_in(student, latitude=5.70, longitude=-0.1870)
    assert check_in.outside_geofence is True
    workplace.company_latitude = 5.70
    workplace.save()
    check_in.refresh_from_db()
    assert check_in.outside_geofence is False


def test_recompute_command_only_touches_pending_gps(student, workplace, capsys):
    stale = baker.make("internships.CheckIn", student=student, placement=workplace, gps_verified=True,
                       latitude=5.6037, longitude=-0.1870, outside_geofence=True)
    decided = baker.make("internships.CheckIn", student=student, placement=workplace, gps_verified=True,
                         latitude=5.6037, longitude=-0.1870, outside_geofence=True,
                         supervisor_status=VerificationStatus.FLAGGED)
    call_command("recompute_geofence")
    assert "Updated 1 check-ins" in capsys.readouterr().out
    stale.refresh_from_db()
    decided.refresh_from_db()
    assert stale.outside_geofence is False
    assert decided.outside_geofence is True
