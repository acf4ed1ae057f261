import math

import pytest
from hypothesis import assume, given, strategies as st

from InternshipTrackApp.core.exceptions import ValidationError
from InternshipTrackApp.core.geofence import (
    Workplace,
    evaluate_check_in,
    haversine_meters,
    is_within,
    validate_coordinates,
)

latitudes = st.floats(min_value=-89.9, max_value=89.9, allow_nan=False)
longitudes = st.floats(min_value=-179.9, max_value=179.9, allow_nan=False)

ACCRA = Workplace(latitude=5.6037, longitude=-0.1870, radius_meters=100)


@given(latitudes, longitudes, latitudes, longitudes)
def test_distance_is_symmetric_and_non_negative(lat1, lon1, lat2, lon2):
    d1 = haversine_meters(lat1, lon1, lat2, lon2)
    d2 = haversine_meters(lat2, lon2, lat1, lon1)
    assert d1 >= 0
    assert math.isclose(d1, d2, rel_tol=1e-9, abs_tol=1e-6)
    assert d1 <= math.pi * 6_371_008.8 + 1


@given(latitudes, longitudes)
def test_workplace_centre_is_always_inside(lat, lon):
    assert is_within(lat, lon, Workplace(lat, lon, radius_meters=0))


@given(st.floats(min_value=0.0005, max_value=0.5))
def test_points_far_north_are_outside(delta):
    # 0.0005 degrees of latitude is ~55 m; scale the radius below the offset.
    distance = haversine_meters(ACCRA.latitude, ACCRA.longitude, ACCRA.latitude + delta, ACCRA.longitude)
    assume(distance > 1)
    workplace = Workplace(ACCRA.latitude, ACCRA.longitude, radius_meters=distance * 0.9)
    verdict = evaluate_check_in(ACCRA.latitude + delta, ACCRA.longitude, workplace=workplace)
    assert verdict.gps_verified and verdict.outside_geofence


def test_known_distance():
    # One degree of latitude is ~111.2 km.
    assert haversine_meters(0, 0, 1, 0) == pytest.approx(111_195, rel=1e-3)


def test_gps_inside_geofence():
    verdict = evaluate_check_in(5.6038, -0.1871, workplace=ACCRA)
    assert verdict.gps_verified is True
    assert verdict.outside_geofence is False
    assert verdict.distance_meters < 100


def test_server_measurement_beats_client_claim():
    verdict = evaluate_check_in(5.70, -0.1870, workplace=ACCRA, declared_within=True)
    assert verdict.outside_geofence is True


@pytest.mark.parametrize("declared,outside", [(True, False), (False, True), (None, True)])
def test_client_claim_used_without_workplace(declared, outside):
    verdict = evaluate_check_in(5.6, -0.18, declared_within=declared)
    assert verdict.gps_verified and verdict.outside_geofence is outside


def test_manual_check_in_needs_reason_or_photo():
    with pytest.raises(ValidationError):
        evaluate_check_in(None, None)
    with pytest.raises(ValidationError):
        evaluate_check_in(None, None, manual_reason="   ")
    assert evaluate_check_in(None, None, manual_reason="GPS denied").gps_verified is False
    assert evaluate_check_in(None, None, has_photo=True).outside_geofence is False


@pytest.mark.parametrize("lat,lon", [(5.6, None), (None, -0.18), (91, 0), (0, -181)])
def test_invalid_coordinates(lat, lon):
    with pytest.raises(ValidationError):
        validate_coordinates(lat, lon)
