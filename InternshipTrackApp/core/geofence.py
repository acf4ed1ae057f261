"""Geofence verification for check-ins.

Pure functions: no database access. The caller supplies the workplace
(from the student's approved placement) and receives a verdict; the verdict
never approves anything, final verification stays a supervisor action.
"""
import math
from dataclasses import dataclass

from InternshipTrackApp.core.exceptions import ValidationError

EARTH_RADIUS_METERS = 6_371_008.8


@dataclass(frozen=True)
class Workplace:
    """Centre and radius of the area a check-in is expected in."""
    latitude: float
    longitude: float
    radius_meters: float


@dataclass(frozen=True)
class GeofenceVerdict:
    gps_verified: bool
    outside_geofence: bool
    distance_meters: float | None = None


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two WGS84 points, in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def validate_coordinates(latitude: float | None, longitude: float | None) -> None:
    """Coordinates come as a pair and must be within WGS84 ranges."""
    if (latitude is None) != (longitude is None):
        raise ValidationError("Latitude and longitude must be provided together.")
    if latitude is None:
        return
    if not -90.0 <= latitude <= 90.0:
        raise ValidationError("Latitude must be between -90 and 90.")
    if not -180.0 <= longitude <= 180.0:
        raise ValidationError("Longitude must be between -180 and 180.")


def is_within(latitude: float, longitude: float, workplace: Workplace) -> bool:
    distance = haversine_meters(latitude, longitude, workplace.latitude, workplace.longitude)
    return distance <= workplace.radius_meters


def evaluate_check_in(
    latitude: float | None,
    longitude: float | None,
    *,
    workplace: Workplace | None = None,
    declared_within: bool | None = None,
    manual_reason: str = "",
    has_photo: bool = False,
) -> GeofenceVerdict:
    """Classify a check-in attempt.

    - GPS fix inside the workplace radius: gps_verified, not outside.
    - GPS fix outside: gps_verified, outside_geofence (flagged for the supervisor).
    - No GPS fix: manual check-in, needs a reason or a photo.

    ``declared_within`` is the client's own answer and is only consulted when
    there is no workplace to measure against; with neither, a GPS check-in is
    treated as outside so a supervisor looks at it.
    """
    validate_coordinates(latitude, longitude)

    if latitude is None:
        if not (manual_reason or "").strip() and not has_photo:
            raise ValidationError("Manual reason or photo is required for non-GPS check-ins.")
        return GeofenceVerdict(gps_verified=False, outside_geofence=False)

    if workplace is not None:
        distance = haversine_meters(latitude, longitude, workplace.latitude, workplace.longitude)
        return GeofenceVerdict(
            gps_verified=True,
            outside_geofence=distance > workplace.radius_meters,
            distance_meters=distance,
        )
    return GeofenceVerdict(gps_verified=True, outside_geofence=not bool(declared_within))
