"""Error taxonomy shared by services and views.

Every class is a DRF ``APIException`` so the default exception handler maps it
onto the HTTP status code without per-view translation.
"""
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotFound as DRFNotFound,
    PermissionDenied,
    ValidationError,
)

__all__ = [
    "ValidationError",
    "AuthenticationError",
    "AccessDenied",
    "NotFound",
    "InvalidStateTransition",
    "Conflict",
    "DependencyUnavailable",
    "DepartmentNotFound",
]

NOT_FOUND_OR_DENIED = "Not found or access denied."


class AuthenticationError(AuthenticationFailed):
    default_detail = "Not authorized, token failed."
    default_code = "authentication_failed"


class AccessDenied(PermissionDenied):
    """Role or relationship check failed."""
    default_detail = NOT_FOUND_OR_DENIED
    default_code = "access_denied"


class NotFound(DRFNotFound):
    default_detail = NOT_FOUND_OR_DENIED
    default_code = "not_found"


class InvalidStateTransition(APIException):
    """The artifact's current status does not allow the requested operation."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Invalid state transition."
    default_code = "invalid_state_transition"


class Conflict(APIException):
    """Lost a compare-and-swap race or hit a uniqueness rule."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was changed by another request."
    default_code = "conflict"


class DependencyUnavailable(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A required dependency is unavailable."
    default_code = "dependency_unavailable"


class DepartmentNotFound(DependencyUnavailable):
    default_detail = "HOD department not found."
    default_code = "department_not_found"
