"""DRF permission classes delegating to the authorization guard."""

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from InternshipTrackApp.core.access import is_allowed
from InternshipTrackApp.core.capabilities import has_capability
from InternshipTrackApp.core.choices import AccountStatus, Operation, Resource
from InternshipTrackApp.core.exceptions import NOT_FOUND_OR_DENIED

DEFAULT_ACTION_OPERATIONS = {
    "list": Operation.READ,
    "retrieve": Operation.READ,
    "create": Operation.CREATE,
    "update": Operation.UPDATE,
    "partial_update": Operation.UPDATE,
    "destroy": Operation.DELETE,
    "metadata": Operation.READ,
}


def operation_for(view: Any) -> str | None:
    """Operation a view action maps to (``action_operations`` on the view wins)."""
    action = getattr(view, "action", None)
    overrides = getattr(view, "action_operations", {})
    return overrides.get(action) or DEFAULT_ACTION_OPERATIONS.get(action)


class IsActiveSubject(BasePermission):
    """Authenticated subject whose account is not deactivated."""
    message = "Not authorized, token failed."

    def has_permission(self, request: Request, view: Any) -> bool:
        user = request.user
        return bool(
            user and user.is_authenticated and getattr(user, "status", None) != AccountStatus.INACTIVE
        )


class HasResourceCapability(BasePermission):
    """
    Role/relationship permission for artifact viewsets.
    has_permission: the role capability table must grant the action's operation
        on ``view.resource``.
    has_object_permission: the full guard (ownership, assignment, department).
    """
    message = NOT_FOUND_OR_DENIED

    def has_permission(self, request: Request, view: Any) -> bool:
        operation = operation_for(view)
        if operation is None:
            return False
        return has_capability(request.user.role, view.resource, operation)

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        return is_allowed(request.user, operation_for(view), view.resource, artifact=obj)


class IsDirectoryAdmin(BasePermission):
    """Directory administration (accounts, faculties, departments) is admin-only."""
    message = NOT_FOUND_OR_DENIED

    def has_permission(self, request: Request, view: Any) -> bool:
        return has_capability(request.user.role, Resource.DIRECTORY, Operation.ADMINISTER)


class DirectoryReadOrAdmin(BasePermission):
    """Any subject may read the organization tree; writes need ADMINISTER."""
    message = NOT_FOUND_OR_DENIED

    def has_permission(self, request: Request, view: Any) -> bool:
        operation = Operation.READ if request.method in ("GET", "HEAD", "OPTIONS") else Operation.ADMINISTER
        return has_capability(request.user.role, Resource.DIRECTORY, operation)
