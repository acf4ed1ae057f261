"""Authorization guard: who may perform which operation on which artifact.

Rules, in order:
1. The role capability table must grant the operation on the resource.
2. ADMIN: allowed (the table already limits admins to read, review and
   directory administration).
3. STUDENT: allowed on their own artifacts only. Whether the artifact's
   status still permits a write is the workflow's call, not the guard's.
4. LECTURER / SUPERVISOR / HOD: allowed when the owning student is in the
   reviewer's resolved scope. An evaluator can always read their own
   evaluations; changing one still needs the student in scope.
5. Anything else is denied with the same message used for "not found".

Scope is resolved on every call; nothing is cached between requests.
"""
import logging
from typing import Any

from InternshipTrackApp.core.capabilities import has_capability
from InternshipTrackApp.core.choices import REVIEWER_ROLES, Operation, Role
from InternshipTrackApp.core.exceptions import AccessDenied
from InternshipTrackApp.domain.services.assignment_resolver import resolve_scope
from InternshipTrackApp.internships.models import Evaluation

logger = logging.getLogger(__name__)


def owner_id_of(obj: Any):
    """Id of the student owning an artifact (None for non-artifacts)."""
    return getattr(obj, "student_id", None)


def is_evaluator(user, obj: Any) -> bool:
    return isinstance(obj, Evaluation) and obj.evaluator_id == user.id


def _is_authenticated(subject) -> bool:
    return bool(subject and getattr(subject, "is_authenticated", False))


def _decide(subject, operation: str, resource: str, artifact: Any, student_id) -> bool:
    if not _is_authenticated(subject):
        return False
    role = subject.role
    if not has_capability(role, resource, operation):
        return False
    if role == Role.ADMIN:
        return True

    target = owner_id_of(artifact) if artifact is not None else student_id
    if role == Role.STUDENT:
        return target is None or target == subject.id
    if role in REVIEWER_ROLES:
        if operation == Operation.READ and is_evaluator(subject, artifact):
            return True
        if target is None:
            return True
        return target in resolve_scope(subject)
    return False


def is_allowed(subject, operation: str, resource: str, *, artifact: Any = None, student_id=None) -> bool:
    """Boolean form of :func:`authorize` for permission classes and filters."""
    return _decide(subject, operation, resource, artifact, student_id)


def authorize(subject, operation: str, resource: str, *, artifact: Any = None, student_id=None) -> None:
    """Raise AccessDenied unless ``subject`` may perform ``operation``.

    ``artifact`` is the record acted on; ``student_id`` names the target
    student when there is no record yet (creation, listing for a student).
    Without either, only the capability table is consulted and list results
    are narrowed by the querysets' ``visible_to``.
    """
    if not _decide(subject, operation, resource, artifact, student_id):
        logger.warning(
            "Denied %s on %s %s for subject %s",
            operation, resource, getattr(artifact, "pk", student_id), getattr(subject, "pk", None),
        )
        raise AccessDenied()
