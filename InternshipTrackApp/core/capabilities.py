"""Role capability table consulted by the authorization guard.

The table only answers "may this role ever perform this operation on this
resource". Relationship rules (ownership, assignment, department) are applied
on top of it in ``core.access``.
"""
from types import MappingProxyType
from typing import Mapping

from InternshipTrackApp.core.choices import Operation, Resource, Role

READ = Operation.READ
CREATE = Operation.CREATE
UPDATE = Operation.UPDATE
DELETE = Operation.DELETE
SUBMIT = Operation.SUBMIT
REVIEW = Operation.REVIEW
ADMINISTER = Operation.ADMINISTER

_STUDENT_WORK = frozenset({READ, CREATE, UPDATE, DELETE, SUBMIT})
_REVIEW_WORK = frozenset({READ, REVIEW})

CAPABILITIES: Mapping[str, Mapping[str, frozenset]] = MappingProxyType({
    Role.STUDENT: MappingProxyType({
        Resource.TASK: _STUDENT_WORK,
        Resource.REPORT: _STUDENT_WORK,
        Resource.PLACEMENT: frozenset({READ, CREATE, UPDATE}),
        Resource.EVALUATION: frozenset({READ}),
        Resource.CHECK_IN: frozenset({READ, CREATE}),
        Resource.DIRECTORY: frozenset({READ}),
    }),
    Role.LECTURER: MappingProxyType({
        Resource.TASK: _REVIEW_WORK,
        Resource.REPORT: _REVIEW_WORK,
        Resource.PLACEMENT: frozenset({READ}),
        Resource.EVALUATION: frozenset({READ, CREATE, UPDATE}),
        Resource.CHECK_IN: frozenset({READ}),
        Resource.DIRECTORY: frozenset({READ}),
    }),
    Role.SUPERVISOR: MappingProxyType({
        Resource.TASK: _REVIEW_WORK,
        Resource.REPORT: _REVIEW_WORK,
        Resource.PLACEMENT: frozenset({READ}),
        Resource.EVALUATION: frozenset({READ, CREATE, UPDATE}),
        Resource.CHECK_IN: _REVIEW_WORK,
        Resource.DIRECTORY: frozenset({READ}),
    }),
    Role.HOD: MappingProxyType({
        Resource.TASK: _REVIEW_WORK,
        Resource.REPORT: _REVIEW_WORK,
        Resource.PLACEMENT: _REVIEW_WORK,
        Resource.EVALUATION: frozenset({READ}),
        Resource.CHECK_IN: frozenset({READ}),
        Resource.DIRECTORY: frozenset({READ}),
    }),
    Role.ADMIN: MappingProxyType({
        Resource.TASK: _REVIEW_WORK,
        Resource.REPORT: _REVIEW_WORK,
        Resource.PLACEMENT: _REVIEW_WORK,
        Resource.EVALUATION: frozenset({READ}),
        Resource.CHECK_IN: frozenset({READ}),
        Resource.DIRECTORY: frozenset({READ, ADMINISTER}),
    }),
})


def allowed_operations(role: str, resource: str) -> frozenset:
    """Operations ``role`` may perform on ``resource`` (empty for unknown roles)."""
    return CAPABILITIES.get(role, {}).get(resource, frozenset())


def has_capability(role: str, resource: str, operation: str) -> bool:
    return operation in allowed_operations(role, resource)
