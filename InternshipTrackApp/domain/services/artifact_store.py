"""Narrow record interface over the artifact models.

Status changes go through :func:`update_artifact_status`, a compare-and-swap
on the status column: the UPDATE only matches the row while it still holds
the status the caller read. Zero matched rows means another request decided
first and the caller gets ``Conflict`` instead of silently overwriting it.
"""
import logging
from dataclasses import dataclass
from typing import Any

from django.db import models, transaction
from django.db.models import QuerySet
from django.utils import timezone

from InternshipTrackApp.core.choices import Resource
from InternshipTrackApp.core.exceptions import Conflict, NotFound
from InternshipTrackApp.internships.models import CheckIn, Evaluation, Placement, Report, Task
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    model: type[models.Model]
    status_field: str | None


BINDINGS = {
    Resource.TASK: Binding(Task, "status"),
    Resource.REPORT: Binding(Report, "status"),
    Resource.PLACEMENT: Binding(Placement, "status"),
    Resource.CHECK_IN: Binding(CheckIn, "supervisor_status"),
    Resource.EVALUATION: Binding(Evaluation, None),
}


def binding_for(kind: str) -> Binding:
    try:
        return BINDINGS[kind]
    except KeyError:
        raise ValueError(f"Unknown artifact kind: {kind}") from None


def get_artifact(kind: str, pk: Any) -> models.Model:
    model = binding_for(kind).model
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound() from None


def create_artifact(kind: str, actor: User | None = None, **fields: Any) -> models.Model:
    """Insert a new artifact, attributing the history row to ``actor``."""
    instance = binding_for(kind).model(**fields)
    instance._history_user = actor
    instance.save()
    return instance


@transaction.atomic
def update_artifact_status(
    kind: str,
    pk: Any,
    expected_status: str,
    new_status: str,
    actor: User | None,
    reason: str = "",
    **changes: Any,
) -> models.Model:
    """Move an artifact from ``expected_status`` to ``new_status``.

    Extra ``changes`` (reviewer, comments, timestamps) are written in the same
    UPDATE. A history row is recorded for the change.

    Raises:
        NotFound: no such artifact.
        Conflict: the stored status is no longer ``expected_status``.
    """
    binding = binding_for(kind)
    if binding.status_field is None:
        raise ValueError(f"{kind} has no status column")
    model = binding.model
    matched = model.objects.filter(pk=pk, **{binding.status_field: expected_status}).update(
        **{binding.status_field: new_status, "updated_at": timezone.now(), **changes}
    )
    if not matched:
        if not model.objects.filter(pk=pk).exists():
            raise NotFound()
        logger.warning(
            "Lost status race on %s %s: expected %s, wanted %s", kind, pk, expected_status, new_status
        )
        raise Conflict()

    instance = model.objects.get(pk=pk)
    model.history.bulk_history_create(
        [instance],
        update=True,
        default_user=actor,
        default_change_reason=reason or f"{expected_status} -> {new_status}",
    )
    logger.info(
        "%s %s moved %s -> %s by %s", kind, pk, expected_status, new_status, getattr(actor, "pk", None)
    )
    return instance


def list_visible(kind: str, subject: User) -> QuerySet:
    """Artifacts of ``kind`` the subject may list: a student's own, or those in a reviewer's scope."""
    return binding_for(kind).model.objects.visible_to(subject)
