"""Subject directory: lookups and admin provisioning of portal accounts.

Accounts are never hard-deleted; deactivation is a status change.
"""
import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet

from InternshipTrackApp.core.access import authorize
from InternshipTrackApp.core.choices import AccountStatus, Operation, Resource, Role
from InternshipTrackApp.core.exceptions import AuthenticationError, NotFound, ValidationError
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "contact_number")


def get_subject(subject_id: Any) -> User:
    try:
        return User.objects.select_related("faculty", "department").get(pk=subject_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound() from None


def get_active_subject(subject_id: Any) -> User:
    """Subject behind a token; missing or deactivated accounts cannot authenticate."""
    try:
        subject = get_subject(subject_id)
    except NotFound:
        raise AuthenticationError("Not authorized, user not found.") from None
    if not subject.is_active_subject:
        raise AuthenticationError("Account is inactive.")
    return subject


def list_subjects(role: str | None = None, status: str | None = None) -> QuerySet:
    qs = User.objects.select_related("faculty", "department").order_by("id")
    if role:
        qs = qs.filter(role=role)
    if status:
        qs = qs.filter(status=status)
    return qs


@transaction.atomic
def provision_subject(admin: User, data: dict[str, Any]) -> User:
    """Create an account on behalf of an admin.

    Args:
        admin: Acting administrator.
        data: Validated payload; ``password`` is hashed, never stored raw.

    Returns:
        The new User.
    """
    authorize(admin, Operation.ADMINISTER, Resource.DIRECTORY)
    payload = dict(data)
    password = payload.pop("password", None)
    payload.setdefault("username", payload["email"])
    subject = User(**payload)
    if password:
        subject.set_password(password)
    else:
        subject.set_unusable_password()
    subject._history_user = admin
    subject.save()
    logger.info("Admin %s provisioned %s subject %s", admin.pk, subject.role, subject.pk)
    return subject


@transaction.atomic
def update_role_and_status(
    admin: User,
    subject: User,
    role: str | None = None,
    status: str | None = None,
) -> User:
    """Change a subject's role and/or account status (admin only).

    Raises:
        ValidationError: neither role nor status given, or an unknown value.
    """
    authorize(admin, Operation.ADMINISTER, Resource.DIRECTORY)
    if role is None and status is None:
        raise ValidationError("Provide role or status to update.")
    if role is not None and role not in Role.values:
        raise ValidationError({"role": [f"Unknown role: {role}"]})
    if status is not None and status not in AccountStatus.values:
        raise ValidationError({"status": [f"Unknown status: {status}"]})

    update_fields = ["updated_at"]
    if role is not None:
        subject.role = role
        update_fields.append("role")
    if status is not None:
        subject.status = status
        update_fields.append("status")
    subject._history_user = admin
    subject.save(update_fields=update_fields)
    logger.info("Admin %s set subject %s role=%s status=%s", admin.pk, subject.pk, subject.role, subject.status)
    return subject


@transaction.atomic
def update_own_profile(subject: User, data: dict[str, Any]) -> User:
    """Subjects may edit their name and contact number, nothing else."""
    changed = [field for field in PROFILE_FIELDS if field in data]
    for field in changed:
        setattr(subject, field, data[field])
    if changed:
        subject._history_user = subject
        subject.save(update_fields=[*changed, "updated_at"])
    return subject
