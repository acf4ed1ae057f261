"""Validation helpers for uploaded task/report attachments and check-in photos."""

from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError

ALLOWED_PHOTO_MIME: set[str] = {
    "image/png",
    "image/jpeg",
    "image/webp",
}
ALLOWED_ATTACHMENT_MIME: set[str] = ALLOWED_PHOTO_MIME | {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/zip",
}


def validate_file_size(file_obj: Any, max_mb: int | None = None) -> None:
    """Ensure file size does not exceed max_mb megabytes (MAX_UPLOAD_MB by default)."""
    if max_mb is None:
        max_mb = getattr(settings, "MAX_UPLOAD_MB", 5)
    if file_obj and file_obj.size > max_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds {max_mb} MB limit.")


def _probe_mime(file_obj: Any) -> str | None:
    """Read initial bytes to detect MIME type using libmagic."""
    if not file_obj:
        return None
    import magic

    header = file_obj.read(4096)
    file_obj.seek(0)
    return magic.from_buffer(header, mime=True)


def validate_attachment_mime(file_obj: Any) -> None:
    """Validate that a task/report attachment has an allowed MIME type."""
    mime = _probe_mime(file_obj)
    if mime and mime not in ALLOWED_ATTACHMENT_MIME:
        raise ValidationError(f"Unsupported attachment mime: {mime}")


def validate_photo_mime(file_obj: Any) -> None:
    """Validate that a check-in photo is an image."""
    mime = _probe_mime(file_obj)
    if mime and mime not in ALLOWED_PHOTO_MIME:
        raise ValidationError(f"Unsupported photo mime: {mime}")
