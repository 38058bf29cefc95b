"""Attachment helpers shared by every provider."""

from __future__ import annotations

import uuid
from typing import Iterable, NamedTuple

from feedbackkit.errors import (
    AttachmentError,
    AttachmentTooLargeError,
    UnsupportedAttachmentError,
)
from feedbackkit.schemas.feedback import Attachment, DataAttachment, ImageAttachment

MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024
ALLOWED_ATTACHMENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "text/plain",
    "application/json",
    "application/pdf",
}

# (magic prefix, mime type, extension)
_IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png", "png"),
    (b"\xff\xd8\xff", "image/jpeg", "jpg"),
    (b"GIF87a", "image/gif", "gif"),
    (b"GIF89a", "image/gif", "gif"),
)


class AttachmentPayload(NamedTuple):
    data: bytes
    filename: str
    mime_type: str


def sniff_image_type(data: bytes) -> tuple[str, str]:
    """Return ``(mime_type, extension)`` for encoded image bytes.

    Falls back to JPEG, which is what screenshots are encoded as when the
    format cannot be recognised.
    """
    for signature, mime_type, extension in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type, extension
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp", "webp"
    return "image/jpeg", "jpg"


def resolve_attachment(attachment: Attachment) -> AttachmentPayload:
    """Turn either attachment variant into bytes, filename and MIME type."""
    if isinstance(attachment, ImageAttachment):
        mime_type, extension = sniff_image_type(attachment.data)
        filename = f"screenshot-{uuid.uuid4().hex[:12]}.{extension}"
        return AttachmentPayload(attachment.data, filename, mime_type)
    if isinstance(attachment, DataAttachment):
        return AttachmentPayload(attachment.data, attachment.filename, attachment.mime_type)
    raise TypeError(f"Unknown attachment type: {type(attachment).__name__}")


def validate_attachments(
    attachments: Iterable[Attachment],
    *,
    max_bytes: int = MAX_ATTACHMENT_BYTES,
    max_count: int = MAX_ATTACHMENTS,
    allowed_types: set[str] | None = None,
) -> list[AttachmentPayload]:
    """Resolve and check attachments before anything is sent upstream."""
    items = list(attachments)
    if len(items) > max_count:
        raise AttachmentError(f"Only {max_count} attachments are allowed.")
    allowed = ALLOWED_ATTACHMENT_TYPES if allowed_types is None else allowed_types
    payloads: list[AttachmentPayload] = []
    for attachment in items:
        payload = resolve_attachment(attachment)
        if len(payload.data) > max_bytes:
            raise AttachmentTooLargeError(payload.filename, max_bytes)
        if allowed and payload.mime_type not in allowed:
            raise UnsupportedAttachmentError(payload.filename, payload.mime_type)
        payloads.append(payload)
    return payloads
