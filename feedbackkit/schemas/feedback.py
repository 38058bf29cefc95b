"""Value types exchanged between the flow and its leaf capabilities."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"
NO_DESCRIPTION = "No description provided"


class ImageAttachment(BaseModel):
    """Encoded image bytes (PNG, JPEG, ...) such as a screenshot."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes
    compression_quality: float = Field(default=0.9, ge=0.0, le=1.0)
    caption: str | None = None


class DataAttachment(BaseModel):
    """Arbitrary binary payload with an explicit MIME type and filename."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["data"] = "data"
    data: bytes
    mime_type: str
    filename: str
    caption: str | None = None


Attachment = Annotated[Union[ImageAttachment, DataAttachment], Field(discriminator="kind")]


class FeedbackItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    attachments: tuple[Attachment, ...] = ()
    is_ai_generated: bool = False


class FeedbackMetadata(BaseModel):
    """Snapshot of app and device context taken when feedback is submitted."""

    model_config = ConfigDict(frozen=True)

    app_version: str = UNKNOWN
    app_build: str = UNKNOWN
    device_model: str = UNKNOWN
    os_version: str = UNKNOWN
    locale: str = UNKNOWN
    custom_fields: dict[str, str] = Field(default_factory=dict)

    def sorted_custom_fields(self) -> list[tuple[str, str]]:
        return sorted(self.custom_fields.items())


class FeedbackResult(BaseModel):
    """Receipt returned by a provider after a successful submission."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    url: str | None = None
    provider_name: str

    @property
    def reference(self) -> str:
        """The value users copy or share: the URL when there is one."""
        return self.url or self.identifier


__all__ = [
    "Attachment",
    "DataAttachment",
    "FeedbackItem",
    "FeedbackMetadata",
    "FeedbackResult",
    "ImageAttachment",
    "NO_DESCRIPTION",
    "UNKNOWN",
]
