"""State owned by a single feedback flow."""

from __future__ import annotations

from pydantic import BaseModel

from feedbackkit.schemas.feedback import (
    NO_DESCRIPTION,
    FeedbackItem,
    FeedbackResult,
    ImageAttachment,
)


class SubmissionState(BaseModel):
    # Editable fields
    title: str = ""
    message: str = ""
    screenshot: bytes | None = None

    # In-flight operations
    is_sending: bool = False
    is_improving: bool = False
    is_ai_generated: bool = False

    # Outcome
    is_success: bool | None = None
    result: FeedbackResult | None = None
    error: str | None = None

    # Presentation flags
    show_markdown_preview: bool = False
    show_share_sheet: bool = False
    show_copied_confirmation: bool = False

    @property
    def is_busy(self) -> bool:
        return self.is_sending or self.is_improving

    @property
    def can_submit(self) -> bool:
        """Whether a presentation layer should enable the submit action."""
        return bool(self.title.strip()) and not self.is_busy

    @property
    def can_improve(self) -> bool:
        return bool(self.message) and not self.is_busy

    def build_item(self) -> FeedbackItem:
        """Freeze the current editable fields into a submission payload."""
        attachments = (ImageAttachment(data=self.screenshot),) if self.screenshot else ()
        return FeedbackItem(
            title=self.title,
            description=self.message or NO_DESCRIPTION,
            attachments=attachments,
            is_ai_generated=self.is_ai_generated,
        )
