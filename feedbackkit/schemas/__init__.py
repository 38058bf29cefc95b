"""Pydantic schemas and value types."""

from feedbackkit.schemas.feedback import (
    Attachment,
    DataAttachment,
    FeedbackItem,
    FeedbackMetadata,
    FeedbackResult,
    ImageAttachment,
)
from feedbackkit.schemas.state import SubmissionState

__all__ = [
    "Attachment",
    "DataAttachment",
    "FeedbackItem",
    "FeedbackMetadata",
    "FeedbackResult",
    "ImageAttachment",
    "SubmissionState",
]
