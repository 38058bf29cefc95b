"""feedbackkit: collect feedback, optionally polish it with AI, submit it anywhere."""

from feedbackkit.errors import FeedbackError
from feedbackkit.schemas.feedback import (
    DataAttachment,
    FeedbackItem,
    FeedbackMetadata,
    FeedbackResult,
    ImageAttachment,
)
from feedbackkit.schemas.state import SubmissionState
from feedbackkit.services.dependencies import FeedbackDependencies, build_dependencies
from feedbackkit.services.flow import FeedbackFlow

__version__ = "0.1.0"

__all__ = [
    "DataAttachment",
    "FeedbackDependencies",
    "FeedbackError",
    "FeedbackFlow",
    "FeedbackItem",
    "FeedbackMetadata",
    "FeedbackResult",
    "ImageAttachment",
    "SubmissionState",
    "build_dependencies",
]
