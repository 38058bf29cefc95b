"""Error taxonomy shared by providers, enhancers and the flow orchestrator."""

from __future__ import annotations


class FeedbackError(Exception):
    """Base class for every failure surfaced by feedbackkit."""

    prefix = "Feedback error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class ConfigurationError(FeedbackError):
    prefix = "Invalid configuration"


class MissingSettingError(ConfigurationError):
    """A required environment variable was not set."""

    def __init__(self, variable: str):
        super().__init__(variable)
        self.variable = variable

    def __str__(self) -> str:
        return f"Missing required environment variable: {self.variable}"


class SubmissionError(FeedbackError):
    prefix = "Submission failed"


class ProviderRequestError(SubmissionError):
    """The backend answered with a non-success status."""


class ProviderResponseError(SubmissionError):
    """The backend answered, but not with anything we could read."""

    prefix = "Invalid provider response"


class PartialSubmissionError(SubmissionError):
    """The record was created upstream but a follow-up upload failed.

    The submission as a whole is still reported as failed. ``identifier`` and
    ``url`` point at the orphaned record so the caller can mention it.
    """

    def __init__(self, identifier: str, url: str | None, reason: str):
        super().__init__(f"{identifier} was created but attachment upload failed: {reason}")
        self.identifier = identifier
        self.url = url
        self.reason = reason


class EnhancementError(FeedbackError):
    prefix = "Enhancement failed"


class AIRequestError(EnhancementError):
    """Transport failure or non-success status from the AI endpoint."""

    prefix = "AI request failed"


class AIResponseError(EnhancementError):
    """The AI endpoint answered with an unexpected payload shape."""

    prefix = "Invalid AI response"


class AttachmentError(FeedbackError):
    prefix = "Attachment rejected"


class AttachmentTooLargeError(AttachmentError):
    def __init__(self, filename: str, max_size: int):
        super().__init__(f"'{filename}' exceeds maximum size of {max_size} bytes")
        self.filename = filename
        self.max_size = max_size


class UnsupportedAttachmentError(AttachmentError):
    def __init__(self, filename: str, mime_type: str):
        super().__init__(f"'{filename}' has unsupported type {mime_type}")
        self.filename = filename
        self.mime_type = mime_type


class NetworkError(FeedbackError):
    prefix = "Network error"


def describe_error(exc: BaseException) -> str:
    """Human readable message for an arbitrary exception."""
    text = str(exc).strip()
    return text or exc.__class__.__name__


__all__ = [
    "AIRequestError",
    "AIResponseError",
    "AttachmentError",
    "AttachmentTooLargeError",
    "ConfigurationError",
    "EnhancementError",
    "FeedbackError",
    "MissingSettingError",
    "NetworkError",
    "PartialSubmissionError",
    "ProviderRequestError",
    "ProviderResponseError",
    "SubmissionError",
    "UnsupportedAttachmentError",
    "describe_error",
]
