"""Intents accepted by :class:`feedbackkit.services.flow.FeedbackFlow`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from feedbackkit.schemas.feedback import FeedbackResult


@dataclass(frozen=True, slots=True)
class SetTitle:
    title: str


@dataclass(frozen=True, slots=True)
class SetMessage:
    message: str


@dataclass(frozen=True, slots=True)
class Submit:
    pass


@dataclass(frozen=True, slots=True)
class FeedbackResponse:
    """Outcome of a provider submission: exactly one of the fields is set."""

    result: FeedbackResult | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, result: FeedbackResult) -> "FeedbackResponse":
        return cls(result=result)

    @classmethod
    def failure(cls, error: BaseException) -> "FeedbackResponse":
        return cls(error=error)


@dataclass(frozen=True, slots=True)
class ImproveDescription:
    pass


@dataclass(frozen=True, slots=True)
class ImproveDescriptionResponse:
    text: str | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, text: str) -> "ImproveDescriptionResponse":
        return cls(text=text)

    @classmethod
    def failure(cls, error: BaseException) -> "ImproveDescriptionResponse":
        return cls(error=error)


@dataclass(frozen=True, slots=True)
class ClearError:
    pass


@dataclass(frozen=True, slots=True)
class CopyResultReference:
    pass


@dataclass(frozen=True, slots=True)
class HideCopiedConfirmation:
    pass


@dataclass(frozen=True, slots=True)
class ToggleShareSheet:
    pass


@dataclass(frozen=True, slots=True)
class ToggleMarkdownPreview:
    pass


@dataclass(frozen=True, slots=True)
class CaptureScreenshot:
    pass


@dataclass(frozen=True, slots=True)
class ScreenshotCaptured:
    image: bytes | None


@dataclass(frozen=True, slots=True)
class RemoveScreenshot:
    pass


Intent = Union[
    SetTitle,
    SetMessage,
    Submit,
    FeedbackResponse,
    ImproveDescription,
    ImproveDescriptionResponse,
    ClearError,
    CopyResultReference,
    HideCopiedConfirmation,
    ToggleShareSheet,
    ToggleMarkdownPreview,
    CaptureScreenshot,
    ScreenshotCaptured,
    RemoveScreenshot,
]
