"""Request and response schemas for the flow routes."""

from typing import Literal

from pydantic import BaseModel, Field

IntentType = Literal[
    "set_title",
    "set_message",
    "submit",
    "improve_description",
    "clear_error",
    "copy_result_reference",
    "toggle_share_sheet",
    "toggle_markdown_preview",
    "capture_screenshot",
    "remove_screenshot",
]


class FlowCreateRequest(BaseModel):
    title: str = ""
    message: str = ""


class IntentRequest(BaseModel):
    type: IntentType
    value: str | None = Field(default=None, description="Payload for set_title / set_message")


class FeedbackResultResponse(BaseModel):
    identifier: str
    url: str | None = None
    provider_name: str


class FlowStateResponse(BaseModel):
    id: str
    title: str
    message: str
    has_screenshot: bool
    screenshot_bytes: int
    is_sending: bool
    is_improving: bool
    is_ai_generated: bool
    is_success: bool | None = None
    result: FeedbackResultResponse | None = None
    error: str | None = None
    show_markdown_preview: bool
    show_share_sheet: bool
    show_copied_confirmation: bool
    copied_reference: str | None = None
    can_submit: bool
    can_improve: bool
