"""Feedback flow routes: the HTTP presentation boundary."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from feedbackkit.schemas.flows import (
    FeedbackResultResponse,
    FlowCreateRequest,
    FlowStateResponse,
    IntentRequest,
)
from feedbackkit.schemas.intents import (
    CaptureScreenshot,
    ClearError,
    CopyResultReference,
    ImproveDescription,
    Intent,
    RemoveScreenshot,
    ScreenshotCaptured,
    SetMessage,
    SetTitle,
    Submit,
    ToggleMarkdownPreview,
    ToggleShareSheet,
)
from feedbackkit.services.clipboard import MemoryClipboard
from feedbackkit.services.flow import FeedbackFlow
from feedbackkit.services.flow_registry import FlowNotFoundError, FlowRegistry

router = APIRouter(prefix="/flows", tags=["flows"])

SCREENSHOT_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}

_SIMPLE_INTENTS = {
    "submit": Submit,
    "improve_description": ImproveDescription,
    "clear_error": ClearError,
    "copy_result_reference": CopyResultReference,
    "toggle_share_sheet": ToggleShareSheet,
    "toggle_markdown_preview": ToggleMarkdownPreview,
    "capture_screenshot": CaptureScreenshot,
    "remove_screenshot": RemoveScreenshot,
}


def get_registry(request: Request) -> FlowRegistry:
    return request.app.state.flow_registry


def _get_flow(registry: FlowRegistry, flow_id: str) -> FeedbackFlow:
    try:
        return registry.get(flow_id)
    except FlowNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback flow not found.")


def _serialize_flow(flow: FeedbackFlow) -> FlowStateResponse:
    state = flow.state
    clipboard = flow.dependencies.clipboard
    return FlowStateResponse(
        id=flow.id,
        title=state.title,
        message=state.message,
        has_screenshot=state.screenshot is not None,
        screenshot_bytes=len(state.screenshot or b""),
        is_sending=state.is_sending,
        is_improving=state.is_improving,
        is_ai_generated=state.is_ai_generated,
        is_success=state.is_success,
        result=(
            FeedbackResultResponse(**state.result.model_dump()) if state.result is not None else None
        ),
        error=state.error,
        show_markdown_preview=state.show_markdown_preview,
        show_share_sheet=state.show_share_sheet,
        show_copied_confirmation=state.show_copied_confirmation,
        copied_reference=clipboard.contents if isinstance(clipboard, MemoryClipboard) else None,
        can_submit=state.can_submit,
        can_improve=state.can_improve,
    )


def _to_intent(payload: IntentRequest, flow: FeedbackFlow) -> Intent:
    if payload.type == "set_title":
        return SetTitle(payload.value or "")
    if payload.type == "set_message":
        return SetMessage(payload.value or "")
    if payload.type == "submit" and not flow.state.title.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Feedback title cannot be empty.",
        )
    return _SIMPLE_INTENTS[payload.type]()


@router.post("", response_model=FlowStateResponse, status_code=status.HTTP_201_CREATED)
async def create_flow(
    payload: FlowCreateRequest | None = None,
    registry: FlowRegistry = Depends(get_registry),
):
    payload = payload or FlowCreateRequest()
    flow = registry.create(title=payload.title, message=payload.message)
    return _serialize_flow(flow)


@router.get("/{flow_id}", response_model=FlowStateResponse)
async def get_flow(flow_id: str, registry: FlowRegistry = Depends(get_registry)):
    return _serialize_flow(_get_flow(registry, flow_id))


@router.post("/{flow_id}/intents", response_model=FlowStateResponse)
async def dispatch_intent(
    flow_id: str,
    payload: IntentRequest,
    registry: FlowRegistry = Depends(get_registry),
):
    flow = _get_flow(registry, flow_id)
    await flow.send(_to_intent(payload, flow))
    return _serialize_flow(flow)


@router.post("/{flow_id}/screenshot", response_model=FlowStateResponse)
async def upload_screenshot(
    flow_id: str,
    request: Request,
    screenshot: UploadFile = File(...),
    registry: FlowRegistry = Depends(get_registry),
):
    flow = _get_flow(registry, flow_id)
    content_type = screenshot.content_type or "application/octet-stream"
    if content_type not in SCREENSHOT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Screenshot '{screenshot.filename}' has unsupported type.",
        )
    max_bytes = request.app.state.settings.max_attachment_bytes
    data = await screenshot.read(max_bytes + 1)
    await screenshot.close()
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Screenshot exceeds maximum size of {max_bytes} bytes.",
        )
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Screenshot is empty.")
    await flow.send(ScreenshotCaptured(data))
    return _serialize_flow(flow)


@router.delete("/{flow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_flow(flow_id: str, registry: FlowRegistry = Depends(get_registry)):
    try:
        registry.dismiss(flow_id)
    except FlowNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback flow not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
