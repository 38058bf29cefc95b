"""Feedback flow orchestrator.

A flow owns one :class:`SubmissionState` and changes it only inside
:meth:`FeedbackFlow.dispatch`, which is synchronous. Work that has to wait
(metadata, provider, enhancer, screenshot, the "copied" reset timer) runs as
an effect task and reports back by dispatching a result intent, so every
mutation lands on the event loop one at a time and in dispatch order.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable

from feedbackkit.errors import EnhancementError, SubmissionError, describe_error
from feedbackkit.logging_config import get_logger
from feedbackkit.schemas.intents import (
    CaptureScreenshot,
    ClearError,
    CopyResultReference,
    FeedbackResponse,
    HideCopiedConfirmation,
    ImproveDescription,
    ImproveDescriptionResponse,
    Intent,
    RemoveScreenshot,
    ScreenshotCaptured,
    SetMessage,
    SetTitle,
    Submit,
    ToggleMarkdownPreview,
    ToggleShareSheet,
)
from feedbackkit.schemas.state import SubmissionState
from feedbackkit.services.dependencies import FeedbackDependencies

COPIED_CONFIRMATION_SECONDS = 2.0
COPIED_CONFIRMATION_CANCEL_ID = "copied-confirmation"

Send = Callable[[Intent], object]
Listener = Callable[[Intent, SubmissionState], None]


@dataclass(frozen=True, slots=True)
class Effect:
    """Async work started by a transition.

    ``deferred`` effects (timers) are not awaited by :meth:`FeedbackFlow.send`
    and are cancelled on dismiss. Starting an effect whose ``cancel_id`` is
    already running cancels the older one.

    ``on_cancel`` builds the result intent delivered when a non-deferred
    effect is cancelled before reporting back.
    """

    body: Callable[[Send], Awaitable[None]]
    cancel_id: str | None = None
    deferred: bool = False
    on_cancel: Callable[[], Intent] | None = None


class FeedbackFlow:
    def __init__(
        self,
        dependencies: FeedbackDependencies | None = None,
        *,
        state: SubmissionState | None = None,
        copied_confirmation_delay: float = COPIED_CONFIRMATION_SECONDS,
        flow_id: str | None = None,
    ):
        self.id = flow_id or uuid.uuid4().hex
        self.dependencies = dependencies or FeedbackDependencies()
        self._state = state.model_copy() if state is not None else SubmissionState()
        self._copied_delay = copied_confirmation_delay
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        self._deferred: set[asyncio.Task] = set()
        self._cancellable: dict[str, asyncio.Task] = {}
        self._dismissed = False
        self._logger = get_logger(__name__)

    @property
    def state(self) -> SubmissionState:
        """Snapshot of the current state; mutating it has no effect on the flow."""
        return self._state.model_copy()

    @property
    def is_dismissed(self) -> bool:
        return self._dismissed

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(intent, state)`` after every transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, intent: Intent) -> asyncio.Task | None:
        """Apply ``intent`` now and start its effect, if any."""
        if self._dismissed:
            self._logger.debug("Flow %s dismissed; dropping %s", self.id, type(intent).__name__)
            return None
        self._logger.debug("Flow %s <- %s", self.id, type(intent).__name__)
        effect = self._reduce(intent)
        if self._listeners:
            snapshot = self.state
            for listener in list(self._listeners):
                listener(intent, snapshot)
        if effect is None:
            return None
        return self._start(effect)

    async def send(self, intent: Intent) -> None:
        """Dispatch and wait until the effect has delivered its result.

        Deferred effects are left running in the background.
        """
        task = self.dispatch(intent)
        if task is not None and task not in self._deferred:
            # A cancelled caller must not cancel the effect itself.
            await asyncio.shield(task)

    async def settle(self) -> None:
        """Wait for every outstanding effect, timers included."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dismiss(self) -> None:
        """Tear the flow down.

        Pending timers are cancelled. Network effects already in flight may
        still finish, but whatever they deliver is dropped.
        """
        if self._dismissed:
            return
        self._dismissed = True
        for task in list(self._deferred):
            task.cancel()
        self._listeners.clear()
        self._logger.debug("Flow %s dismissed", self.id)

    # Effects

    def _start(self, effect: Effect) -> asyncio.Task:
        if effect.cancel_id is not None:
            previous = self._cancellable.pop(effect.cancel_id, None)
            if previous is not None and not previous.done():
                previous.cancel()
        task = asyncio.create_task(effect.body(self.dispatch))
        self._tasks.add(task)
        if effect.deferred:
            self._deferred.add(task)
        if effect.cancel_id is not None:
            self._cancellable[effect.cancel_id] = task

        def forget(done: asyncio.Task) -> None:
            self._tasks.discard(done)
            self._deferred.discard(done)
            if effect.cancel_id is not None and self._cancellable.get(effect.cancel_id) is done:
                del self._cancellable[effect.cancel_id]
            if done.cancelled() and effect.on_cancel is not None and not self._dismissed:
                self._logger.warning("Flow %s effect cancelled before reporting back", self.id)
                self.dispatch(effect.on_cancel())

        task.add_done_callback(forget)
        return task

    # Transitions

    def _reduce(self, intent: Intent) -> Effect | None:
        state = self._state

        if isinstance(intent, SetTitle):
            state.title = intent.title
            return None

        if isinstance(intent, SetMessage):
            state.message = intent.message
            return None

        if isinstance(intent, Submit):
            return self._begin_submit(state)

        if isinstance(intent, FeedbackResponse):
            state.is_sending = False
            if intent.error is not None:
                state.is_success = False
                state.error = describe_error(intent.error)
            else:
                state.is_success = True
                state.result = intent.result
            return None

        if isinstance(intent, ImproveDescription):
            return self._begin_improve(state)

        if isinstance(intent, ImproveDescriptionResponse):
            state.is_improving = False
            if intent.error is not None:
                state.error = f"Failed to improve description: {describe_error(intent.error)}"
            else:
                state.message = intent.text or ""
                state.is_ai_generated = True
            return None

        if isinstance(intent, ClearError):
            state.error = None
            return None

        if isinstance(intent, CopyResultReference):
            return self._copy_reference(state)

        if isinstance(intent, HideCopiedConfirmation):
            state.show_copied_confirmation = False
            return None

        if isinstance(intent, ToggleShareSheet):
            state.show_share_sheet = not state.show_share_sheet
            return None

        if isinstance(intent, ToggleMarkdownPreview):
            state.show_markdown_preview = not state.show_markdown_preview
            return None

        if isinstance(intent, CaptureScreenshot):
            return Effect(self._capture_screenshot)

        if isinstance(intent, ScreenshotCaptured):
            state.screenshot = intent.image
            return None

        if isinstance(intent, RemoveScreenshot):
            state.screenshot = None
            return None

        raise TypeError(f"Unsupported intent: {intent!r}")

    def _begin_submit(self, state: SubmissionState) -> Effect | None:
        # One submission at a time, and never while the description is being rewritten.
        if state.is_busy:
            self._logger.info(
                "Flow %s ignoring submit (sending=%s, improving=%s)",
                self.id,
                state.is_sending,
                state.is_improving,
            )
            return None
        state.is_sending = True
        state.error = None
        item = state.build_item()
        collector = self.dependencies.metadata_collector
        provider = self.dependencies.provider
        logger = self._logger
        flow_id = self.id

        async def run(send: Send) -> None:
            try:
                metadata = await collector.collect()
                result = await provider.submit(item, metadata)
            except Exception as exc:
                logger.warning("Flow %s submission via %s failed: %s", flow_id, provider.name, exc)
                send(FeedbackResponse.failure(exc))
                return
            logger.info("Flow %s submitted as %s via %s", flow_id, result.identifier, result.provider_name)
            send(FeedbackResponse.success(result))

        return Effect(
            run,
            on_cancel=lambda: FeedbackResponse.failure(SubmissionError("Submission was cancelled")),
        )

    def _begin_improve(self, state: SubmissionState) -> Effect | None:
        if not state.message:
            return None
        if state.is_busy:
            self._logger.info("Flow %s ignoring improve request while busy", self.id)
            return None
        state.is_improving = True
        state.error = None
        current_description = state.message
        enhancer = self.dependencies.enhancer
        logger = self._logger
        flow_id = self.id

        async def run(send: Send) -> None:
            try:
                improved = await enhancer.enhance(current_description)
            except Exception as exc:
                logger.warning("Flow %s enhancement failed: %s", flow_id, exc)
                send(ImproveDescriptionResponse.failure(exc))
                return
            send(ImproveDescriptionResponse.success(improved))

        return Effect(
            run,
            on_cancel=lambda: ImproveDescriptionResponse.failure(EnhancementError("Enhancement was cancelled")),
        )

    def _copy_reference(self, state: SubmissionState) -> Effect | None:
        if state.result is None:
            return None
        self.dependencies.clipboard.copy(state.result.reference)
        state.show_copied_confirmation = True
        delay = self._copied_delay

        async def reset(send: Send) -> None:
            await asyncio.sleep(delay)
            send(HideCopiedConfirmation())

        return Effect(reset, cancel_id=COPIED_CONFIRMATION_CANCEL_ID, deferred=True)

    async def _capture_screenshot(self, send: Send) -> None:
        try:
            image = await self.dependencies.screenshot_capture.capture()
        except Exception as exc:
            self._logger.warning("Flow %s screenshot capture failed: %s", self.id, exc)
            image = None
        send(ScreenshotCaptured(image))
