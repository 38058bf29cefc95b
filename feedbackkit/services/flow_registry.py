"""In-memory registry of live flows for the HTTP presentation layer."""

from __future__ import annotations

import logging
from threading import RLock

from feedbackkit.schemas.state import SubmissionState
from feedbackkit.services.clipboard import MemoryClipboard
from feedbackkit.services.dependencies import FeedbackDependencies
from feedbackkit.services.flow import COPIED_CONFIRMATION_SECONDS, FeedbackFlow

logger = logging.getLogger(__name__)


class FlowNotFoundError(KeyError):
    pass


class FlowRegistry:
    """Holds flows between requests. Nothing survives a restart."""

    def __init__(
        self,
        dependencies: FeedbackDependencies,
        *,
        copied_confirmation_delay: float = COPIED_CONFIRMATION_SECONDS,
        max_flows: int = 1000,
    ):
        self.dependencies = dependencies
        self.copied_confirmation_delay = copied_confirmation_delay
        self.max_flows = max_flows
        self._lock = RLock()
        self._flows: dict[str, FeedbackFlow] = {}

    def create(self, *, title: str = "", message: str = "") -> FeedbackFlow:
        # Each flow gets its own clipboard so copied references never leak between sessions.
        flow = FeedbackFlow(
            self.dependencies.with_overrides(clipboard=MemoryClipboard()),
            state=SubmissionState(title=title, message=message),
            copied_confirmation_delay=self.copied_confirmation_delay,
        )
        with self._lock:
            if len(self._flows) >= self.max_flows:
                oldest_id = next(iter(self._flows))
                logger.warning("Flow limit %s reached; dismissing %s", self.max_flows, oldest_id)
                self._flows.pop(oldest_id).dismiss()
            self._flows[flow.id] = flow
        logger.info("Flow %s created", flow.id)
        return flow

    def get(self, flow_id: str) -> FeedbackFlow:
        with self._lock:
            flow = self._flows.get(flow_id)
        if flow is None:
            raise FlowNotFoundError(flow_id)
        return flow

    def dismiss(self, flow_id: str) -> None:
        with self._lock:
            flow = self._flows.pop(flow_id, None)
        if flow is None:
            raise FlowNotFoundError(flow_id)
        flow.dismiss()
        logger.info("Flow %s dismissed", flow_id)

    def dismiss_all(self) -> int:
        with self._lock:
            flows = list(self._flows.values())
            self._flows.clear()
        for flow in flows:
            flow.dismiss()
        return len(flows)

    def __len__(self) -> int:
        with self._lock:
            return len(self._flows)
