"""Provider used when no backend is configured."""

from __future__ import annotations

import logging
import uuid

from feedbackkit.schemas.feedback import FeedbackItem, FeedbackMetadata, FeedbackResult

logger = logging.getLogger(__name__)


class NoOpProvider:
    name = "NoOp"

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult:
        logger.info(
            "NoOp provider received '%s' (%s attachments) from %s on %s",
            item.title,
            len(item.attachments),
            metadata.app_version,
            metadata.device_model,
        )
        logger.debug("NoOp provider description: %s", item.description)
        return FeedbackResult(
            identifier=f"NOOP-{uuid.uuid4().hex[:8].upper()}",
            url=None,
            provider_name=self.name,
        )
