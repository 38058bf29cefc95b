"""Single-request webhook providers (generic JSON and Slack)."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from feedbackkit.schemas.configuration import WebhookConfiguration
from feedbackkit.schemas.feedback import FeedbackItem, FeedbackMetadata, FeedbackResult
from feedbackkit.services.providers.base import HTTPProvider, environment_lines, short_id
from feedbackkit.utils.attachments import validate_attachments

logger = logging.getLogger(__name__)


class WebhookProvider(HTTPProvider):
    """POSTs the feedback as JSON to an arbitrary endpoint.

    If the endpoint answers with a JSON object containing ``id`` (and
    optionally ``url``) those become the receipt; otherwise a local
    identifier is generated.
    """

    name = "Webhook"
    id_prefix = "webhook"

    def __init__(
        self,
        configuration: WebhookConfiguration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=configuration.timeout_seconds, transport=transport)
        self.configuration = configuration

    def build_payload(self, item: FeedbackItem, metadata: FeedbackMetadata) -> dict[str, Any]:
        attachments = []
        for payload in validate_attachments(
            item.attachments, max_bytes=self.configuration.max_attachment_bytes
        ):
            entry: dict[str, Any] = {
                "filename": payload.filename,
                "content_type": payload.mime_type,
                "size_bytes": len(payload.data),
            }
            if self.configuration.include_attachment_data:
                entry["content_base64"] = base64.b64encode(payload.data).decode("ascii")
            attachments.append(entry)
        return {
            "title": item.title,
            "description": item.description,
            "is_ai_generated": item.is_ai_generated,
            "submitted_at": datetime.now(timezone.utc).isoformat(),
            "metadata": metadata.model_dump(),
            "attachments": attachments,
        }

    def parse_result(self, response: httpx.Response) -> FeedbackResult:
        identifier: str | None = None
        url: str | None = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                if body.get("id") is not None:
                    identifier = str(body["id"])
                if isinstance(body.get("url"), str):
                    url = body["url"]
        return FeedbackResult(
            identifier=identifier or short_id(self.id_prefix),
            url=url,
            provider_name=self.name,
        )

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult:
        payload = self.build_payload(item, metadata)
        async with self._client() as client:
            response = await self._request(
                client,
                "POST",
                self.configuration.url,
                action="Webhook delivery",
                json=payload,
                headers=self.configuration.headers,
            )
        result = self.parse_result(response)
        logger.info("%s delivered feedback '%s' as %s", self.name, item.title, result.identifier)
        return result


class SlackWebhookProvider(WebhookProvider):
    """Posts a formatted message to a Slack incoming webhook."""

    name = "Slack"
    id_prefix = "slack"

    def build_payload(self, item: FeedbackItem, metadata: FeedbackMetadata) -> dict[str, Any]:
        lines = [
            "*New Feedback*",
            f"*Title:* {item.title}",
            f"*Description:* {item.description}",
            "",
            *environment_lines(metadata),
        ]
        if item.attachments:
            lines.append(f"_{len(item.attachments)} attachment(s) not included_")
        if item.is_ai_generated:
            lines.append("_Description enhanced by AI_")
        return {
            "text": "\n".join(lines),
            "username": "FeedbackBot",
            "icon_emoji": ":speech_balloon:",
        }

    def parse_result(self, response: httpx.Response) -> FeedbackResult:
        # Slack answers with a plain "ok" body and no reference of its own.
        return FeedbackResult(identifier=short_id(self.id_prefix), url=None, provider_name=self.name)
