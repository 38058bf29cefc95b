"""Provider for a first-party REST feedback endpoint."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from feedbackkit.errors import ProviderResponseError
from feedbackkit.schemas.configuration import CustomAPIConfiguration
from feedbackkit.schemas.feedback import FeedbackItem, FeedbackMetadata, FeedbackResult
from feedbackkit.services.providers.base import HTTPProvider
from feedbackkit.utils.attachments import validate_attachments

logger = logging.getLogger(__name__)


class CustomAPIProvider(HTTPProvider):
    """``POST {base_url}/api/feedback`` with a bearer token.

    The endpoint must answer with ``{"id": ..., "url": ...?}``.
    """

    name = "CustomAPI"

    def __init__(
        self,
        configuration: CustomAPIConfiguration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=configuration.timeout_seconds, transport=transport)
        self.configuration = configuration

    def build_payload(self, item: FeedbackItem, metadata: FeedbackMetadata) -> dict[str, Any]:
        return {
            "title": item.title,
            "description": item.description,
            "is_ai_generated": item.is_ai_generated,
            "metadata": {
                "device": metadata.device_model,
                "os": metadata.os_version,
                "version": metadata.app_version,
                "build": metadata.app_build,
                "locale": metadata.locale,
                "custom_fields": dict(metadata.custom_fields),
            },
            "attachments": [
                {
                    "filename": payload.filename,
                    "content_type": payload.mime_type,
                    "data": base64.b64encode(payload.data).decode("ascii"),
                }
                for payload in validate_attachments(
                    item.attachments, max_bytes=self.configuration.max_attachment_bytes
                )
            ],
        }

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult:
        base_url = self.configuration.base_url
        async with self._client() as client:
            response = await self._request(
                client,
                "POST",
                f"{base_url}/api/feedback",
                action="Feedback API request",
                json=self.build_payload(item, metadata),
                headers={"Authorization": f"Bearer {self.configuration.auth_token}"},
            )
        body = self._json_object(response, action="Feedback API request")
        if body.get("id") is None:
            raise ProviderResponseError("Missing 'id' in feedback API response")
        identifier = str(body["id"])
        url = body.get("url") if isinstance(body.get("url"), str) else f"{base_url}/feedback/{identifier}"
        logger.info("Feedback API stored '%s' as %s", item.title, identifier)
        return FeedbackResult(identifier=identifier, url=url, provider_name=self.name)
