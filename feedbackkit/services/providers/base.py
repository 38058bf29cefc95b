"""Shared contract and HTTP plumbing for feedback providers."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol, runtime_checkable

import httpx

from feedbackkit.errors import NetworkError, ProviderRequestError, ProviderResponseError
from feedbackkit.schemas.feedback import FeedbackItem, FeedbackMetadata, FeedbackResult

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 500


@runtime_checkable
class FeedbackProvider(Protocol):
    """Anything that can turn a feedback item into a receipt."""

    name: str

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult: ...


def short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def environment_lines(metadata: FeedbackMetadata) -> list[str]:
    """Device/app lines in the fixed order every text backend uses."""
    lines = [
        f"Device: {metadata.device_model}",
        f"OS Version: {metadata.os_version}",
        f"App Version: {metadata.app_version} (Build {metadata.app_build})",
        f"Locale: {metadata.locale}",
    ]
    custom = metadata.sorted_custom_fields()
    if custom:
        lines.append("")
        lines.extend(f"{key}: {value}" for key, value in custom)
    return lines


class HTTPProvider:
    """Base for providers that talk to a backend over HTTP.

    A fresh ``httpx.AsyncClient`` is opened per submission; ``transport`` lets
    callers (and tests) route requests elsewhere.
    """

    name = "HTTP"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport, **kwargs)

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        action: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", self.name, action, exc)
            raise NetworkError(f"{action} failed: {exc}") from exc
        if response.is_error:
            body = response.text[:_ERROR_BODY_LIMIT] or "Unknown error"
            logger.warning(
                "%s %s returned HTTP %s: %s", self.name, action, response.status_code, body
            )
            raise ProviderRequestError(f"{action} failed (HTTP {response.status_code}): {body}")
        return response

    @staticmethod
    def _json_object(response: httpx.Response, *, action: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderResponseError(f"{action} returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise ProviderResponseError(f"{action} returned {type(payload).__name__}, expected an object")
        return payload
