"""Description enhancer contract and the shared chat-completion client."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from feedbackkit.errors import AIRequestError, AIResponseError
from feedbackkit.schemas.configuration import AIConfiguration

logger = logging.getLogger(__name__)

USER_PROMPT_TEMPLATE = "Improve this bug report description: {description}"


@runtime_checkable
class DescriptionEnhancer(Protocol):
    async def enhance(self, description: str) -> str: ...


class NoOpEnhancer:
    """Returns the description untouched."""

    async def enhance(self, description: str) -> str:
        logger.debug("NoOp enhancer: leaving description unchanged")
        return description


class ChatCompletionEnhancer:
    """Base for AI enhancers that POST one prompt and read one completion.

    Subclasses provide the endpoint, headers, request body and the path to
    the first text completion. Transport failures and non-2xx answers raise
    :class:`AIRequestError`; unreadable bodies raise :class:`AIResponseError`.
    """

    vendor = "AI"
    endpoint = ""

    def __init__(
        self,
        configuration: AIConfiguration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.configuration = configuration
        self._transport = transport

    def build_headers(self) -> dict[str, str]:
        raise NotImplementedError

    def build_payload(self, description: str) -> dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, payload: Any) -> Any:
        raise NotImplementedError

    def user_prompt(self, description: str) -> str:
        return USER_PROMPT_TEMPLATE.format(description=description)

    async def enhance(self, description: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.configuration.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=self.build_payload(description),
                    headers=self.build_headers(),
                )
        except httpx.TransportError as exc:
            logger.warning("%s enhancement request failed: %s", self.vendor, exc)
            raise AIRequestError(f"{self.vendor} request failed: {exc}") from exc

        if response.is_error:
            body = response.text[:500] or "Unknown error"
            logger.warning("%s returned HTTP %s: %s", self.vendor, response.status_code, body)
            raise AIRequestError(f"{self.vendor} request failed (HTTP {response.status_code}): {body}")

        try:
            text = self.extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AIResponseError(f"Failed to parse {self.vendor} response") from exc
        if not isinstance(text, str):
            raise AIResponseError(f"Failed to parse {self.vendor} response")
        return text.strip()
