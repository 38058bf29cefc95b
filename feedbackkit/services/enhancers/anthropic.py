"""Anthropic messages-API enhancer."""

from __future__ import annotations

from typing import Any

from .base import ChatCompletionEnhancer

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicEnhancer(ChatCompletionEnhancer):
    vendor = "Anthropic"
    endpoint = "https://api.anthropic.com/v1/messages"

    def build_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.configuration.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_payload(self, description: str) -> dict[str, Any]:
        config = self.configuration
        return {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "system": config.system_prompt,
            "messages": [{"role": "user", "content": self.user_prompt(description)}],
        }

    def extract_text(self, payload: Any) -> Any:
        return payload["content"][0]["text"]
