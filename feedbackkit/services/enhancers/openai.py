"""OpenAI chat-completions enhancer."""

from __future__ import annotations

from typing import Any

from .base import ChatCompletionEnhancer


class OpenAIEnhancer(ChatCompletionEnhancer):
    vendor = "OpenAI"
    endpoint = "https://api.openai.com/v1/chat/completions"

    def build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.configuration.api_key}"}

    def build_payload(self, description: str) -> dict[str, Any]:
        config = self.configuration
        return {
            "model": config.model,
            "messages": [
                {"role": "system", "content": config.system_prompt},
                {"role": "user", "content": self.user_prompt(description)},
            ],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    def extract_text(self, payload: Any) -> Any:
        return payload["choices"][0]["message"]["content"]
