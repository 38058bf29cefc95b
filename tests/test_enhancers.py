"""Tests for the AI description enhancers."""

import json

import httpx
import pytest

from feedbackkit.errors import AIRequestError, AIResponseError
from feedbackkit.schemas.configuration import (
    ANTHROPIC_DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    OPENAI_DEFAULT_MODEL,
    AIConfiguration,
)
from feedbackkit.services.enhancers import (
    AnthropicEnhancer,
    DescriptionEnhancer,
    NoOpEnhancer,
    OpenAIEnhancer,
)


def _capture(response: httpx.Response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return seen, httpx.MockTransport(handler)


async def test_noop_enhancer_echoes_input():
    enhancer = NoOpEnhancer()

    assert isinstance(enhancer, DescriptionEnhancer)
    assert await enhancer.enhance("app crashes") == "app crashes"


class TestOpenAIEnhancer:
    async def test_sends_chat_completion_and_strips_reply(self):
        seen, transport = _capture(
            httpx.Response(200, json={"choices": [{"message": {"content": "  Clear report.\n"}}]})
        )
        enhancer = OpenAIEnhancer(AIConfiguration.openai("sk-test"), transport=transport)

        text = await enhancer.enhance("app crashes")

        assert text == "Clear report."
        request = seen[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == OPENAI_DEFAULT_MODEL
        assert body["max_tokens"] == 500
        assert body["temperature"] == 0.7
        assert body["messages"] == [
            {"role": "system", "content": DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": "Improve this bug report description: app crashes"},
        ]

    async def test_http_error_raises_request_error(self):
        _, transport = _capture(httpx.Response(401, json={"error": {"message": "bad key"}}))
        enhancer = OpenAIEnhancer(AIConfiguration.openai("sk-bad"), transport=transport)

        with pytest.raises(AIRequestError) as exc_info:
            await enhancer.enhance("text")

        assert "HTTP 401" in str(exc_info.value)

    async def test_connection_failure_raises_request_error(self):
        def refuse(request):
            raise httpx.ConnectError("no route", request=request)

        enhancer = OpenAIEnhancer(AIConfiguration.openai("sk"), transport=httpx.MockTransport(refuse))

        with pytest.raises(AIRequestError):
            await enhancer.enhance("text")

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"choices": []}),
            httpx.Response(200, json={"choices": [{"message": {"content": None}}]}),
            httpx.Response(200, json=["unexpected"]),
            httpx.Response(200, content=b"not json"),
        ],
    )
    async def test_unreadable_reply_raises_response_error(self, response):
        _, transport = _capture(response)
        enhancer = OpenAIEnhancer(AIConfiguration.openai("sk"), transport=transport)

        with pytest.raises(AIResponseError):
            await enhancer.enhance("text")


class TestAnthropicEnhancer:
    async def test_sends_messages_request(self):
        seen, transport = _capture(httpx.Response(200, json={"content": [{"type": "text", "text": "Better."}]}))
        config = AIConfiguration.anthropic("ant-key", max_tokens=200, temperature=0.2)
        enhancer = AnthropicEnhancer(config, transport=transport)

        text = await enhancer.enhance("broken")

        assert text == "Better."
        request = seen[0]
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "ant-key"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body["model"] == ANTHROPIC_DEFAULT_MODEL
        assert body["max_tokens"] == 200
        assert body["temperature"] == 0.2
        assert body["system"] == DEFAULT_SYSTEM_PROMPT
        assert body["messages"] == [
            {"role": "user", "content": "Improve this bug report description: broken"}
        ]

    async def test_missing_content_raises_response_error(self):
        _, transport = _capture(httpx.Response(200, json={"id": "msg_1"}))
        enhancer = AnthropicEnhancer(AIConfiguration.anthropic("k"), transport=transport)

        with pytest.raises(AIResponseError):
            await enhancer.enhance("broken")

    async def test_server_error_raises_request_error(self):
        _, transport = _capture(httpx.Response(529, text="overloaded"))
        enhancer = AnthropicEnhancer(AIConfiguration.anthropic("k"), transport=transport)

        with pytest.raises(AIRequestError) as exc_info:
            await enhancer.enhance("broken")

        assert "overloaded" in str(exc_info.value)
