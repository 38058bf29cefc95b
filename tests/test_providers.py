"""Tests for the no-op, webhook, Slack, custom API and e-mail providers."""

import base64
import json
import smtplib

import httpx
import pytest

from feedbackkit.errors import (
    AttachmentTooLargeError,
    NetworkError,
    ProviderRequestError,
    ProviderResponseError,
    SubmissionError,
    UnsupportedAttachmentError,
)
from feedbackkit.schemas.configuration import (
    CustomAPIConfiguration,
    EmailConfiguration,
    WebhookConfiguration,
)
from feedbackkit.schemas.feedback import DataAttachment, FeedbackItem, ImageAttachment
from feedbackkit.services.providers import (
    CustomAPIProvider,
    EmailProvider,
    FeedbackProvider,
    NoOpProvider,
    SlackWebhookProvider,
    WebhookProvider,
)
import feedbackkit.services.providers.email as email_module
from tests.conftest import TEST_METADATA

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x02" * 8
ITEM = FeedbackItem(title="Login bug", description="Cannot log in", is_ai_generated=True)


def _recording_transport(response: httpx.Response):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return seen, httpx.MockTransport(handler)


class TestNoOpProvider:
    async def test_returns_synthesized_identifier(self):
        provider = NoOpProvider()

        first = await provider.submit(ITEM, TEST_METADATA)
        second = await provider.submit(ITEM, TEST_METADATA)

        assert isinstance(provider, FeedbackProvider)
        assert first.provider_name == "NoOp"
        assert first.identifier.startswith("NOOP-")
        assert len(first.identifier) == len("NOOP-") + 8
        assert first.identifier != second.identifier


class TestWebhookProvider:
    async def test_posts_json_and_uses_response_reference(self):
        seen, transport = _recording_transport(
            httpx.Response(200, json={"id": 77, "url": "https://hooks.test/feedback/77"})
        )
        provider = WebhookProvider(
            WebhookConfiguration(url="https://hooks.test/in", headers={"X-Feedback-Secret": "s3"}),
            transport=transport,
        )
        item = ITEM.model_copy(update={"attachments": (ImageAttachment(data=PNG_BYTES),)})

        result = await provider.submit(item, TEST_METADATA)

        assert result.identifier == "77"
        assert result.url == "https://hooks.test/feedback/77"
        assert result.provider_name == "Webhook"
        request = seen[0]
        assert request.headers["X-Feedback-Secret"] == "s3"
        body = json.loads(request.content)
        assert body["title"] == "Login bug"
        assert body["is_ai_generated"] is True
        assert body["metadata"]["app_version"] == "1.0.0"
        assert body["attachments"][0]["content_type"] == "image/png"
        assert body["attachments"][0]["size_bytes"] == len(PNG_BYTES)
        assert "content_base64" not in body["attachments"][0]

    async def test_includes_attachment_data_when_enabled(self):
        seen, transport = _recording_transport(httpx.Response(204))
        provider = WebhookProvider(
            WebhookConfiguration(url="https://hooks.test/in", include_attachment_data=True),
            transport=transport,
        )
        item = ITEM.model_copy(
            update={"attachments": (DataAttachment(data=b"hi", mime_type="text/plain", filename="a.txt"),)}
        )

        result = await provider.submit(item, TEST_METADATA)

        assert result.identifier.startswith("webhook-")
        assert result.url is None
        attachment = json.loads(seen[0].content)["attachments"][0]
        assert base64.b64decode(attachment["content_base64"]) == b"hi"

    async def test_non_success_status_raises(self):
        _, transport = _recording_transport(httpx.Response(502, text="bad gateway"))
        provider = WebhookProvider(WebhookConfiguration(url="https://hooks.test/in"), transport=transport)

        with pytest.raises(ProviderRequestError) as exc_info:
            await provider.submit(ITEM, TEST_METADATA)

        assert "bad gateway" in str(exc_info.value)

    async def test_unsupported_attachment_rejected(self):
        seen, transport = _recording_transport(httpx.Response(200))
        provider = WebhookProvider(WebhookConfiguration(url="https://hooks.test/in"), transport=transport)
        item = ITEM.model_copy(
            update={
                "attachments": (
                    DataAttachment(data=b"MZ", mime_type="application/x-msdownload", filename="a.exe"),
                )
            }
        )

        with pytest.raises(UnsupportedAttachmentError):
            await provider.submit(item, TEST_METADATA)

        assert seen == []

    async def test_configured_attachment_limit_applies(self):
        seen, transport = _recording_transport(httpx.Response(200))
        provider = WebhookProvider(
            WebhookConfiguration(url="https://hooks.test/in", max_attachment_bytes=8),
            transport=transport,
        )
        item = ITEM.model_copy(update={"attachments": (ImageAttachment(data=PNG_BYTES),)})

        with pytest.raises(AttachmentTooLargeError):
            await provider.submit(item, TEST_METADATA)

        assert seen == []

    async def test_trailing_slash_is_preserved(self):
        seen, transport = _recording_transport(httpx.Response(204))
        provider = WebhookProvider(
            WebhookConfiguration(url="https://hooks.test/in/"), transport=transport
        )

        await provider.submit(ITEM, TEST_METADATA)

        assert str(seen[0].url) == "https://hooks.test/in/"


class TestSlackWebhookProvider:
    async def test_posts_formatted_text(self):
        seen, transport = _recording_transport(httpx.Response(200, text="ok"))
        provider = SlackWebhookProvider(
            WebhookConfiguration(url="https://hooks.slack.test/services/T/B/X"),
            transport=transport,
        )

        result = await provider.submit(ITEM, TEST_METADATA)

        assert result.provider_name == "Slack"
        assert result.identifier.startswith("slack-")
        body = json.loads(seen[0].content)
        assert body["username"] == "FeedbackBot"
        assert body["icon_emoji"] == ":speech_balloon:"
        assert "*Title:* Login bug" in body["text"]
        assert "Device: Linux x86_64" in body["text"]
        assert body["text"].endswith("_Description enhanced by AI_")


class TestCustomAPIProvider:
    def _provider(self, transport):
        return CustomAPIProvider(
            CustomAPIConfiguration(base_url="https://api.example.test/", auth_token="tok"),
            transport=transport,
        )

    async def test_posts_with_bearer_token(self):
        seen, transport = _recording_transport(httpx.Response(201, json={"id": "fb_1"}))

        result = await self._provider(transport).submit(ITEM, TEST_METADATA)

        request = seen[0]
        assert request.url == "https://api.example.test/api/feedback"
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content)["metadata"]["device"] == "Linux x86_64"
        assert result.identifier == "fb_1"
        assert result.url == "https://api.example.test/feedback/fb_1"
        assert result.provider_name == "CustomAPI"

    async def test_response_url_wins(self):
        _, transport = _recording_transport(
            httpx.Response(201, json={"id": 9, "url": "https://app.example.test/f/9"})
        )

        result = await self._provider(transport).submit(ITEM, TEST_METADATA)

        assert result.identifier == "9"
        assert result.url == "https://app.example.test/f/9"

    async def test_missing_id_raises_response_error(self):
        _, transport = _recording_transport(httpx.Response(200, json={"status": "queued"}))

        with pytest.raises(ProviderResponseError):
            await self._provider(transport).submit(ITEM, TEST_METADATA)

    async def test_timeout_raises_network_error(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError):
            await self._provider(httpx.MockTransport(slow)).submit(ITEM, TEST_METADATA)


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_with: Exception | None = None
    starttls_error: Exception | None = None
    quit_error: Exception | None = None

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        self.quit_called = False
        FakeSMTP.instances.append(self)

    def starttls(self):
        if FakeSMTP.starttls_error is not None:
            raise FakeSMTP.starttls_error
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, message):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        self.sent.append(message)

    def quit(self):
        self.quit_called = True
        if FakeSMTP.quit_error is not None:
            raise FakeSMTP.quit_error


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    FakeSMTP.starttls_error = None
    FakeSMTP.quit_error = None
    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _email_config(**overrides):
    values = {
        "smtp_host": "smtp.example.test",
        "smtp_port": 2525,
        "smtp_username": "mailer",
        "smtp_password": "pw",
        "from_email": "feedback@example.test",
        "destination_email": "triage@example.test",
    }
    values.update(overrides)
    return EmailConfiguration(**values)


class TestEmailProvider:
    async def test_sends_message_with_attachments(self, fake_smtp):
        item = ITEM.model_copy(update={"attachments": (ImageAttachment(data=PNG_BYTES),)})

        result = await EmailProvider(_email_config()).submit(item, TEST_METADATA)

        server = fake_smtp.instances[0]
        assert (server.host, server.port) == ("smtp.example.test", 2525)
        assert server.started_tls is True
        assert server.logged_in == ("mailer", "pw")
        assert server.quit_called is True
        message = server.sent[0]
        assert message["Subject"] == "[Feedback] Login bug"
        assert message["To"] == "triage@example.test"
        assert result.identifier == message["Message-ID"].strip("<>")
        assert result.provider_name == "Email"
        attachments = list(message.iter_attachments())
        assert attachments[0].get_content_type() == "image/png"

    async def test_smtp_failure_raises_submission_error(self, fake_smtp):
        fake_smtp.fail_with = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(SubmissionError):
            await EmailProvider(_email_config(smtp_use_tls=False)).submit(ITEM, TEST_METADATA)

        assert fake_smtp.instances[0].started_tls is False
        assert fake_smtp.instances[0].quit_called is True

    async def test_unreachable_server_raises_network_error(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(email_module.smtplib, "SMTP", refuse)

        with pytest.raises(NetworkError):
            await EmailProvider(_email_config()).submit(ITEM, TEST_METADATA)

    async def test_quit_failure_does_not_hide_original_error(self, fake_smtp):
        fake_smtp.starttls_error = smtplib.SMTPNotSupportedError("STARTTLS extension not supported")
        fake_smtp.quit_error = smtplib.SMTPServerDisconnected("Connection unexpectedly closed")

        with pytest.raises(SubmissionError) as exc_info:
            await EmailProvider(_email_config()).submit(ITEM, TEST_METADATA)

        assert "STARTTLS extension not supported" in str(exc_info.value)
        assert fake_smtp.instances[0].quit_called is True

    async def test_configured_attachment_limit_applies(self, fake_smtp):
        item = ITEM.model_copy(update={"attachments": (ImageAttachment(data=PNG_BYTES),)})

        with pytest.raises(AttachmentTooLargeError):
            await EmailProvider(_email_config(max_attachment_bytes=8)).submit(item, TEST_METADATA)

        assert fake_smtp.instances == []
