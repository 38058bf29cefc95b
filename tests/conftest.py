"""Shared fakes for flow and route tests."""

import asyncio

import pytest

from feedbackkit.errors import ProviderRequestError
from feedbackkit.schemas.feedback import FeedbackMetadata, FeedbackResult
from feedbackkit.services.clipboard import MemoryClipboard
from feedbackkit.services.dependencies import FeedbackDependencies
from feedbackkit.services.metadata import StaticMetadataCollector

TEST_METADATA = FeedbackMetadata(
    app_version="1.0.0",
    app_build="123",
    device_model="Linux x86_64",
    os_version="Linux-6.1",
    locale="en_US",
    custom_fields={"environment": "testing"},
)


class RecordingProvider:
    """Provider stub returning a fixed result (or raising) and recording calls."""

    name = "Recording"

    def __init__(self, result=None, error=None):
        self.result = result or FeedbackResult(identifier="REC-1", url=None, provider_name=self.name)
        self.error = error
        self.calls = []

    async def submit(self, item, metadata):
        self.calls.append((item, metadata))
        if self.error is not None:
            raise self.error
        return self.result


class BlockingProvider(RecordingProvider):
    """Waits until released so tests can observe the in-flight state."""

    def __init__(self, result=None):
        super().__init__(result=result)
        self.release = asyncio.Event()

    async def submit(self, item, metadata):
        self.calls.append((item, metadata))
        await self.release.wait()
        return self.result


class ScriptedEnhancer:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def enhance(self, description):
        self.calls.append(description)
        if self.error is not None:
            raise self.error
        return self.text if self.text is not None else description


class BlockingEnhancer(ScriptedEnhancer):
    def __init__(self, text):
        super().__init__(text=text)
        self.release = asyncio.Event()

    async def enhance(self, description):
        self.calls.append(description)
        await self.release.wait()
        return self.text


class StubScreenshotCapture:
    def __init__(self, image=None, error=None):
        self.image = image
        self.error = error

    async def capture(self):
        if self.error is not None:
            raise self.error
        return self.image


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def make_dependencies(clipboard):
    def _make(**overrides):
        base = FeedbackDependencies(
            provider=RecordingProvider(),
            metadata_collector=StaticMetadataCollector(TEST_METADATA),
            clipboard=clipboard,
        )
        return base.with_overrides(**overrides)

    return _make


@pytest.fixture
def failing_provider():
    return RecordingProvider(error=ProviderRequestError("Create issue failed (HTTP 500): boom"))
