"""Capability bundle injected into every feedback flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from feedbackkit.config import (
    Settings,
    load_ai_configuration,
    load_custom_api_configuration,
    load_email_configuration,
    load_jira_configuration,
    load_slack_configuration,
    load_webhook_configuration,
)
from feedbackkit.errors import ConfigurationError
from feedbackkit.services.clipboard import Clipboard, MemoryClipboard
from feedbackkit.services.enhancers import (
    AnthropicEnhancer,
    DescriptionEnhancer,
    NoOpEnhancer,
    OpenAIEnhancer,
)
from feedbackkit.services.metadata import DefaultMetadataCollector, MetadataCollector
from feedbackkit.services.providers import (
    CustomAPIProvider,
    EmailProvider,
    FeedbackProvider,
    JiraProvider,
    NoOpProvider,
    SlackWebhookProvider,
    WebhookProvider,
)
from feedbackkit.services.screenshot import NullScreenshotCapture, ScreenshotCapture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackDependencies:
    """Leaf capabilities a flow talks to. Shared read-only across flows."""

    provider: FeedbackProvider = field(default_factory=NoOpProvider)
    enhancer: DescriptionEnhancer = field(default_factory=NoOpEnhancer)
    metadata_collector: MetadataCollector = field(default_factory=DefaultMetadataCollector)
    screenshot_capture: ScreenshotCapture = field(default_factory=NullScreenshotCapture)
    clipboard: Clipboard = field(default_factory=MemoryClipboard)

    def with_overrides(self, **changes) -> "FeedbackDependencies":
        return replace(self, **changes)


def build_provider(settings: Settings) -> FeedbackProvider:
    """Instantiate the provider selected by ``FEEDBACK_PROVIDER``."""
    kind = settings.feedback_provider
    limits = {
        "timeout_seconds": settings.http_timeout_seconds,
        "max_attachment_bytes": settings.max_attachment_bytes,
    }
    if kind == "noop":
        return NoOpProvider()
    if kind == "jira":
        return JiraProvider(load_jira_configuration(**limits))
    if kind == "webhook":
        return WebhookProvider(load_webhook_configuration(**limits))
    if kind == "slack":
        return SlackWebhookProvider(load_slack_configuration(**limits))
    if kind == "api":
        return CustomAPIProvider(load_custom_api_configuration(**limits))
    if kind == "email":
        return EmailProvider(load_email_configuration(**limits))
    raise ConfigurationError(f"Unknown feedback provider '{kind}'")


def build_enhancer(settings: Settings) -> DescriptionEnhancer:
    if settings.ai_provider == "none":
        return NoOpEnhancer()
    configuration = load_ai_configuration(settings.ai_provider)
    if configuration.provider == "openai":
        return OpenAIEnhancer(configuration)
    return AnthropicEnhancer(configuration)


def build_dependencies(settings: Settings) -> FeedbackDependencies:
    """Resolve every capability from settings; fails fast on missing config."""
    provider = build_provider(settings)
    enhancer = build_enhancer(settings)
    collector = DefaultMetadataCollector(
        distribution=settings.app_distribution,
        app_version=settings.app_version,
        app_build=settings.app_build,
        custom_fields={"environment": settings.environment},
    )
    logger.info(
        "Feedback dependencies ready (provider=%s, enhancer=%s)",
        provider.name,
        type(enhancer).__name__,
    )
    return FeedbackDependencies(
        provider=provider,
        enhancer=enhancer,
        metadata_collector=collector,
    )
