"""Configuration management.

Everything that reads the process environment lives here. Leaf capabilities
only ever receive the explicit configuration objects built by the loaders
below.
"""

import os
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from feedbackkit.errors import ConfigurationError, MissingSettingError
from feedbackkit.schemas.configuration import (
    DEFAULT_MAX_ATTACHMENT_BYTES,
    AIConfiguration,
    CustomAPIConfiguration,
    EmailConfiguration,
    JiraConfiguration,
    WebhookConfiguration,
)

ProviderKind = Literal["noop", "jira", "webhook", "slack", "api", "email"]
EnhancerKind = Literal["none", "openai", "anthropic"]

# Every settings class reads the same dotenv files as the core settings.
ENV_FILES = (".env.test", ".env")


class Settings(BaseSettings):
    """Core settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Backends
    feedback_provider: ProviderKind = "noop"
    ai_provider: EnhancerKind = "none"

    # Flow behaviour
    copied_confirmation_seconds: float = 2.0
    http_timeout_seconds: float = 10.0
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES

    # Metadata
    app_distribution: str | None = None
    app_version: str | None = None
    app_build: str | None = None

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "./logs"

    model_config = SettingsConfigDict(env_file=ENV_FILES, case_sensitive=False, extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        env_var = os.getenv("ENVIRONMENT", "").lower() == "testing"
        pytest_flag = bool(os.getenv("PYTEST_CURRENT_TEST"))
        return self.environment == "testing" or env_var or pytest_flag

    @field_validator("ai_provider", mode="before")
    @classmethod
    def normalize_ai_provider(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "none"
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("copied_confirmation_seconds", "http_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Durations must not be negative")
        return v


class JiraSettings(BaseSettings):
    base_url: str | None = None
    email: str | None = None
    api_token: str | None = None
    project_key: str | None = None
    issue_type: str = "Bug"

    model_config = SettingsConfigDict(
        env_prefix="JIRA_", env_file=ENV_FILES, case_sensitive=False, extra="ignore"
    )


class AISettings(BaseSettings):
    ai_provider: str | None = None
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    ai_model: str | None = None
    ai_max_tokens: int = 500
    ai_temperature: float = 0.7

    model_config = SettingsConfigDict(env_file=ENV_FILES, case_sensitive=False, extra="ignore")


class WebhookSettings(BaseSettings):
    url: str | None = None
    secret: str | None = None
    include_attachments: bool = False

    model_config = SettingsConfigDict(
        env_prefix="FEEDBACK_WEBHOOK_", env_file=ENV_FILES, case_sensitive=False, extra="ignore"
    )


class SlackSettings(BaseSettings):
    webhook_url: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="SLACK_", env_file=ENV_FILES, case_sensitive=False, extra="ignore"
    )


class CustomAPISettings(BaseSettings):
    base_url: str | None = None
    auth_token: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="FEEDBACK_API_", env_file=ENV_FILES, case_sensitive=False, extra="ignore"
    )


class SmtpSettings(BaseSettings):
    host: str | None = None
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    from_email: str | None = None
    feedback_destination_email: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="SMTP_", env_file=ENV_FILES, case_sensitive=False, extra="ignore"
    )


def _require(value: str | None, variable: str) -> str:
    if value is None or not value.strip():
        raise MissingSettingError(variable)
    return value.strip()


def _build(factory, **kwargs):
    try:
        return factory(**kwargs)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_jira_configuration(
    timeout_seconds: float = 10.0,
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
) -> JiraConfiguration:
    """Load Jira configuration from JIRA_* environment variables."""
    env = JiraSettings()
    return _build(
        JiraConfiguration,
        base_url=_require(env.base_url, "JIRA_BASE_URL"),
        email=_require(env.email, "JIRA_EMAIL"),
        api_token=_require(env.api_token, "JIRA_API_TOKEN"),
        project_key=_require(env.project_key, "JIRA_PROJECT_KEY"),
        issue_type=env.issue_type or "Bug",
        timeout_seconds=timeout_seconds,
        max_attachment_bytes=max_attachment_bytes,
    )


def load_ai_configuration(provider: str | None = None) -> AIConfiguration:
    """Load AI enhancer configuration for ``provider`` and its API key.

    ``AI_PROVIDER`` is only consulted when no provider is given.
    """
    env = AISettings()
    provider = (provider or _require(env.ai_provider, "AI_PROVIDER")).strip().lower()
    overrides = {"max_tokens": env.ai_max_tokens, "temperature": env.ai_temperature}
    if env.ai_model:
        overrides["model"] = env.ai_model
    if provider == "openai":
        return _build(AIConfiguration.openai, api_key=_require(env.openai_api_key, "OPENAI_API_KEY"), **overrides)
    if provider == "anthropic":
        return _build(
            AIConfiguration.anthropic,
            api_key=_require(env.anthropic_api_key, "ANTHROPIC_API_KEY"),
            **overrides,
        )
    raise ConfigurationError(f"AI_PROVIDER must be 'openai' or 'anthropic', got '{provider}'")


def load_webhook_configuration(
    timeout_seconds: float = 10.0,
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
) -> WebhookConfiguration:
    env = WebhookSettings()
    headers = {"X-Feedback-Secret": env.secret} if env.secret else {}
    return _build(
        WebhookConfiguration,
        url=_require(env.url, "FEEDBACK_WEBHOOK_URL"),
        headers=headers,
        include_attachment_data=env.include_attachments,
        timeout_seconds=timeout_seconds,
        max_attachment_bytes=max_attachment_bytes,
    )


def load_slack_configuration(
    timeout_seconds: float = 10.0,
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
) -> WebhookConfiguration:
    env = SlackSettings()
    return _build(
        WebhookConfiguration,
        url=_require(env.webhook_url, "SLACK_WEBHOOK_URL"),
        timeout_seconds=timeout_seconds,
        max_attachment_bytes=max_attachment_bytes,
    )


def load_custom_api_configuration(
    timeout_seconds: float = 10.0,
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
) -> CustomAPIConfiguration:
    env = CustomAPISettings()
    return _build(
        CustomAPIConfiguration,
        base_url=_require(env.base_url, "FEEDBACK_API_BASE_URL"),
        auth_token=_require(env.auth_token, "FEEDBACK_API_AUTH_TOKEN"),
        timeout_seconds=timeout_seconds,
        max_attachment_bytes=max_attachment_bytes,
    )


def load_email_configuration(
    timeout_seconds: float = 10.0,
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
) -> EmailConfiguration:
    env = SmtpSettings()
    return _build(
        EmailConfiguration,
        smtp_host=_require(env.host, "SMTP_HOST"),
        smtp_port=env.port,
        smtp_username=env.username,
        smtp_password=env.password,
        smtp_use_tls=env.use_tls,
        from_email=_require(env.from_email, "SMTP_FROM_EMAIL"),
        destination_email=_require(env.feedback_destination_email, "SMTP_FEEDBACK_DESTINATION_EMAIL"),
        timeout_seconds=timeout_seconds,
        max_attachment_bytes=max_attachment_bytes,
    )


# Global settings instance
settings = Settings()
if os.getenv("PYTEST_CURRENT_TEST"):
    settings.environment = "testing"
if settings.is_testing:
    settings.environment = "testing"
