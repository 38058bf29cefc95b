"""Explicit configuration objects handed to leaf capabilities.

These never read the environment themselves; see ``feedbackkit.config`` for
the loaders that build them from environment variables.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant that improves bug report descriptions. "
    "Make them clear, concise, and professional while preserving all technical details. "
    "Keep the improved description focused and under 500 characters unless more detail is necessary."
)
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

# string -> "value", list -> [{"value": item}, ...], mapping -> passed through
JiraFieldValue = Union[str, list[str], dict[str, str]]


DEFAULT_MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024


def _require_http_scheme(value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return value


def _strip_trailing_slash(value: str) -> str:
    return _require_http_scheme(value).rstrip("/")


class JiraConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str
    email: str
    api_token: str
    project_key: str
    issue_type: str = "Bug"
    custom_fields: dict[str, JiraFieldValue] = Field(default_factory=dict)
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES
    timeout_seconds: float = 10.0

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        return _strip_trailing_slash(v)

    def browse_url(self, issue_key: str) -> str:
        return f"{self.base_url}/browse/{issue_key}"


class AIConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: Literal["openai", "anthropic"]
    api_key: str
    model: str
    max_tokens: int = Field(default=500, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    timeout_seconds: float = 30.0

    @classmethod
    def openai(cls, api_key: str, **overrides) -> "AIConfiguration":
        overrides.setdefault("model", OPENAI_DEFAULT_MODEL)
        return cls(provider="openai", api_key=api_key, **overrides)

    @classmethod
    def anthropic(cls, api_key: str, **overrides) -> "AIConfiguration":
        overrides.setdefault("model", ANTHROPIC_DEFAULT_MODEL)
        return cls(provider="anthropic", api_key=api_key, **overrides)


class WebhookConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    include_attachment_data: bool = False
    timeout_seconds: float = 10.0
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _require_http_scheme(v)


class CustomAPIConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str
    auth_token: str
    timeout_seconds: float = 10.0
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        return _strip_trailing_slash(v)


class EmailConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    smtp_host: str
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    from_email: str
    destination_email: str
    timeout_seconds: float = 10.0
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES
