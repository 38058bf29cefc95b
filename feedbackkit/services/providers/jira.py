"""Jira Cloud issue-tracker provider.

Submission is two-phase: the issue is created first, then each attachment
is uploaded against the new issue key. An upload failure fails the whole
submission with :class:`PartialSubmissionError`, which still names the issue
that was created.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from feedbackkit.errors import FeedbackError, PartialSubmissionError, ProviderResponseError
from feedbackkit.schemas.configuration import JiraConfiguration, JiraFieldValue
from feedbackkit.schemas.feedback import (
    NO_DESCRIPTION,
    FeedbackItem,
    FeedbackMetadata,
    FeedbackResult,
)
from feedbackkit.services.providers.base import HTTPProvider, environment_lines
from feedbackkit.utils.attachments import AttachmentPayload, validate_attachments

logger = logging.getLogger(__name__)

AI_NOTE = "_Description enhanced by AI_"


def format_issue_description(item: FeedbackItem, metadata: FeedbackMetadata) -> str:
    """Description text followed by the environment block and AI note."""
    description = item.description or NO_DESCRIPTION
    lines = [description, "", "---", "**Environment Information**"]
    lines.extend(environment_lines(metadata))
    if item.is_ai_generated:
        lines.extend(["", AI_NOTE])
    return "\n".join(lines)


def _field_value(value: JiraFieldValue) -> Any:
    if isinstance(value, list):
        return [{"value": entry} for entry in value]
    return value


class JiraProvider(HTTPProvider):
    name = "Jira"

    def __init__(
        self,
        configuration: JiraConfiguration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=configuration.timeout_seconds, transport=transport)
        self.configuration = configuration

    def build_issue_payload(self, summary: str, description: str) -> dict[str, Any]:
        config = self.configuration
        fields: dict[str, Any] = {
            "project": {"key": config.project_key},
            "summary": summary,
            "issuetype": {"name": config.issue_type},
            "description": {
                "type": "doc",
                "version": 1,
                "content": [
                    {
                        "type": "paragraph",
                        "content": [{"type": "text", "text": description}],
                    }
                ],
            },
        }
        for key, value in config.custom_fields.items():
            fields[key] = _field_value(value)
        return {"fields": fields}

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult:
        # Reject bad attachments before an issue exists upstream.
        attachments = validate_attachments(
            item.attachments, max_bytes=self.configuration.max_attachment_bytes
        )
        auth = (self.configuration.email, self.configuration.api_token)
        async with self._client(auth=auth) as client:
            issue_key = await self._create_issue(
                client, item.title, format_issue_description(item, metadata)
            )
            url = self.configuration.browse_url(issue_key)
            for attachment in attachments:
                try:
                    await self._upload_attachment(client, issue_key, attachment)
                except FeedbackError as exc:
                    logger.warning(
                        "Issue %s created but attachment %s failed: %s",
                        issue_key,
                        attachment.filename,
                        exc,
                    )
                    raise PartialSubmissionError(issue_key, url, str(exc)) from exc

        logger.info("Created Jira issue %s with %s attachments", issue_key, len(attachments))
        return FeedbackResult(identifier=issue_key, url=url, provider_name=self.name)

    async def _create_issue(self, client: httpx.AsyncClient, summary: str, description: str) -> str:
        response = await self._request(
            client,
            "POST",
            f"{self.configuration.base_url}/rest/api/3/issue",
            action="Create issue",
            json=self.build_issue_payload(summary, description),
        )
        payload = self._json_object(response, action="Create issue")
        issue_key = payload.get("key")
        if not isinstance(issue_key, str) or not issue_key:
            raise ProviderResponseError("Missing 'key' in Jira response")
        return issue_key

    async def _upload_attachment(
        self,
        client: httpx.AsyncClient,
        issue_key: str,
        attachment: AttachmentPayload,
    ) -> None:
        await self._request(
            client,
            "POST",
            f"{self.configuration.base_url}/rest/api/3/issue/{issue_key}/attachments",
            action=f"Attachment upload for {issue_key}",
            headers={"X-Atlassian-Token": "no-check"},
            files={"file": (attachment.filename, attachment.data, attachment.mime_type)},
        )
