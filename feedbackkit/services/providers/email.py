"""SMTP e-mail provider."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from feedbackkit.errors import NetworkError, SubmissionError
from feedbackkit.schemas.configuration import EmailConfiguration
from feedbackkit.schemas.feedback import FeedbackItem, FeedbackMetadata, FeedbackResult
from feedbackkit.services.providers.base import environment_lines
from feedbackkit.utils.attachments import validate_attachments

logger = logging.getLogger(__name__)


class EmailProvider:
    name = "Email"

    def __init__(self, configuration: EmailConfiguration):
        self.configuration = configuration

    def build_message(self, item: FeedbackItem, metadata: FeedbackMetadata) -> EmailMessage:
        config = self.configuration
        msg = EmailMessage()
        msg["From"] = config.from_email
        msg["To"] = config.destination_email
        msg["Subject"] = f"[Feedback] {item.title or 'No title'}"
        msg["Message-ID"] = make_msgid(domain=config.from_email.rpartition("@")[2] or None)
        lines = [item.description, "", "---", *environment_lines(metadata)]
        if item.is_ai_generated:
            lines.extend(["", "Description enhanced by AI"])
        msg.set_content("\n".join(lines))
        for payload in validate_attachments(
            item.attachments, max_bytes=config.max_attachment_bytes
        ):
            maintype, subtype = payload.mime_type.split("/", 1)
            msg.add_attachment(
                payload.data,
                maintype=maintype,
                subtype=subtype,
                filename=payload.filename,
            )
        return msg

    async def submit(self, item: FeedbackItem, metadata: FeedbackMetadata) -> FeedbackResult:
        config = self.configuration
        message = self.build_message(item, metadata)

        def _send() -> None:
            server = smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout_seconds)
            try:
                if config.smtp_use_tls:
                    server.starttls()
                if config.smtp_username and config.smtp_password:
                    server.login(config.smtp_username, config.smtp_password)
                server.send_message(message)
            finally:
                try:
                    server.quit()
                except smtplib.SMTPException as exc:
                    logger.debug("SMTP quit failed: %s", exc)

        try:
            await asyncio.to_thread(_send)
        except smtplib.SMTPException as exc:
            logger.warning("Feedback email failed: %s", exc)
            raise SubmissionError(f"SMTP delivery failed: {exc}") from exc
        except OSError as exc:
            logger.warning("Feedback email failed: %s", exc)
            raise NetworkError(f"Could not reach {config.smtp_host}:{config.smtp_port}: {exc}") from exc

        message_id = message["Message-ID"].strip("<>")
        logger.info("Feedback '%s' e-mailed to %s", item.title, config.destination_email)
        return FeedbackResult(identifier=message_id, url=None, provider_name=self.name)
