from .base import FeedbackProvider, HTTPProvider
from .custom_api import CustomAPIProvider
from .email import EmailProvider
from .jira import JiraProvider, format_issue_description
from .noop import NoOpProvider
from .webhook import SlackWebhookProvider, WebhookProvider

__all__ = [
    "CustomAPIProvider",
    "EmailProvider",
    "FeedbackProvider",
    "HTTPProvider",
    "JiraProvider",
    "NoOpProvider",
    "SlackWebhookProvider",
    "WebhookProvider",
    "format_issue_description",
]
