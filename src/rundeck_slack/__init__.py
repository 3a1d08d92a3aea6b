"""rundeck-slack-notify: Slack notifications for job executions."""

__version__ = "0.1.0"

from rundeck_slack.config import NotifierConfig
from rundeck_slack.duration import format_duration, format_timestamp
from rundeck_slack.errors import (
    ConfigurationError,
    DeliveryRejectedError,
    EndpointNotFoundError,
    FailureKind,
    NotifyError,
    RecordError,
    TransportError,
)
from rundeck_slack.formatter import build_message, render_message, status_color
from rundeck_slack.models import ExecutionRecord, Trigger
from rundeck_slack.notifier import DeliveryResult, SlackNotifier

__all__ = [
    # Core
    "DeliveryResult",
    "ExecutionRecord",
    "NotifierConfig",
    "SlackNotifier",
    "Trigger",
    # Formatting
    "build_message",
    "format_duration",
    "format_timestamp",
    "render_message",
    "status_color",
    # Errors
    "ConfigurationError",
    "DeliveryRejectedError",
    "EndpointNotFoundError",
    "FailureKind",
    "NotifyError",
    "RecordError",
    "TransportError",
]
