"""Notification entry point for the orchestration host.

SlackNotifier validates the execution record, formats the message and
delivers it in a single attempt. It never raises: every failure becomes a
DeliveryResult tagged with its FailureKind.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from rundeck_slack.clients.http import _redact_url, http_client
from rundeck_slack.clients.slack import send_message
from rundeck_slack.config import NotifierConfig
from rundeck_slack.errors import (
    ConfigurationError,
    DeliveryRejectedError,
    EndpointNotFoundError,
    FailureKind,
    NotifyError,
    RecordError,
    TransportError,
)
from rundeck_slack.formatter import build_message, render_message
from rundeck_slack.models import ExecutionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one notification.

    Truthy when the message was delivered.

    Attributes:
        success: Whether the webhook accepted the message.
        trigger: Trigger the notification was sent for.
        kind: Failure kind, None on success.
        status_code: HTTP status returned by the webhook, if any.
        error: Human-readable failure description, None on success.
    """

    success: bool
    trigger: str
    kind: FailureKind | None = None
    status_code: int | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def delivered(cls, trigger: str, status_code: int) -> DeliveryResult:
        return cls(success=True, trigger=trigger, status_code=status_code)

    @classmethod
    def failed(cls, trigger: str, error: NotifyError) -> DeliveryResult:
        return cls(
            success=False,
            trigger=trigger,
            kind=error.kind,
            status_code=getattr(error, "status_code", None),
            error=str(error),
        )


class SlackNotifier:
    """Formats and delivers Slack notifications for job executions.

    Holds only the immutable configuration, so one instance can serve
    concurrent notifications.

    Example:
        notifier = SlackNotifier(NotifierConfig(webhook_url=url, environment_name="prod"))
        result = notifier.post_notification("failure", execution_data)
        if not result:
            alert(result.kind)
    """

    def __init__(self, config: NotifierConfig):
        self.config = config

    def format(self, trigger: str, execution_data: Mapping[str, Any] | ExecutionRecord) -> str:
        """Render the message JSON without sending it.

        Raises:
            RecordError: If the execution data fails validation.
        """
        record = _as_record(execution_data)
        return render_message(build_message(trigger, record, self.config))

    def post_notification(
        self,
        trigger: str,
        execution_data: Mapping[str, Any] | ExecutionRecord,
        *,
        client: httpx.Client | None = None,
    ) -> DeliveryResult:
        """Send the notification for one job-lifecycle event.

        Args:
            trigger: Job-lifecycle trigger ("start", "success", "failure", ...).
            execution_data: Raw execution data from the host, or a record.
            client: Optional HTTP client; owned by the caller when given,
                otherwise one is opened and closed for this call.

        Returns:
            DeliveryResult describing the outcome. Never raises.
        """
        trigger = str(getattr(trigger, "value", trigger))
        job_name = _job_name(execution_data)
        url = self.config.webhook_url
        log_url = _redact_url(url)

        logger.debug(
            f"Sending Slack notification to {log_url} for job {job_name} with trigger {trigger}"
        )

        payload: str | None = None
        try:
            record = _as_record(execution_data)
            payload = render_message(build_message(trigger, record, self.config))

            scoped = (
                contextlib.nullcontext(client)
                if client is not None
                else http_client(timeout=self.config.timeout)
            )
            with scoped as http:
                response = send_message(http, url, payload, timeout=self.config.timeout)
        except RecordError as e:
            logger.error(f"Invalid execution record for {job_name} job with trigger {trigger}")
            for err in e.errors:
                logger.error(f"  - {err}")
            return DeliveryResult.failed(trigger, e)
        except ConfigurationError as e:
            logger.error(
                f"Malformed Slack webhook URL {log_url} when sending {job_name} "
                f"job notification with trigger {trigger}: {e}"
            )
            return DeliveryResult.failed(trigger, e)
        except EndpointNotFoundError as e:
            logger.error(
                f"Invalid Slack webhook URL {log_url} when sending {job_name} "
                f"job notification with trigger {trigger}"
            )
            return DeliveryResult.failed(trigger, e)
        except DeliveryRejectedError as e:
            logger.error(
                f"Error sending {job_name} job notification with trigger {trigger}, "
                f"http code: {e.status_code}"
            )
            logger.debug(
                f"Error sending {job_name} job notification with trigger {trigger}, "
                f"http code: {e.status_code}, payload: {payload}"
            )
            return DeliveryResult.failed(trigger, e)
        except TransportError as e:
            logger.error(f"Error sending {job_name} job notification with trigger {trigger}: {e}")
            logger.debug("Transport failure details", exc_info=True)
            return DeliveryResult.failed(trigger, e)
        except Exception as e:
            logger.exception(f"Unexpected error sending {job_name} job notification: {e}")
            return DeliveryResult(
                success=False,
                trigger=trigger,
                kind=FailureKind.INTERNAL_ERROR,
                error=str(e),
            )

        logger.info(f"Slack notification sent for job {job_name} with trigger {trigger}")
        return DeliveryResult.delivered(trigger, response.status_code)


def _as_record(execution_data: Mapping[str, Any] | ExecutionRecord) -> ExecutionRecord:
    if isinstance(execution_data, ExecutionRecord):
        return execution_data
    if not isinstance(execution_data, Mapping):
        raise RecordError(
            f"Execution data must be a mapping, got {type(execution_data).__name__}"
        )
    return ExecutionRecord.from_execution_data(execution_data)


def _job_name(execution_data: Any) -> str | None:
    """Best-effort job name for log lines, before validation."""
    if isinstance(execution_data, ExecutionRecord):
        return execution_data.job.name if execution_data.job else None
    if isinstance(execution_data, Mapping):
        job = execution_data.get("job")
        if isinstance(job, Mapping):
            return job.get("name")
    return None
