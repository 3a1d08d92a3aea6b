"""Execution record to Slack message formatter.

Builds the incoming-webhook document for one job-lifecycle event:
- Title: breadcrumb links to the execution, project, job groups and job
- Text: who launched the run, when it ended, a log link for failed runs
- Fields: job options, with secure option values redacted
- Node attachments: failed and succeeded node lists

The document is built as plain dicts and serialised with json, so every
interpolated string is escaped. All functions are pure.
"""

from __future__ import annotations

import json
from datetime import tzinfo
from typing import Any

from rundeck_slack.config import NotifierConfig
from rundeck_slack.duration import format_duration, format_timestamp
from rundeck_slack.models import (
    STATUS_RUNNING,
    STATUS_SUCCESS,
    STATUS_TIMEDOUT,
    ExecutionRecord,
    Trigger,
)

COLOR_GOOD = "good"
COLOR_DANGER = "danger"
REDACTED_VALUE = "***********"

FAILED_NODES_LABEL = "Failed nodes:"
FAILED_NODES_FALLBACK = "Failed nodes list"
SUCCEEDED_NODES_LABEL = "Succeeded nodes:"
SUCCEEDED_NODES_FALLBACK = "Succeeded nodes list"

_GOOD_TRIGGERS = frozenset({Trigger.SUCCESS.value, Trigger.START.value})


def status_color(trigger: str) -> str:
    """Success and start are good (green), everything else is danger (red)."""
    return COLOR_GOOD if getattr(trigger, "value", trigger) in _GOOD_TRIGGERS else COLOR_DANGER


def build_title(record: ExecutionRecord) -> str:
    """Build the breadcrumb title line.

    Example (group "ops/nightly"):
        <exec-href|#42 - FAILED - backup> - <srv/project/P/jobs|P> -
        <srv/project/P/jobs/ops|ops>/<srv/project/P/jobs/ops/nightly|nightly>/<job-href|backup>

    Returns an empty string when the record has no job or no server context.
    """
    job = record.job
    if job is None or record.context is None or record.context.job is None:
        return ""

    server_url = _text(record.server_url)
    project = _text(record.project)
    jobs_url = f"{server_url}project/{project}/jobs"

    status = _text(record.status).upper()
    if record.aborted_by is not None:
        status += f" by {record.aborted_by}"

    parts = [
        f"<{_text(record.href)}|#{_text(record.id)} - {status} - {_text(job.name)}>",
        f" - <{jobs_url}|{project}> - ",
    ]

    group_path = ""
    for segment in job.group_path:
        group_path += f"/{segment}"
        parts.append(f"<{jobs_url}{group_path}|{segment}>/")

    parts.append(f"<{_text(job.href)}|{_text(job.name)}>")
    return "".join(parts)


def build_duration_text(record: ExecutionRecord, tz: tzinfo | None = None) -> str:
    """Describe who launched the run, when, and how long it took.

    Returns an empty string when the start time is unknown.
    """
    if record.date_started is None:
        return ""

    text = f"Launched by {_text(record.user)} at {format_timestamp(record.date_started, tz)}"

    # Status and aborting user are appended without a separator
    if record.aborted_by is not None:
        text += f"{record.status} by {record.aborted_by}"

    if record.status != STATUS_RUNNING:
        text += ", timed-out" if record.status == STATUS_TIMEDOUT else ", ended"

        if record.date_ended is not None:
            duration = format_duration(record.date_ended - record.date_started)
            text += f" at {format_timestamp(record.date_ended, tz)} (duration: {duration})"

    return text


def build_download_text(record: ExecutionRecord) -> str:
    """Log output link for unfinished or failed runs, plus the options label."""
    if record.context is None:
        return ""

    text = ""
    download = False
    if record.status not in (STATUS_RUNNING, STATUS_SUCCESS) and record.server_url is not None:
        log_url = (
            f"{record.server_url}project/{_text(record.project)}/execution/renderOutput/"
            f"{_text(record.id)}?ansicolor=on&loglevels=on"
        )
        text += f"\n<{log_url}|View log ouput>"
        download = True

    if record.options:
        text += ", job options:" if download else "\nJob options:"

    return text


def build_option_fields(record: ExecutionRecord) -> list[dict[str, Any]]:
    """One short field per job option; secure option values are never shown."""
    secure = record.secure_options
    return [
        {
            "title": name,
            "value": REDACTED_VALUE if name in secure else value,
            "short": True,
        }
        for name, value in record.options.items()
    ]


def build_node_attachment(
    nodes: list[str],
    *,
    label: str,
    fallback: str,
    color: str,
    total_nodes: int,
    environment_name: str | None = None,
) -> dict[str, Any] | None:
    """Build a node-list attachment.

    Args:
        nodes: Node names, in the order they are listed.
        label: Attachment text, e.g. "Failed nodes:".
        fallback: Plain-text fallback for clients without attachments.
        color: Attachment color, the same as the summary attachment.
        total_nodes: Total node count of the execution.
        environment_name: Label shown in parentheses after each node.

    Returns:
        The attachment, or None when there are no nodes to list.
    """
    if not nodes or total_nodes <= 0:
        return None

    return {
        "fallback": fallback,
        "text": label,
        "color": color,
        "fields": [
            {"title": _node_title(node, environment_name), "short": True} for node in nodes
        ],
    }


def build_message(
    trigger: str,
    record: ExecutionRecord,
    config: NotifierConfig,
) -> dict[str, Any]:
    """Assemble the complete webhook document.

    Args:
        trigger: Job-lifecycle trigger ("start", "success", "failure", ...).
        record: Validated execution record.
        config: Overrides, environment label and timezone to apply.

    Returns:
        The message document, ready for render_message().
    """
    color = status_color(trigger)

    summary: dict[str, Any] = {
        "title": build_title(record),
        "text": build_duration_text(record, config.tz) + build_download_text(record),
        "color": color,
    }
    option_fields = build_option_fields(record)
    if option_fields:
        summary["fields"] = option_fields

    attachments = [summary]
    total_nodes = record.nodestatus.total
    for nodes, label, fallback in (
        (record.failed_nodes, FAILED_NODES_LABEL, FAILED_NODES_FALLBACK),
        (record.succeeded_nodes, SUCCEEDED_NODES_LABEL, SUCCEEDED_NODES_FALLBACK),
    ):
        attachment = build_node_attachment(
            nodes,
            label=label,
            fallback=fallback,
            color=color,
            total_nodes=total_nodes,
            environment_name=config.environment_name,
        )
        if attachment is not None:
            attachments.append(attachment)

    document: dict[str, Any] = dict(config.overrides())
    document["attachments"] = attachments
    return document


def render_message(document: dict[str, Any]) -> str:
    """Serialise a document to compact JSON text (non-ASCII kept as UTF-8)."""
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def _node_title(node: str, environment_name: str | None) -> str:
    if environment_name:
        return f"{node}({environment_name})"
    return node


def _text(value: str | None) -> str:
    return "" if value is None else value
