"""Pytest fixtures for rundeck-slack-notify tests."""

from __future__ import annotations

from typing import Any

import pytest

from rundeck_slack.config import NotifierConfig
from rundeck_slack.models import ExecutionRecord

SERVER_URL = "https://rundeck.example.com/"
WEBHOOK_URL = "https://hooks.slack.com/services/T00/B00/secret123"

# 2024-01-15 15:00:00 UTC, and one hour, one minute, one second later
STARTED_MS = 1705330800000
ENDED_MS = STARTED_MS + 3_661_000


@pytest.fixture
def execution_data() -> dict[str, Any]:
    """Raw execution data for a failed run, as the host sends it."""
    return {
        "id": 42,
        "href": "https://rundeck.example.com/project/Ops/execution/show/42",
        "status": "failed",
        "project": "Ops",
        "user": "alice",
        "dateStartedUnixtime": STARTED_MS,
        "dateEndedUnixtime": ENDED_MS,
        "job": {
            "id": "abc",
            "name": "backup",
            "group": "db/nightly",
            "href": "https://rundeck.example.com/project/Ops/job/show/abc",
            "project": "Ops",
        },
        "context": {
            "job": {"serverUrl": SERVER_URL},
            "option": {"target": "db1", "password": "hunter2"},
            "secureOption": {"password": "hunter2"},
        },
        "nodestatus": {"total": 2, "succeeded": 1, "failed": 1},
        "succeededNodeList": ["web1"],
        "failedNodeList": ["db1"],
    }


@pytest.fixture
def record(execution_data: dict[str, Any]) -> ExecutionRecord:
    """Validated record for the failed run."""
    return ExecutionRecord.from_execution_data(execution_data)


@pytest.fixture
def config() -> NotifierConfig:
    """Config with a Slack webhook, an environment label and UTC timestamps."""
    return NotifierConfig(
        webhook_url=WEBHOOK_URL,
        environment_name="prod",
        timezone="UTC",
    )
