"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from rundeck_slack import __version__
from rundeck_slack.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_DELIVERY_ERROR,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    app,
)
from rundeck_slack.errors import FailureKind
from rundeck_slack.notifier import DeliveryResult

runner = CliRunner()

WEBHOOK_URL = "https://hooks.slack.com/services/T00/B00/secret123"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "RUNDECK_SLACK_WEBHOOK_URL",
        "RUNDECK_SLACK_CHANNEL",
        "RUNDECK_SLACK_USERNAME",
        "RUNDECK_SLACK_ICON_EMOJI",
        "RUNDECK_SLACK_ENVIRONMENT",
        "RUNDECK_SLACK_TIMEOUT",
        "RUNDECK_SLACK_TIMEZONE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def input_file(tmp_path: Path, execution_data: dict[str, Any]) -> Path:
    path = tmp_path / "execution.json"
    path.write_text(json.dumps(execution_data))
    return path


class TestRender:
    """Tests for the render command."""

    def test_writes_document(self, tmp_path: Path, input_file: Path) -> None:
        output = tmp_path / "out" / "message.json"

        result = runner.invoke(
            app,
            [
                "render",
                "failure",
                "-i",
                str(input_file),
                "-e",
                "prod",
                "--timezone",
                "UTC",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == EXIT_SUCCESS
        document = json.loads(output.read_text())
        summary, failed, succeeded = document["attachments"]
        assert summary["color"] == "danger"
        assert "1/15/24 3:00 PM" in summary["text"]
        assert failed["fields"] == [{"title": "db1(prod)", "short": True}]
        assert succeeded["fields"] == [{"title": "web1(prod)", "short": True}]
        assert "channel" not in document

    def test_prints_to_stdout(self, input_file: Path) -> None:
        result = runner.invoke(app, ["render", "success", "--input", str(input_file)])

        assert result.exit_code == EXIT_SUCCESS
        assert '"attachments"' in result.output

    def test_inline_json(self) -> None:
        result = runner.invoke(app, ["render", "start", "-i", '{"status": "running"}'])
        assert result.exit_code == EXIT_SUCCESS

    def test_config_file_overrides(self, tmp_path: Path, input_file: Path) -> None:
        config_path = tmp_path / "slack.yaml"
        config_path.write_text(f"webhook_url: {WEBHOOK_URL}\nchannel: '#ops'\n")
        output = tmp_path / "message.json"

        result = runner.invoke(
            app,
            ["render", "success", "-i", str(input_file), "-c", str(config_path), "-o", str(output)],
        )

        assert result.exit_code == EXIT_SUCCESS
        assert json.loads(output.read_text())["channel"] == "#ops"

    def test_invalid_record(self) -> None:
        result = runner.invoke(
            app,
            ["render", "failure", "-i", '{"dateStartedUnixtime": 2, "dateEndedUnixtime": 1}'],
        )
        assert result.exit_code == EXIT_VALIDATION_ERROR

    def test_not_an_object(self) -> None:
        result = runner.invoke(app, ["render", "failure", "-i", "[1, 2]"])
        assert result.exit_code == EXIT_VALIDATION_ERROR

    def test_missing_input_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["render", "failure", "-i", str(tmp_path / "nope.json")])
        assert result.exit_code == EXIT_VALIDATION_ERROR

    def test_unknown_timezone(self, input_file: Path) -> None:
        result = runner.invoke(
            app, ["render", "failure", "-i", str(input_file), "--timezone", "Nowhere/Land"]
        )
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestSend:
    """Tests for the send command."""

    @patch("rundeck_slack.cli.SlackNotifier")
    def test_success(self, mock_notifier_cls, input_file: Path) -> None:
        mock_notifier = mock_notifier_cls.return_value
        mock_notifier.post_notification.return_value = DeliveryResult.delivered("failure", 200)

        result = runner.invoke(
            app,
            ["send", "failure", "-i", str(input_file), "-u", WEBHOOK_URL, "--channel", "#ops"],
        )

        assert result.exit_code == EXIT_SUCCESS
        config = mock_notifier_cls.call_args.args[0]
        assert config.webhook_url == WEBHOOK_URL
        assert config.channel == "#ops"
        trigger, data = mock_notifier.post_notification.call_args.args
        assert trigger == "failure"
        assert data["id"] == 42

    @patch("rundeck_slack.cli.SlackNotifier")
    def test_webhook_from_env(
        self, mock_notifier_cls, input_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RUNDECK_SLACK_WEBHOOK_URL", WEBHOOK_URL)
        monkeypatch.setenv("RUNDECK_SLACK_TIMEOUT", "7")
        mock_notifier_cls.return_value.post_notification.return_value = (
            DeliveryResult.delivered("success", 200)
        )

        result = runner.invoke(app, ["send", "success", "-i", str(input_file)])

        assert result.exit_code == EXIT_SUCCESS
        config = mock_notifier_cls.call_args.args[0]
        assert config.webhook_url == WEBHOOK_URL
        assert config.timeout == 7.0

    def test_missing_webhook(self, input_file: Path) -> None:
        result = runner.invoke(app, ["send", "failure", "-i", str(input_file)])
        assert result.exit_code == EXIT_CONFIG_ERROR

    @pytest.mark.parametrize(
        ("kind", "exit_code"),
        [
            (FailureKind.CONFIGURATION_ERROR, EXIT_CONFIG_ERROR),
            (FailureKind.INVALID_RECORD, EXIT_VALIDATION_ERROR),
            (FailureKind.ENDPOINT_NOT_FOUND, EXIT_DELIVERY_ERROR),
            (FailureKind.DELIVERY_REJECTED, EXIT_DELIVERY_ERROR),
            (FailureKind.TRANSPORT_ERROR, EXIT_RUNTIME_ERROR),
            (FailureKind.INTERNAL_ERROR, EXIT_RUNTIME_ERROR),
        ],
    )
    @patch("rundeck_slack.cli.SlackNotifier")
    def test_failure_exit_codes(
        self, mock_notifier_cls, kind: FailureKind, exit_code: int, input_file: Path
    ) -> None:
        mock_notifier_cls.return_value.post_notification.return_value = DeliveryResult(
            success=False, trigger="failure", kind=kind, error="nope"
        )

        result = runner.invoke(app, ["send", "failure", "-i", str(input_file), "-u", WEBHOOK_URL])

        assert result.exit_code == exit_code

    def test_unreadable_input(self) -> None:
        result = runner.invoke(app, ["send", "failure", "-i", "{broken", "-u", WEBHOOK_URL])
        assert result.exit_code == EXIT_VALIDATION_ERROR


class TestVersion:
    """Tests for the version command."""

    def test_prints_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == EXIT_SUCCESS
        assert __version__ in result.output
