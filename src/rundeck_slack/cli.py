"""Command-line interface for rendering and sending job notifications."""

from __future__ import annotations

import json
import logging
import os
import sys

import typer
from rich.console import Console

from rundeck_slack import __version__
from rundeck_slack.config import NotifierConfig
from rundeck_slack.errors import ConfigurationError, FailureKind, RecordError
from rundeck_slack.formatter import build_message
from rundeck_slack.io import read_input, write_output
from rundeck_slack.models import ExecutionRecord
from rundeck_slack.notifier import SlackNotifier
from rundeck_slack.schema import MessageSchemaError, validate_message

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VALIDATION_ERROR = 2
EXIT_CONFIG_ERROR = 3
EXIT_DELIVERY_ERROR = 4

EXIT_CODES = {
    FailureKind.CONFIGURATION_ERROR: EXIT_CONFIG_ERROR,
    FailureKind.INVALID_RECORD: EXIT_VALIDATION_ERROR,
    FailureKind.ENDPOINT_NOT_FOUND: EXIT_DELIVERY_ERROR,
    FailureKind.DELIVERY_REJECTED: EXIT_DELIVERY_ERROR,
    FailureKind.TRANSPORT_ERROR: EXIT_RUNTIME_ERROR,
    FailureKind.INTERNAL_ERROR: EXIT_RUNTIME_ERROR,
}

# Placeholder so documents can be rendered without a configured webhook
RENDER_ONLY_WEBHOOK_URL = "http://localhost/render-only"

app = typer.Typer(
    name="rundeck-slack",
    help="Render and send Slack notifications for job executions.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )


def _resolve_config(
    config_path: str | None,
    *,
    require_webhook: bool,
    **overrides: object,
) -> NotifierConfig:
    """Merge settings: CLI flags over config file over environment."""
    env = dict(os.environ)
    if not require_webhook and not env.get("RUNDECK_SLACK_WEBHOOK_URL"):
        env["RUNDECK_SLACK_WEBHOOK_URL"] = RENDER_ONLY_WEBHOOK_URL

    if config_path:
        return NotifierConfig.from_file(config_path, env=env, **overrides)
    return NotifierConfig.from_env(env, **overrides)


def _load_record(input_source: str) -> ExecutionRecord:
    try:
        data = read_input(input_source)
    except (OSError, json.JSONDecodeError) as e:
        raise RecordError(f"Failed to read input: {e}") from e
    if not isinstance(data, dict):
        raise RecordError("Execution data must be a JSON object")
    return ExecutionRecord.from_execution_data(data)


@app.command("render")
def render_cmd(
    trigger: str = typer.Argument(..., help="Trigger: start, success, failure, aborted, ..."),
    input_source: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path to execution data JSON file or inline JSON string",
    ),
    config_path: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML config file",
    ),
    environment_name: str | None = typer.Option(
        None,
        "--environment",
        "-e",
        help="Environment label shown next to node names",
    ),
    timezone: str | None = typer.Option(
        None,
        "--timezone",
        help="IANA timezone for timestamps (default: local)",
    ),
    output_path: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the document to a file instead of stdout",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Render the message document for an execution without sending it."""
    _configure_logging(verbose)

    try:
        config = _resolve_config(
            config_path,
            require_webhook=False,
            environment_name=environment_name,
            timezone=timezone,
        )
        record = _load_record(input_source)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None
    except RecordError as e:
        err_console.print(f"[red]Invalid execution data:[/red] {e}")
        for err in e.errors:
            err_console.print(f"  - {err}")
        raise typer.Exit(code=EXIT_VALIDATION_ERROR) from None

    document = build_message(trigger, record, config)

    try:
        validate_message(document)
    except MessageSchemaError as e:
        err_console.print(f"[red]Rendered document is invalid:[/red] {e}")
        for err in e.errors:
            err_console.print(f"  - {err}")
        raise typer.Exit(code=EXIT_VALIDATION_ERROR) from None

    if output_path:
        write_output(output_path, document)
        err_console.print(f"[green]Document written to {output_path}[/green]")
    else:
        console.print_json(json.dumps(document, ensure_ascii=False))


@app.command("send")
def send_cmd(
    trigger: str = typer.Argument(..., help="Trigger: start, success, failure, aborted, ..."),
    input_source: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path to execution data JSON file or inline JSON string",
    ),
    config_path: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML config file",
    ),
    webhook_url: str | None = typer.Option(
        None,
        "--webhook-url",
        "-u",
        help="Slack incoming webhook URL (default: RUNDECK_SLACK_WEBHOOK_URL)",
    ),
    channel: str | None = typer.Option(None, "--channel", help="Override webhook channel"),
    username: str | None = typer.Option(None, "--username", help="Override webhook name"),
    icon_emoji: str | None = typer.Option(None, "--icon-emoji", help="Override webhook icon"),
    environment_name: str | None = typer.Option(
        None,
        "--environment",
        "-e",
        help="Environment label shown next to node names",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="HTTP timeout in seconds (default: 30)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Send the notification for an execution to the Slack webhook."""
    _configure_logging(verbose)

    try:
        config = _resolve_config(
            config_path,
            require_webhook=True,
            webhook_url=webhook_url,
            channel=channel,
            username=username,
            icon_emoji=icon_emoji,
            environment_name=environment_name,
            timeout=timeout,
        )
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None

    try:
        data = read_input(input_source)
    except (OSError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Invalid execution data:[/red] Failed to read input: {e}")
        raise typer.Exit(code=EXIT_VALIDATION_ERROR) from None

    result = SlackNotifier(config).post_notification(trigger, data)

    if result:
        console.print(f"[green]Notification sent[/green] (trigger={result.trigger})")
        raise typer.Exit(code=EXIT_SUCCESS)

    kind = result.kind or FailureKind.INTERNAL_ERROR
    err_console.print(f"[red]Notification failed[/red] [{kind.value}]: {result.error}")
    raise typer.Exit(code=EXIT_CODES[kind])


@app.command("version")
def version_cmd() -> None:
    """Print the package version."""
    console.print(__version__)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
