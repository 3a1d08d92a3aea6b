"""Notifier configuration.

NotifierConfig is the immutable settings record passed into the formatter
and the delivery adapter at call time. It can be built from keyword
arguments, from the host's plugin-property mapping, from RUNDECK_SLACK_*
environment variables, or from a YAML file.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from rundeck_slack.errors import ConfigurationError

DEFAULT_TIMEOUT = 30.0

# Plugin property names used by the orchestration host, mapped to field names
PLUGIN_PROPERTIES = {
    "slackIncomingWebHookUrl": "webhook_url",
    "slackOverrideDefaultWebHookChannel": "channel",
    "slackOverrideDefaultWebHookName": "username",
    "slackOverrideDefaultWebHookEmoji": "icon_emoji",
    "rundeckServerEnvironmentName": "environment_name",
}

ENV_VARS = {
    "RUNDECK_SLACK_WEBHOOK_URL": "webhook_url",
    "RUNDECK_SLACK_CHANNEL": "channel",
    "RUNDECK_SLACK_USERNAME": "username",
    "RUNDECK_SLACK_ICON_EMOJI": "icon_emoji",
    "RUNDECK_SLACK_ENVIRONMENT": "environment_name",
    "RUNDECK_SLACK_TIMEOUT": "timeout",
    "RUNDECK_SLACK_TIMEZONE": "timezone",
}


@dataclass(frozen=True)
class NotifierConfig:
    """Settings for one notifier instance.

    Attributes:
        webhook_url: Slack incoming webhook URL (required).
        channel: Override the webhook's default channel ("#channel").
        username: Override the webhook's default name.
        icon_emoji: Override the webhook's default icon (":emoji:").
        environment_name: Environment label shown next to node names
            (e.g. "prod", "qa").
        timeout: HTTP timeout in seconds; None disables the timeout.
        timezone: IANA zone for timestamps; None uses the host's local zone.
    """

    webhook_url: str
    channel: str | None = None
    username: str | None = None
    icon_emoji: str | None = None
    environment_name: str | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    timezone: str | None = None

    def __post_init__(self) -> None:
        if not self.webhook_url or not str(self.webhook_url).strip():
            raise ConfigurationError("Webhook URL is required", setting="webhook_url")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                "Timeout must be positive", setting="timeout", value=self.timeout
            )
        _resolve_timezone(self.timezone)

    @property
    def tz(self) -> tzinfo | None:
        """Resolved timezone, None for the host's local zone."""
        return _resolve_timezone(self.timezone)

    def overrides(self) -> dict[str, str]:
        """Channel/username/icon overrides that are set and non-empty."""
        candidates = {
            "channel": self.channel,
            "username": self.username,
            "icon_emoji": self.icon_emoji,
        }
        return {key: value for key, value in candidates.items() if value}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> NotifierConfig:
        """Build from a settings mapping.

        Accepts the snake_case field names as well as the host's plugin
        property names (e.g. "slackIncomingWebHookUrl"). Unknown keys are
        ignored.

        Raises:
            ConfigurationError: If required settings are missing or invalid.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = PLUGIN_PROPERTIES.get(key, key)
            if name in known and value is not None:
                values[name] = value

        if "timeout" in values:
            values["timeout"] = _parse_timeout(values["timeout"])
        if "webhook_url" not in values:
            raise ConfigurationError("Webhook URL is required", setting="webhook_url")
        return cls(**values)

    @classmethod
    def from_env(cls, env: Mapping[str, str], **overrides: Any) -> NotifierConfig:
        """Build from RUNDECK_SLACK_* environment variables.

        Args:
            env: Environment variables mapping (typically os.environ).
            **overrides: Values that take precedence over the environment.
        """
        values: dict[str, Any] = {
            name: env[var] for var, name in ENV_VARS.items() if env.get(var)
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_mapping(values)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        env: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> NotifierConfig:
        """Build from a YAML file, falling back to environment variables.

        Args:
            path: YAML file with a flat mapping of settings.
            env: Environment variables consulted for settings the file omits.
            **overrides: Values that take precedence over the file.

        Raises:
            ConfigurationError: If the file is unreadable or not a mapping.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError("Config file not found", setting="path", value=path) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file: {e}", setting="path", value=path
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping", setting="path", value=path
            )

        file_values = {PLUGIN_PROPERTIES.get(k, k): v for k, v in data.items()}
        file_values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_env(env or {}, **file_values)


def _resolve_timezone(name: str | None) -> tzinfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError("Unknown timezone", setting="timezone", value=name) from e


def _parse_timeout(value: Any) -> float | None:
    """Parse a timeout setting; 0, "none" and "" disable the timeout."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "none", "off"):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError("Timeout must be a number", setting="timeout", value=value) from e
    return parsed if parsed > 0 else None
