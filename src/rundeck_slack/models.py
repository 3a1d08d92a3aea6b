"""Execution record models.

The orchestration host hands over a loosely-typed nested mapping for each
job-lifecycle event. This module validates it once, at the boundary, into
immutable models with explicit optional fields:
- ExecutionRecord: one job run
- JobInfo / JobContext / ExecutionContext / NodeStatus: its nested parts
- Trigger / status constants: the values the formatter branches on
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rundeck_slack.errors import RecordError

# Execution status values the formatter branches on
STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_ABORTED = "aborted"
STATUS_TIMEDOUT = "timedout"


class Trigger(str, Enum):
    """Job-lifecycle events that fire a notification."""

    START = "start"
    SUCCESS = "success"
    FAILURE = "failure"
    ABORTED = "aborted"
    TIMEDOUT = "timedout"
    RUNNING = "running"
    AVGDURATION = "avgduration"
    RETRYABLEFAILURE = "retryablefailure"


def _to_text(v: Any) -> Any:
    """Coerce numeric scalars to strings, leaving everything else to pydantic."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def _to_text_mapping(v: Any) -> Any:
    if v is None:
        return {}
    if isinstance(v, Mapping):
        return {str(k): "" if val is None else str(val) for k, val in v.items()}
    return v


class _RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class JobInfo(_RecordModel):
    """The job definition an execution belongs to.

    Attributes:
        name: Job name.
        group: Slash-delimited group path (e.g. "ops/nightly"), may be empty.
        href: Link to the job definition.
        id: Job identifier.
        project: Project the job lives in.
    """

    name: str | None = None
    group: str | None = None
    href: str | None = None
    id: str | None = None
    project: str | None = None

    @field_validator("name", "group", "href", "id", "project", mode="before")
    @classmethod
    def parse_text(cls, v: Any) -> Any:
        """Accept numeric identifiers."""
        return _to_text(v)

    @property
    def group_path(self) -> list[str]:
        """Non-empty segments of the group path, in order."""
        if not self.group:
            return []
        return [segment for segment in self.group.split("/") if segment]


class JobContext(_RecordModel):
    """Server-level context for the job (only the server URL is used)."""

    server_url: str | None = Field(default=None, alias="serverUrl")


class ExecutionContext(_RecordModel):
    """Context data attached to an execution.

    Attributes:
        job: Server-level job context.
        option: Option values by name, in the order the host supplied them.
        secure_option: Secure options; only the keys matter, they mark
            which option values must be redacted.
    """

    job: JobContext | None = None
    option: dict[str, str] = Field(default_factory=dict)
    secure_option: dict[str, str] = Field(default_factory=dict, alias="secureOption")

    @field_validator("option", "secure_option", mode="before")
    @classmethod
    def parse_options(cls, v: Any) -> Any:
        """Render option values as text; None means no options."""
        return _to_text_mapping(v)


class NodeStatus(_RecordModel):
    """Node counters for an execution."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @field_validator("total", "succeeded", "failed", mode="before")
    @classmethod
    def parse_count(cls, v: Any) -> Any:
        """Treat missing counters as zero."""
        return 0 if v is None or v == "" else v


class ExecutionRecord(_RecordModel):
    """One job run, as reported by the orchestration host.

    Field aliases match the host's camelCase keys, so a raw execution-data
    mapping validates directly. Instances are immutable.
    """

    id: str | None = None
    href: str | None = None
    status: str | None = None
    project: str | None = None
    user: str | None = None
    abortedby: str | None = None
    job: JobInfo | None = None
    context: ExecutionContext | None = None
    date_started: int | None = Field(default=None, alias="dateStartedUnixtime")
    date_ended: int | None = Field(default=None, alias="dateEndedUnixtime")
    nodestatus: NodeStatus = Field(default_factory=NodeStatus)
    succeeded_nodes: list[str] = Field(default_factory=list, alias="succeededNodeList")
    failed_nodes: list[str] = Field(default_factory=list, alias="failedNodeList")

    @field_validator("id", "href", "status", "project", "user", "abortedby", mode="before")
    @classmethod
    def parse_text(cls, v: Any) -> Any:
        """Accept numeric identifiers."""
        return _to_text(v)

    @field_validator("nodestatus", mode="before")
    @classmethod
    def parse_nodestatus(cls, v: Any) -> Any:
        """Missing node status means no nodes."""
        return {} if v is None else v

    @field_validator("succeeded_nodes", "failed_nodes", mode="before")
    @classmethod
    def parse_node_list(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list; names become text."""
        if v is None:
            return []
        if isinstance(v, str):
            return [node.strip() for node in v.split(",") if node.strip()]
        if isinstance(v, (list, tuple)):
            return [_to_text(node) for node in v]
        return v

    @model_validator(mode="after")
    def check_dates(self) -> ExecutionRecord:
        """An execution cannot end before it started."""
        if (
            self.date_started is not None
            and self.date_ended is not None
            and self.date_ended < self.date_started
        ):
            raise ValueError(
                f"dateEndedUnixtime ({self.date_ended}) precedes "
                f"dateStartedUnixtime ({self.date_started})"
            )
        return self

    @property
    def server_url(self) -> str | None:
        """Base URL of the orchestration server, if the context carries one."""
        if self.context is None or self.context.job is None:
            return None
        return self.context.job.server_url

    @property
    def options(self) -> dict[str, str]:
        return self.context.option if self.context else {}

    @property
    def secure_options(self) -> dict[str, str]:
        return self.context.secure_option if self.context else {}

    @property
    def aborted_by(self) -> str | None:
        """Who aborted the run, only when the run actually is aborted."""
        if self.status == STATUS_ABORTED and self.abortedby is not None:
            return self.abortedby
        return None

    @classmethod
    def from_execution_data(cls, data: Mapping[str, Any]) -> ExecutionRecord:
        """Validate a raw execution-data mapping from the host.

        Args:
            data: Nested execution data, camelCase keys as sent by the host.

        Returns:
            The validated, immutable record.

        Raises:
            RecordError: If the mapping cannot be validated.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [_format_validation_error(err) for err in e.errors()]
            raise RecordError(
                f"Execution record validation failed with {len(errors)} error(s)",
                errors=errors,
            ) from e


def _format_validation_error(error: Mapping[str, Any]) -> str:
    """Format a pydantic error entry into a human-readable string."""
    path = ".".join(str(p) for p in error.get("loc", ())) or "(root)"
    return f"At '{path}': {error.get('msg', 'invalid value')}"
