"""Typed exceptions for rundeck-slack-notify.

All notification errors inherit from NotifyError.
Each one carries the FailureKind reported back to the host, plus
structured context for logging.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Why a notification was not delivered."""

    CONFIGURATION_ERROR = "configuration_error"
    ENDPOINT_NOT_FOUND = "endpoint_not_found"
    DELIVERY_REJECTED = "delivery_rejected"
    TRANSPORT_ERROR = "transport_error"
    INVALID_RECORD = "invalid_record"
    INTERNAL_ERROR = "internal_error"


class NotifyError(Exception):
    """Base exception for all notification errors."""

    kind: FailureKind = FailureKind.TRANSPORT_ERROR

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(NotifyError):
    """Webhook URL or another setting is missing or malformed."""

    kind = FailureKind.CONFIGURATION_ERROR

    def __init__(self, message: str, *, setting: str | None = None, value: Any = None):
        context: dict[str, Any] = {}
        if setting:
            context["setting"] = setting
        if value is not None:
            # Truncate long values for readability
            str_val = str(value)
            context["value"] = str_val[:100] + "..." if len(str_val) > 100 else str_val
        super().__init__(message, context=context)
        self.setting = setting
        self.value = value


class EndpointNotFoundError(NotifyError):
    """The webhook endpoint answered 404: the URL is wrong or revoked."""

    kind = FailureKind.ENDPOINT_NOT_FOUND

    def __init__(self, message: str, *, url: str | None = None):
        context = {"url": url} if url else {}
        super().__init__(message, context=context)
        self.url = url
        self.status_code = 404


class DeliveryRejectedError(NotifyError):
    """The webhook endpoint answered with a status other than 200 or 404."""

    kind = FailureKind.DELIVERY_REJECTED

    def __init__(self, message: str, *, status_code: int, body: str | None = None):
        context: dict[str, Any] = {"status_code": status_code}
        if body:
            context["body"] = body[:100] + "..." if len(body) > 100 else body
        super().__init__(message, context=context)
        self.status_code = status_code
        self.body = body


class TransportError(NotifyError):
    """The request never got a response (refused, reset, timed out)."""

    kind = FailureKind.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        timeout_seconds: float | None = None,
    ):
        context = {"url": url, "timeout_seconds": timeout_seconds}
        super().__init__(message, context={k: v for k, v in context.items() if v is not None})
        self.url = url
        self.timeout_seconds = timeout_seconds


class RecordError(NotifyError):
    """The execution record supplied by the host failed validation."""

    kind = FailureKind.INVALID_RECORD

    def __init__(self, message: str, *, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []
        if self.errors:
            self.context["errors"] = len(self.errors)
