"""HTTP client wrapper.

Provides a clean interface for single-attempt HTTP requests with:
- Typed response objects
- Error translation into the notifier's failure taxonomy
- Centralized logging with redacted webhook URLs
- A scoped client that is always closed
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from rundeck_slack.config import DEFAULT_TIMEOUT
from rundeck_slack.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HTTPResponse:
    """Structured HTTP response.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        body: Response body as string
        elapsed_ms: Request duration in milliseconds
    """

    status_code: int
    body: str
    elapsed_ms: float = 0.0


@contextmanager
def http_client(*, timeout: float | None = DEFAULT_TIMEOUT) -> Iterator[httpx.Client]:
    """Open an HTTP client scoped to one notification.

    The client is closed on every exit path.

    Example:
        with http_client(timeout=10.0) as client:
            response = request(client, "POST", url, data={"payload": "{}"})
    """
    client = httpx.Client(timeout=timeout)
    try:
        yield client
    finally:
        client.close()


def validate_url(url: str) -> httpx.URL:
    """Parse a webhook URL, rejecting anything that is not absolute http(s).

    Raises:
        ConfigurationError: If the URL is malformed.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Malformed URL: {e}", setting="webhook_url") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            "Malformed URL: expected an absolute http(s) URL",
            setting="webhook_url",
            value=_redact_url(url),
        )
    return parsed


def request(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    data: dict[str, str] | None = None,
    timeout: float | None = None,
) -> HTTPResponse:
    """Make a single HTTP request with consistent error handling.

    Args:
        client: httpx.Client instance (see http_client())
        method: HTTP method (GET, POST, ...)
        url: Target URL
        headers: Optional request headers
        data: Optional form fields, sent url-encoded
        timeout: Optional timeout override (uses client default if not set)

    Returns:
        HTTPResponse with status and body. Non-2xx statuses are returned,
        not raised.

    Raises:
        ConfigurationError: If the URL is malformed
        TransportError: If no response was received (refused, reset, timeout)
    """
    validate_url(url)
    log_url = _redact_url(url)
    logger.debug(f"HTTP {method} {log_url}")

    kwargs: dict[str, Any] = {"headers": headers, "data": data}
    if timeout is not None:
        kwargs["timeout"] = timeout

    start = time.perf_counter()
    try:
        response = client.request(method=method.upper(), url=url, **kwargs)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        raise ConfigurationError(f"Malformed URL: {e}", setting="webhook_url") from e
    except httpx.TimeoutException as e:
        raise TransportError(
            f"Request timed out: {method} {log_url}",
            url=log_url,
            timeout_seconds=timeout or client.timeout.connect,
        ) from e
    except httpx.RequestError as e:
        raise TransportError(f"Request failed: {e}", url=log_url) from e

    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

    result = HTTPResponse(
        status_code=response.status_code,
        body=response.text,
        elapsed_ms=elapsed_ms,
    )

    logger.debug(f"HTTP {method} {log_url} -> {result.status_code} in {elapsed_ms}ms")
    return result


def _redact_url(url: str) -> str:
    """Redact sensitive parts of URLs for logging.

    Hides the trailing webhook token of Slack (and Slack-compatible) URLs.
    """
    if "hooks.slack.com" in url or "/hooks/" in url or "/services/" in url:
        parts = url.split("/")
        if len(parts) >= 2:
            return "/".join(parts[:-1]) + "/***"

    return url
