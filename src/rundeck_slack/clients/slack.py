"""Slack incoming-webhook client.

Posts rendered message JSON as the form field ``payload`` and
classifies the webhook's answer.
"""

from __future__ import annotations

import logging

import httpx

from rundeck_slack.clients.http import HTTPResponse, _redact_url, request
from rundeck_slack.errors import DeliveryRejectedError, EndpointNotFoundError

logger = logging.getLogger(__name__)


def send_message(
    client: httpx.Client,
    url: str,
    payload: str,
    *,
    timeout: float | None = None,
) -> HTTPResponse:
    """Deliver rendered message JSON to a Slack incoming webhook.

    Exactly one POST is made, with body ``payload=<url-encoded JSON>``.

    Args:
        client: httpx.Client instance (see clients.http.http_client())
        url: Incoming webhook URL
        payload: Message JSON from formatter.render_message()
        timeout: Request timeout in seconds (client default if not set)

    Returns:
        HTTPResponse from the webhook endpoint (status 200)

    Raises:
        ConfigurationError: If the webhook URL is malformed
        EndpointNotFoundError: If the webhook answers 404
        DeliveryRejectedError: If the webhook answers any other non-200 status
        TransportError: If the request gets no response
    """
    response = request(
        client,
        "POST",
        url,
        data={"payload": payload},
        headers={"charset": "UTF-8"},
        timeout=timeout,
    )

    if response.status_code == 404:
        raise EndpointNotFoundError("Invalid webhook URL", url=_redact_url(url))

    if response.status_code != 200:
        raise DeliveryRejectedError(
            "Webhook rejected the message",
            status_code=response.status_code,
            body=response.body,
        )

    logger.debug(f"Slack message delivered in {response.elapsed_ms}ms")
    return response
