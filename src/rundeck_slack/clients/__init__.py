"""HTTP and Slack webhook clients for rundeck-slack-notify."""

from rundeck_slack.clients.http import HTTPResponse, http_client, request
from rundeck_slack.clients.slack import send_message

__all__ = ["request", "http_client", "HTTPResponse", "send_message"]
