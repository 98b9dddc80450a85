"""Slack surface: /yt2samp slash command endpoint and outcome notifications."""

from yt2samp.slack.client import get_slack_client
from yt2samp.slack.notifier import notify_error, notify_success
from yt2samp.slack.router import router

__all__ = [
    "get_slack_client",
    "notify_error",
    "notify_success",
    "router",
]
