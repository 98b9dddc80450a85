"""Shared AsyncWebClient for conversion replies.

Background conversions outlive the slash-command request, so replies go
through one lazily built bot client instead of the request's response_url.
"""

from slack_sdk.web.async_client import AsyncWebClient

from yt2samp.config import get_settings

_client: AsyncWebClient | None = None


async def get_slack_client() -> AsyncWebClient:
    """Return the bot client used by the success and error notifiers.

    Built on first use from ``slack_bot_token`` so the app can start (and
    serve /health) before Slack credentials are configured.
    """
    global _client
    if _client is None:
        _client = AsyncWebClient(token=get_settings().slack_bot_token)
    return _client


def reset_client() -> None:
    """Drop the cached client so the next call rebuilds it from settings."""
    global _client
    _client = None
