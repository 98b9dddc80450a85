"""Slack notification functions for conversion outcomes.

All functions are fire-and-forget: they catch and log errors but never raise,
so a failed reply cannot crash the process or leave guard state behind.
"""

import logging

import aiohttp
from slack_sdk.errors import SlackClientError

from yt2samp.models.conversion import ConversionResult
from yt2samp.slack.client import get_slack_client

logger = logging.getLogger(__name__)


def boombox_link(direct_link: str) -> str:
    """Downgrade to http; the SA-MP boombox client cannot stream https."""
    return direct_link.replace("https://", "http://", 1)


async def notify_success(channel_id: str, user_id: str, result: ConversionResult) -> None:
    """Post the ready-to-play link to the channel.

    Args:
        channel_id: Slack channel ID.
        user_id: Requesting user (mentioned in the reply).
        result: Completed conversion.
    """
    link = boombox_link(result.direct_link)
    text = "\n".join(
        [
            f"<@{user_id}> :musical_note: Ready for the boombox!",
            f"*{result.title}*",
            f"Duration: {result.duration} • <{result.source_url}|YouTube>",
            "*Boombox link (copy this):*",
            f"```{link}```",
            f"`/boombox place` → `/boombox url {link}`",
        ]
    )
    try:
        client = await get_slack_client()
        await client.chat_postMessage(channel=channel_id, text=text, unfurl_links=False)
    except (SlackClientError, aiohttp.ClientError, TimeoutError):
        logger.warning(
            "Failed to send success notification for %s", result.direct_link, exc_info=True
        )


async def notify_error(channel_id: str, user_id: str, url: str, detail: str) -> None:
    """Post a failure message to the requesting user only.

    Args:
        channel_id: Slack channel ID.
        user_id: Requesting user.
        url: The URL that failed processing.
        detail: Human-readable error description.
    """
    try:
        client = await get_slack_client()
        await client.chat_postEphemeral(
            channel=channel_id,
            user=user_id,
            text=f":x: Failed to process <{url}>: {detail}\nTry again later or use a different URL.",
        )
    except (SlackClientError, aiohttp.ClientError, TimeoutError):
        logger.error("Failed to send error notification to %s for %s", user_id, url, exc_info=True)
