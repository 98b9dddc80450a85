"""Slash command dispatch and background conversion."""

import logging

from fastapi import BackgroundTasks
from fastapi.responses import JSONResponse

from yt2samp.errors import Yt2SampError
from yt2samp.pipeline import PipelineCoordinator
from yt2samp.slack.commands import extract_command_url
from yt2samp.slack.notifier import notify_error, notify_success

logger = logging.getLogger(__name__)

USAGE = "Usage: `/yt2samp <YouTube URL>`"
UNEXPECTED_ERROR = "An unexpected error occurred while processing the request."


def handle_slash_command(
    form: dict[str, str],
    background_tasks: BackgroundTasks,
    coordinator: PipelineCoordinator,
) -> JSONResponse:
    """Acknowledge a /yt2samp command and schedule the conversion.

    Slack requires an answer within 3 seconds, so the pipeline runs as a
    background task and reports back through the notifier.
    """
    url = extract_command_url(form.get("text", ""))
    if url is None:
        return JSONResponse({"response_type": "ephemeral", "text": USAGE})

    user_id = form.get("user_id", "")
    channel_id = form.get("channel_id", "")
    logger.info("Dispatching conversion of %s for user %s in %s", url, user_id, channel_id)

    background_tasks.add_task(
        process_conversion,
        coordinator=coordinator,
        channel_id=channel_id,
        user_id=user_id,
        url=url,
    )
    return JSONResponse(
        {"response_type": "ephemeral", "text": f"Converting <{url}>, this can take a minute..."}
    )


async def process_conversion(
    coordinator: PipelineCoordinator, channel_id: str, user_id: str, url: str
) -> None:
    """Run the pipeline and report the outcome. Never raises."""
    try:
        result = await coordinator.process(url, user_id)
    except Yt2SampError as exc:
        logger.warning("Conversion failed for user %s (%s): %s", user_id, url, exc)
        await notify_error(channel_id, user_id, url, str(exc))
        return
    except Exception as exc:
        logger.error("Conversion crashed for user %s (%s): %s", user_id, url, exc, exc_info=True)
        await notify_error(channel_id, user_id, url, UNEXPECTED_ERROR)
        return

    await notify_success(channel_id, user_id, result)
