"""Slack slash command router with signature verification."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from yt2samp.slack.handlers import handle_slash_command
from yt2samp.slack.verification import verify_slack_request

router = APIRouter(prefix="", tags=["slack"])


@router.post("/slack/commands")
async def slack_commands(
    request: Request,
    background_tasks: BackgroundTasks,
    form: dict = Depends(verify_slack_request),
) -> JSONResponse:
    """Receive the /yt2samp slash command.

    Slack retries (X-Slack-Retry-Num header) are acknowledged without running
    a second conversion.
    """
    if request.headers.get("X-Slack-Retry-Num"):
        return JSONResponse({"response_type": "ephemeral", "text": "Already processing."})

    return handle_slash_command(form, background_tasks, request.app.state.coordinator)
