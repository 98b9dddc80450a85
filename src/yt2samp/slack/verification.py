"""Slack request signature verification as a FastAPI dependency."""

from urllib.parse import parse_qs

from fastapi import HTTPException, Request
from slack_sdk.signature import SignatureVerifier

from yt2samp.config import get_settings


async def verify_slack_request(request: Request) -> dict[str, str]:
    """Verify Slack request signature and return the parsed slash command form.

    Reads the raw body FIRST (before any form parsing) to ensure the
    signature verification uses the exact bytes Slack signed.

    Raises HTTPException(403) if the signature is invalid.
    """
    settings = get_settings()
    body = (await request.body()).decode("utf-8")

    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    verifier = SignatureVerifier(signing_secret=settings.slack_signing_secret)

    if not verifier.is_valid(body=body, timestamp=timestamp, signature=signature):
        raise HTTPException(status_code=403, detail="Invalid Slack signature")

    # Slash commands are form-encoded; keep the first value of each field
    return {key: values[0] for key, values in parse_qs(body, keep_blank_values=True).items()}
