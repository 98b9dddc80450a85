"""Accepted YouTube link shapes and request validation."""

import re

from yt2samp.errors import InvalidSourceUrlError
from yt2samp.models.request import ExtractionRequest

# The five link shapes the bot accepts; anything else is rejected up front
YOUTUBE_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(https?://)?(www\.)?youtube\.com/watch\?v=[\w-]+"),
    re.compile(r"^(https?://)?(www\.)?youtube\.com/shorts/[\w-]+"),
    re.compile(r"^(https?://)?youtu\.be/[\w-]+"),
    re.compile(r"^(https?://)?(www\.)?youtube\.com/embed/[\w-]+"),
    re.compile(r"^(https?://)?m\.youtube\.com/watch\?v=[\w-]+"),
)


def is_valid_youtube_url(url: str) -> bool:
    """Return True if the URL matches one of the accepted YouTube link shapes.

    Handles: youtube.com/watch?v=, youtube.com/shorts/, youtu.be/,
    youtube.com/embed/, m.youtube.com/watch?v= (scheme and www. optional).
    """
    return any(pattern.match(url) for pattern in YOUTUBE_URL_PATTERNS)


def build_request(source_url: str, user_id: str) -> ExtractionRequest:
    """Validate the URL shape and build an ExtractionRequest.

    Raises:
        InvalidSourceUrlError: URL matches none of the accepted shapes.
    """
    url = source_url.strip()
    if not is_valid_youtube_url(url):
        raise InvalidSourceUrlError(url)
    return ExtractionRequest(source_url=url, user_id=user_id)
