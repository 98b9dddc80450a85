"""Slash command text parsing."""

import re

# Slack may wrap links as <https://example.com> or <https://example.com|label>
SLACK_URL_PATTERN = re.compile(r"<(https?://[^|>]+)(?:\|[^>]*)?>")


def extract_command_url(text: str) -> str | None:
    """Return the URL argument of a slash command, unwrapping Slack link markup.

    Returns None when the command text is empty.
    """
    match = SLACK_URL_PATTERN.search(text)
    if match:
        return match.group(1)
    parts = text.split()
    return parts[0] if parts else None
