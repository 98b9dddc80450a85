"""Link extraction from the host's upload result page.

The result page is unstructured HTML whose layout shifts over time, so links
are mined with an ordered cascade of patterns. The first pattern that matches
anything wins; each pattern decides which of its matches to keep. Add new
layout variants by appending to ``LINK_PATTERNS``.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

AUDIO_LINK = re.compile(r"\.(mp3|m4a|ogg|wav|aac)$", re.IGNORECASE)


def first(matches: list[str]) -> str:
    return matches[0]


def prefer_audio(matches: list[str]) -> str:
    """Pick the first match with an audio extension, else the first match."""
    for link in matches:
        if AUDIO_LINK.search(link):
            return link
    return matches[0]


@dataclass(frozen=True)
class LinkPattern:
    """One step of the cascade. The regex must define a ``url`` group."""

    name: str
    regex: re.Pattern[str]
    select: Callable[[list[str]], str] = first

    def find(self, html: str) -> str | None:
        matches = [m.group("url") for m in self.regex.finditer(html)]
        if not matches:
            return None
        logger.info("Result page %s links: %s", self.name, matches)
        return self.select(matches)


LINK_PATTERNS: tuple[LinkPattern, ...] = (
    # e.g. http://e.top4top.io/m_3683r08ec0.mp3
    LinkPattern(
        "media",
        re.compile(r"(?P<url>https?://[a-z]\.top4top\.io/[mp]_[a-zA-Z0-9]+\.\w{2,4})"),
        prefer_audio,
    ),
    # e.g. https://top4top.io/downloadf-3683r08ec0
    LinkPattern(
        "download page",
        re.compile(r"(?P<url>https?://(?:www\.)?top4top\.io/downloadf-[a-zA-Z0-9]+)"),
    ),
    LinkPattern(
        "file",
        re.compile(r"(?P<url>https?://[a-z]\.top4top\.io/[dpf]_[a-zA-Z0-9]+[^\"'\s<]*)"),
    ),
    LinkPattern(
        "input value",
        re.compile(r'value="(?P<url>https?://(?:[\w-]+\.)*top4top\.io/[^"]*)"'),
    ),
)


def extract_direct_link(html: str, patterns: tuple[LinkPattern, ...] = LINK_PATTERNS) -> str | None:
    """Return the first link found by the cascade, or None."""
    for pattern in patterns:
        link = pattern.find(html)
        if link is not None:
            return link
    return None
