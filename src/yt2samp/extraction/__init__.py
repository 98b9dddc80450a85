"""Audio extraction: URL shapes, yt-dlp runner, and credential-escalating downloader.

Public API:
    build_request(url, user_id) -> ExtractionRequest
        Validates the link shape; raises InvalidSourceUrlError.
    AudioDownloader.download(request) -> ExtractionResult
        Runs yt-dlp through the credential strategies and enforces limits.
"""

from yt2samp.extraction.urls import build_request, is_valid_youtube_url
from yt2samp.extraction.runner import CommandResult, CommandRunner
from yt2samp.extraction.downloader import AudioDownloader, format_duration

__all__ = [
    "AudioDownloader",
    "CommandResult",
    "CommandRunner",
    "build_request",
    "format_duration",
    "is_valid_youtube_url",
]
