"""Classified errors for the yt2samp pipeline.

Every error carries a human-readable message (``str(exc)``) that is safe to
show to the requesting user. Surfaces catch ``Yt2SampError`` and report the
message; anything else is an unexpected fault.
"""

import math
from pathlib import Path

# Longest slice of raw tool diagnostics included in a user-facing message
DIAGNOSTIC_PREVIEW_CHARS = 200


class Yt2SampError(Exception):
    """Base class for all classified pipeline errors."""


class InvalidSourceUrlError(Yt2SampError):
    """Source URL does not match any accepted YouTube link shape."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            "Invalid URL. Only youtube.com and youtu.be video links are supported."
        )


# --- Admission ---


class AdmissionError(Yt2SampError):
    """Request was refused by the concurrency guard."""


class RateLimitedError(AdmissionError):
    """User exhausted their request quota for the current window."""

    def __init__(self, remaining_seconds: float) -> None:
        self.remaining_seconds = remaining_seconds
        wait = max(1, math.ceil(remaining_seconds))
        super().__init__(f"Rate limited: wait {wait} seconds before the next request.")


class UserBusyError(AdmissionError):
    """User already has a request in flight."""

    def __init__(self) -> None:
        super().__init__("Still processing your previous request. Wait until it finishes.")


# --- Extraction ---


class ExtractionError(Yt2SampError):
    """Audio extraction failed."""


class BotDetectedError(ExtractionError):
    """YouTube demanded a sign-in to prove the client is not a bot."""

    def __init__(self) -> None:
        super().__init__(
            "YouTube blocked the request. Place a cookies.txt file in the project root "
            "or set COOKIES_BROWSER in .env."
        )


class PrivateVideoError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("The video is private and cannot be accessed.")


class VideoUnavailableError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("The video is unavailable or has been removed.")


class AgeRestrictedError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("The video is age restricted.")


class UnsupportedUrlError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("The URL is not valid for download.")


class DurationExceededError(ExtractionError):
    """Video is longer than the configured maximum."""

    def __init__(self, duration: str, maximum: str) -> None:
        self.duration = duration
        self.maximum = maximum
        super().__init__(f"Video is too long ({duration}). Maximum is {maximum}.")


class AudioFileMissingError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("The MP3 file was not found after download.")


class FileTooLargeError(ExtractionError):
    """Produced audio file is larger than the configured maximum."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        size_mb = size_bytes / 1024 / 1024
        max_mb = max_bytes / 1024 / 1024
        super().__init__(f"File is too large ({size_mb:.1f}MB). Maximum is {max_mb:.0f}MB.")


class DownloadTimeoutError(ExtractionError):
    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Download timed out after {timeout_seconds:.0f} seconds.")


class MetadataParseError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("Failed to parse metadata from yt-dlp output.")


class ToolFailedError(ExtractionError):
    """Unclassified yt-dlp failure; the diagnostic text is surfaced truncated."""

    def __init__(self, diagnostics: str) -> None:
        self.diagnostics = diagnostics
        super().__init__(f"yt-dlp failed: {diagnostics[:DIAGNOSTIC_PREVIEW_CHARS]}")


# --- Upload ---


class UploadError(Yt2SampError):
    """Upload to the file host failed."""


class UploadSourceMissingError(UploadError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"File to upload not found: {path.name}")


class HostUnavailableError(UploadError):
    """Landing page did not answer with HTTP 200."""

    def __init__(self, host: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Failed to open {host} (HTTP {status_code}).")


class SessionTokenNotFoundError(UploadError):
    """Landing page no longer carries the hidden session field."""

    def __init__(self, host: str) -> None:
        super().__init__(f"Failed to find the session ID (sid) on the {host} page.")


class LinkNotFoundError(UploadError):
    """Upload looked successful but no link could be mined from the result page."""

    def __init__(self, debug_path: Path) -> None:
        self.debug_path = debug_path
        super().__init__(
            "Upload may have succeeded, but no download link was found. "
            f"Check {debug_path.name} in the temp folder."
        )


class UploadTransportError(UploadError):
    """Connection or timeout failure during one network phase."""

    def __init__(self, phase: str, detail: str) -> None:
        self.phase = phase
        super().__init__(f"Network error during {phase}: {detail}")
