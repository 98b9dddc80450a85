"""Audio extraction through yt-dlp with credential escalation.

Strategies are tried in order: no cookies, cookies.txt, cookies from a local
browser. Only a bot-detection failure moves on to the next strategy; any
other failure is final because different credentials cannot fix it.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from yt2samp.errors import (
    AgeRestrictedError,
    AudioFileMissingError,
    BotDetectedError,
    DownloadTimeoutError,
    DurationExceededError,
    ExtractionError,
    FileTooLargeError,
    MetadataParseError,
    PrivateVideoError,
    ToolFailedError,
    UnsupportedUrlError,
    VideoUnavailableError,
)
from yt2samp.extraction.runner import CommandResult, CommandRunner
from yt2samp.models.media import CredentialStrategy, ExtractionResult
from yt2samp.models.request import ExtractionRequest
from yt2samp.tempfiles import cleanup_file, ensure_temp_dir

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = "mp3"

# Diagnostics that mean YouTube wants proof the client is not a bot
BOT_DETECTION_SIGNATURES = ("Sign in to confirm", "not a bot")


@dataclass(frozen=True)
class StrategyAttempt:
    """One credential strategy and the extra yt-dlp flags it needs."""

    strategy: CredentialStrategy
    flags: tuple[str, ...]
    label: str


def is_bot_detection(diagnostics: str) -> bool:
    return any(signature in diagnostics for signature in BOT_DETECTION_SIGNATURES)


def classify_failure(result: CommandResult, timeout_seconds: float) -> ExtractionError:
    """Map a failed yt-dlp run to a classified extraction error."""
    if result.timed_out:
        return DownloadTimeoutError(timeout_seconds)

    diagnostics = result.stderr
    if is_bot_detection(diagnostics):
        return BotDetectedError()
    if "Private video" in diagnostics:
        return PrivateVideoError()
    if "Video unavailable" in diagnostics or "not available" in diagnostics:
        return VideoUnavailableError()
    if "confirm your age" in diagnostics or ("Sign in" in diagnostics and "age" in diagnostics):
        return AgeRestrictedError()
    if "is not a valid URL" in diagnostics or "Unsupported URL" in diagnostics:
        return UnsupportedUrlError()
    return ToolFailedError(diagnostics)


def format_duration(seconds: float) -> str:
    """Render seconds as M:SS (minutes are not wrapped into hours)."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def parse_metadata(stdout: str) -> dict:
    """Return the last line of yt-dlp output that parses as a JSON object.

    yt-dlp may interleave progress lines with the ``--print-json`` payload,
    so the last parseable object is authoritative.
    """
    for line in reversed(stdout.strip().splitlines()):
        try:
            payload = json.loads(line)
        except ValueError:
            continue
        if isinstance(payload, dict):
            return payload
    raise MetadataParseError()


class AudioDownloader:
    """Produces a local MP3 for a validated YouTube URL."""

    def __init__(
        self,
        runner: CommandRunner,
        temp_dir: Path,
        *,
        cookies_file: Path,
        cookies_browser: str = "",
        js_runtime: str = "",
        timeout_seconds: float = 120.0,
        max_duration_seconds: int = 600,
        max_file_size_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        self.runner = runner
        self.temp_dir = temp_dir
        self.cookies_file = cookies_file
        self.cookies_browser = cookies_browser
        self.js_runtime = js_runtime
        self.timeout_seconds = timeout_seconds
        self.max_duration_seconds = max_duration_seconds
        self.max_file_size_bytes = max_file_size_bytes

    def available_strategies(self) -> list[StrategyAttempt]:
        """Build the ordered list of credential strategies whose preconditions hold."""
        attempts = [StrategyAttempt(CredentialStrategy.NONE, (), "no cookies")]
        if self.cookies_file.is_file():
            attempts.append(
                StrategyAttempt(
                    CredentialStrategy.COOKIES_FILE,
                    ("--cookies", str(self.cookies_file)),
                    self.cookies_file.name,
                )
            )
        if self.cookies_browser and self.cookies_browser != "none":
            attempts.append(
                StrategyAttempt(
                    CredentialStrategy.BROWSER,
                    ("--cookies-from-browser", self.cookies_browser),
                    f"browser {self.cookies_browser}",
                )
            )
        return attempts

    def base_args(self) -> list[str]:
        """yt-dlp flags shared by every attempt."""
        args = [
            "-x", "--audio-format", AUDIO_EXTENSION, "--audio-quality", "0",
            "-f", "ba/b",
        ]
        if self.js_runtime:
            args += ["--js-runtimes", self.js_runtime]
        args += [
            "--print-json", "--no-playlist", "--no-warnings",
            "-o", str(self.temp_dir / "%(id)s.%(ext)s"),
        ]
        return args

    async def download(self, request: ExtractionRequest) -> ExtractionResult:
        """Download audio, escalating credentials on bot detection.

        Raises:
            ExtractionError: classified failure of the last attempt, or a
                policy violation (duration, missing file, size).
        """
        await asyncio.to_thread(ensure_temp_dir, self.temp_dir)
        logger.info("Starting download: %s", request.source_url)

        last_result: CommandResult | None = None
        for attempt in self.available_strategies():
            logger.info("Trying %s", attempt.label)
            args = [*self.base_args(), *attempt.flags, request.source_url]
            result = await self.runner.run(args, self.timeout_seconds)

            if result.ok:
                return await self._finish(result.stdout)

            logger.warning("%s failed (exit %d)", attempt.label, result.returncode)
            last_result = result

            if result.timed_out or not is_bot_detection(result.stderr):
                break
            logger.info("Bot detection, escalating to next credential strategy")

        if last_result is None:
            raise ToolFailedError("no credential strategy attempted")
        raise classify_failure(last_result, self.timeout_seconds)

    async def _finish(self, stdout: str) -> ExtractionResult:
        """Parse metadata and enforce duration and size policy."""
        metadata = parse_metadata(stdout)
        title = metadata.get("title") or "Unknown Title"
        duration = metadata.get("duration") or 0
        video_id = str(metadata.get("id") or "unknown")

        if duration > self.max_duration_seconds:
            produced = await asyncio.to_thread(self._locate_file, video_id)
            if produced is not None:
                await asyncio.to_thread(cleanup_file, produced)
            raise DurationExceededError(
                format_duration(duration), format_duration(self.max_duration_seconds)
            )

        file_path = await asyncio.to_thread(self._locate_file, video_id)
        if file_path is None:
            raise AudioFileMissingError()

        # The caller only learns the path on return, so any fault from here on
        # must remove the file itself
        try:
            size = (await asyncio.to_thread(file_path.stat)).st_size
            if size > self.max_file_size_bytes:
                raise FileTooLargeError(size, self.max_file_size_bytes)
            result = ExtractionResult(
                file_path=file_path,
                title=title,
                duration_seconds=int(duration),
                video_id=video_id,
            )
        except BaseException:
            cleanup_file(file_path)
            raise

        logger.info(
            "Download complete: %r (%s) -> %s", title, format_duration(duration), file_path.name
        )
        return result

    def _locate_file(self, video_id: str) -> Path | None:
        """Find the produced file: exact ``<id>.mp3`` first, then any name containing the id."""
        exact = self.temp_dir / f"{video_id}.{AUDIO_EXTENSION}"
        if exact.is_file():
            return exact
        for candidate in sorted(self.temp_dir.iterdir()):
            if video_id in candidate.name and candidate.is_file():
                return candidate
        return None
