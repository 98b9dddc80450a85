"""Pipeline coordinator: guard -> extraction -> upload -> cleanup.

``PipelineCoordinator.process`` is the single entry point for chat surfaces.
The downloaded audio is deleted and the user's busy marker cleared on every
exit path, including cancellation.
"""

import logging
from pathlib import Path

from yt2samp.config import Settings
from yt2samp.extraction.downloader import AudioDownloader, format_duration
from yt2samp.extraction.runner import CommandRunner
from yt2samp.extraction.urls import build_request
from yt2samp.guard import ConcurrencyGuard
from yt2samp.models.conversion import ConversionResult
from yt2samp.tempfiles import cleanup_file
from yt2samp.upload.top4top import Top4topUploader

logger = logging.getLogger(__name__)


class PipelineCoordinator:
    """Sequences one user's conversion through the shared guard."""

    def __init__(
        self,
        guard: ConcurrencyGuard,
        downloader: AudioDownloader,
        uploader: Top4topUploader,
    ) -> None:
        self.guard = guard
        self.downloader = downloader
        self.uploader = uploader

    async def process(self, source_url: str, user_id: str) -> ConversionResult:
        """Convert a YouTube URL into a hosted audio link.

        Raises:
            Yt2SampError: validation, admission, extraction, or upload failure.
        """
        request = build_request(source_url, user_id)

        with self.guard.hold(user_id):
            file_path: Path | None = None
            try:
                logger.info("Step 1/2: downloading audio for user %s", user_id)
                extraction = await self.downloader.download(request)
                file_path = extraction.file_path

                logger.info("Step 2/2: uploading %s", file_path.name)
                upload = await self.uploader.upload(file_path)
            finally:
                if file_path is not None:
                    cleanup_file(file_path)

        logger.info("Done: %r -> %s", extraction.title, upload.direct_link)
        return ConversionResult(
            title=extraction.title,
            duration=format_duration(extraction.duration_seconds),
            direct_link=upload.direct_link,
            page_link=upload.page_link,
            source_url=request.source_url,
        )


def build_coordinator(settings: Settings, guard: ConcurrencyGuard | None = None) -> PipelineCoordinator:
    """Wire the production pipeline from settings."""
    temp_dir = Path(settings.temp_dir)
    downloader = AudioDownloader(
        CommandRunner(settings.ytdlp_binary),
        temp_dir,
        cookies_file=Path(settings.cookies_file),
        cookies_browser=settings.cookies_browser,
        js_runtime=settings.ytdlp_js_runtime,
        timeout_seconds=settings.download_timeout_seconds,
        max_duration_seconds=settings.max_duration_seconds,
        max_file_size_bytes=settings.max_file_size_bytes,
    )
    uploader = Top4topUploader(
        base_url=settings.upload_base_url,
        host=settings.upload_host,
        host_address=settings.upload_host_address,
        session_timeout_seconds=settings.session_timeout_seconds,
        upload_timeout_seconds=settings.upload_timeout_seconds,
    )
    guard = guard or ConcurrencyGuard(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    return PipelineCoordinator(guard, downloader, uploader)
