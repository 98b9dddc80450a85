"""FastAPI application with lifespan, health, and temp sweep endpoints."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request

from yt2samp.config import get_settings
from yt2samp.extraction.runner import CommandRunner
from yt2samp.logging_config import configure_logging
from yt2samp.pipeline import build_coordinator
from yt2samp.slack.router import router as slack_router
from yt2samp.tempfiles import cleanup_old_files, ensure_temp_dir

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging, check yt-dlp, build the pipeline."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings

    ensure_temp_dir(Path(settings.temp_dir))

    version = await CommandRunner(settings.ytdlp_binary).version()
    if version is None:
        logger.warning(
            "%s not found on PATH; /yt2samp will fail until it is installed "
            "(pip install yt-dlp)",
            settings.ytdlp_binary,
        )
    else:
        logger.info("Found %s %s", settings.ytdlp_binary, version)

    app.state.coordinator = build_coordinator(settings)
    yield


app = FastAPI(
    title="yt2samp",
    lifespan=lifespan,
)
app.include_router(slack_router)


async def verify_scheduler(request: Request) -> None:
    """Verify the scheduler secret header for protected endpoints.

    Compares the X-Scheduler-Secret header against the configured secret.
    Raises HTTPException 403 if the header is missing, empty, or mismatched.
    """
    settings = get_settings()
    secret = request.headers.get("X-Scheduler-Secret", "")
    if not settings.scheduler_secret or secret != settings.scheduler_secret:
        raise HTTPException(status_code=403, detail="Invalid scheduler secret")


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run and local development."""
    return {
        "status": "ok",
        "service": "yt2samp",
        "version": "0.1.0",
    }


@app.post("/cleanup")
async def cleanup_endpoint(request: Request, _: None = Depends(verify_scheduler)):
    """Trigger the temp sweep: delete stale audio/debug files and expired quota windows."""
    settings = get_settings()
    removed = cleanup_old_files(Path(settings.temp_dir), settings.temp_max_age_seconds)
    pruned = request.app.state.coordinator.guard.prune_expired()
    return {"status": "ok", "files_removed": removed, "quotas_pruned": pruned}
