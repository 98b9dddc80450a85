"""Temporary file helpers for downloaded audio and debug HTML snapshots."""

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_temp_dir(temp_dir: Path) -> None:
    """Create the temp directory if it does not exist yet."""
    if not temp_dir.exists():
        temp_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created temp directory %s", temp_dir)


def cleanup_file(file_path: Path) -> None:
    """Delete one file. A missing file is fine; OS errors are logged, not raised."""
    try:
        file_path.unlink(missing_ok=True)
        logger.info("Deleted %s", file_path.name)
    except OSError:
        logger.warning("Failed to delete %s", file_path, exc_info=True)


def cleanup_old_files(temp_dir: Path, max_age_seconds: float = 3600.0) -> int:
    """Delete regular files in the temp directory older than ``max_age_seconds``.

    Returns:
        Number of files removed.
    """
    ensure_temp_dir(temp_dir)
    now = time.time()
    removed = 0
    for entry in temp_dir.iterdir():
        try:
            if entry.is_file() and now - entry.stat().st_mtime > max_age_seconds:
                entry.unlink()
                removed += 1
        except OSError:
            logger.warning("Failed to sweep %s", entry, exc_info=True)

    if removed:
        logger.info("Temp sweep removed %d old file(s)", removed)
    return removed
