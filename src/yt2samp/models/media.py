"""Extraction result and credential strategy models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CredentialStrategy(str, Enum):
    """Ways of authenticating yt-dlp against YouTube, in escalation order."""

    NONE = "none"
    COOKIES_FILE = "cookies_file"
    BROWSER = "browser"


class ExtractionResult(BaseModel):
    """Local audio file produced by yt-dlp.

    The file is owned by the pipeline until the coordinator deletes it.
    """

    model_config = ConfigDict(frozen=True)

    file_path: Path
    title: str = "Unknown Title"
    duration_seconds: int = 0
    video_id: str = "unknown"
