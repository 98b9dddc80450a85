"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    # Scheduler (temp file sweep)
    scheduler_secret: str = ""

    # Extraction (yt-dlp)
    ytdlp_binary: str = "yt-dlp"
    ytdlp_js_runtime: str = "node"  # Empty string disables --js-runtimes
    cookies_file: str = "cookies.txt"
    cookies_browser: str = ""  # e.g. "chrome", "firefox"; "none" disables
    download_timeout_seconds: float = 120.0
    max_duration_seconds: int = 600
    max_file_size_bytes: int = 50 * 1024 * 1024

    # Upload (top4top.io)
    upload_base_url: str = "https://top4top.io/"
    upload_host: str = "top4top.io"
    upload_host_address: str = "188.165.137.170"
    session_timeout_seconds: float = 60.0
    upload_timeout_seconds: float = 300.0

    # Concurrency guard
    rate_limit_max_requests: int = 2
    rate_limit_window_seconds: float = 600.0

    # Temp files
    temp_dir: str = "temp"
    temp_max_age_seconds: float = 3600.0

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
