"""Tests for the credential-escalating yt-dlp downloader (runner mocked)."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from yt2samp.errors import (
    AgeRestrictedError,
    AudioFileMissingError,
    BotDetectedError,
    DownloadTimeoutError,
    DurationExceededError,
    FileTooLargeError,
    MetadataParseError,
    PrivateVideoError,
    ToolFailedError,
    UnsupportedUrlError,
    VideoUnavailableError,
)
from yt2samp.extraction.downloader import (
    AudioDownloader,
    classify_failure,
    format_duration,
    parse_metadata,
)
from yt2samp.extraction.runner import CommandResult
from yt2samp.extraction.urls import build_request
from yt2samp.models.media import CredentialStrategy

URL = "https://youtu.be/abc123XYZ_"
VIDEO_ID = "abc123XYZ_"
BOT_STDERR = "ERROR: [youtube] abc123XYZ_: Sign in to confirm you're not a bot"


def _metadata(**overrides: object) -> str:
    payload = {"id": VIDEO_ID, "title": "Test Song", "duration": 125}
    payload.update(overrides)
    return json.dumps(payload)


def _success(temp_dir: Path, filename: str = f"{VIDEO_ID}.mp3", size: int = 1024, **meta: object):
    """Side effect that writes the audio file like yt-dlp would, then succeeds."""

    async def run(args, timeout_seconds):
        (temp_dir / filename).write_bytes(b"\0" * size)
        return CommandResult(0, "[download] 100%\n" + _metadata(**meta) + "\n", "")

    return run


def _failure(stderr: str) -> CommandResult:
    return CommandResult(1, "", stderr)


def _downloader(temp_dir: Path, runner: MagicMock, **kwargs: object) -> AudioDownloader:
    kwargs.setdefault("cookies_file", temp_dir / "missing-cookies.txt")
    return AudioDownloader(runner, temp_dir, **kwargs)


@pytest.fixture
def runner() -> MagicMock:
    mock = MagicMock()
    mock.run = AsyncMock()
    return mock


# -- Strategy list --


def test_strategies_without_credentials(tmp_path: Path, runner: MagicMock):
    downloader = _downloader(tmp_path, runner)
    assert [a.strategy for a in downloader.available_strategies()] == [CredentialStrategy.NONE]


def test_strategies_with_cookie_file_and_browser(tmp_path: Path, runner: MagicMock):
    cookies = tmp_path / "cookies.txt"
    cookies.write_text("# Netscape HTTP Cookie File\n")
    downloader = _downloader(tmp_path, runner, cookies_file=cookies, cookies_browser="firefox")

    attempts = downloader.available_strategies()

    assert [a.strategy for a in attempts] == [
        CredentialStrategy.NONE,
        CredentialStrategy.COOKIES_FILE,
        CredentialStrategy.BROWSER,
    ]
    assert attempts[1].flags == ("--cookies", str(cookies))
    assert attempts[2].flags == ("--cookies-from-browser", "firefox")


def test_browser_none_is_skipped(tmp_path: Path, runner: MagicMock):
    downloader = _downloader(tmp_path, runner, cookies_browser="none")
    assert len(downloader.available_strategies()) == 1


def test_base_args_request_mp3_without_playlist(tmp_path: Path, runner: MagicMock):
    args = _downloader(tmp_path, runner, js_runtime="node").base_args()

    assert args[:5] == ["-x", "--audio-format", "mp3", "--audio-quality", "0"]
    assert "--print-json" in args
    assert "--no-playlist" in args
    assert args[args.index("--js-runtimes") + 1] == "node"
    assert args[args.index("-o") + 1] == str(tmp_path / "%(id)s.%(ext)s")


def test_base_args_without_js_runtime(tmp_path: Path, runner: MagicMock):
    assert "--js-runtimes" not in _downloader(tmp_path, runner).base_args()


# -- Escalation cascade --


async def test_success_on_first_attempt(tmp_path: Path, runner: MagicMock):
    runner.run.side_effect = _success(tmp_path)
    downloader = _downloader(tmp_path, runner)

    result = await downloader.download(build_request(URL, "U1"))

    assert runner.run.await_count == 1
    assert result.title == "Test Song"
    assert result.duration_seconds == 125
    assert result.video_id == VIDEO_ID
    assert result.file_path == tmp_path / f"{VIDEO_ID}.mp3"
    assert result.file_path.exists()
    args = runner.run.await_args.args[0]
    assert args[-1] == URL
    assert "--cookies" not in args


async def test_bot_detection_escalates_through_all_strategies(tmp_path: Path, runner: MagicMock):
    """[bot, bot, success] makes exactly three attempts."""
    cookies = tmp_path / "cookies.txt"
    cookies.write_text("cookie")
    success = _success(tmp_path)
    outcomes = [_failure(BOT_STDERR), _failure(BOT_STDERR)]

    async def run(args, timeout_seconds):
        if outcomes:
            return outcomes.pop(0)
        return await success(args, timeout_seconds)

    runner.run.side_effect = run
    downloader = _downloader(tmp_path, runner, cookies_file=cookies, cookies_browser="chrome")

    result = await downloader.download(build_request(URL, "U1"))

    assert runner.run.await_count == 3
    assert result.title == "Test Song"
    calls = [call.args[0] for call in runner.run.await_args_list]
    assert "--cookies" in calls[1]
    assert "--cookies-from-browser" in calls[2]


async def test_non_bot_failure_stops_after_one_attempt(tmp_path: Path, runner: MagicMock):
    cookies = tmp_path / "cookies.txt"
    cookies.write_text("cookie")
    runner.run.return_value = _failure("ERROR: Private video. Sign in if you've been granted access")
    downloader = _downloader(tmp_path, runner, cookies_file=cookies, cookies_browser="chrome")

    with pytest.raises(PrivateVideoError):
        await downloader.download(build_request(URL, "U1"))

    assert runner.run.await_count == 1


async def test_all_strategies_bot_detected(tmp_path: Path, runner: MagicMock):
    cookies = tmp_path / "cookies.txt"
    cookies.write_text("cookie")
    runner.run.return_value = _failure(BOT_STDERR)
    downloader = _downloader(tmp_path, runner, cookies_file=cookies)

    with pytest.raises(BotDetectedError):
        await downloader.download(build_request(URL, "U1"))

    assert runner.run.await_count == 2


async def test_timeout_is_not_escalated(tmp_path: Path, runner: MagicMock):
    cookies = tmp_path / "cookies.txt"
    cookies.write_text("cookie")
    runner.run.return_value = CommandResult(-1, "", "Timeout", timed_out=True)
    downloader = _downloader(tmp_path, runner, cookies_file=cookies, timeout_seconds=120)

    with pytest.raises(DownloadTimeoutError):
        await downloader.download(build_request(URL, "U1"))

    assert runner.run.await_count == 1


# -- Policy checks --


async def test_duration_at_maximum_is_accepted(tmp_path: Path, runner: MagicMock):
    runner.run.side_effect = _success(tmp_path, duration=600)
    downloader = _downloader(tmp_path, runner, max_duration_seconds=600)

    result = await downloader.download(build_request(URL, "U1"))

    assert result.duration_seconds == 600


async def test_duration_one_second_over_is_rejected_and_file_deleted(
    tmp_path: Path, runner: MagicMock
):
    runner.run.side_effect = _success(tmp_path, duration=601)
    downloader = _downloader(tmp_path, runner, max_duration_seconds=600)

    with pytest.raises(DurationExceededError) as exc_info:
        await downloader.download(build_request(URL, "U1"))

    assert "10:01" in str(exc_info.value)
    assert "10:00" in str(exc_info.value)
    assert not (tmp_path / f"{VIDEO_ID}.mp3").exists()


async def test_file_found_by_substring(tmp_path: Path, runner: MagicMock):
    runner.run.side_effect = _success(tmp_path, filename=f"{VIDEO_ID}.opus.mp3")
    downloader = _downloader(tmp_path, runner)

    result = await downloader.download(build_request(URL, "U1"))

    assert result.file_path.name == f"{VIDEO_ID}.opus.mp3"


async def test_missing_file_is_reported(tmp_path: Path, runner: MagicMock):
    runner.run.return_value = CommandResult(0, _metadata(), "")
    downloader = _downloader(tmp_path, runner)

    with pytest.raises(AudioFileMissingError):
        await downloader.download(build_request(URL, "U1"))


async def test_oversized_file_is_rejected_and_deleted(tmp_path: Path, runner: MagicMock):
    runner.run.side_effect = _success(tmp_path, size=2048)
    downloader = _downloader(tmp_path, runner, max_file_size_bytes=1024)

    with pytest.raises(FileTooLargeError):
        await downloader.download(build_request(URL, "U1"))

    assert not (tmp_path / f"{VIDEO_ID}.mp3").exists()


async def test_cancellation_after_download_deletes_file(tmp_path: Path, runner: MagicMock):
    runner.run.side_effect = _success(tmp_path)
    downloader = _downloader(tmp_path, runner)

    with patch(
        "yt2samp.extraction.downloader.ExtractionResult", side_effect=asyncio.CancelledError()
    ):
        with pytest.raises(asyncio.CancelledError):
            await downloader.download(build_request(URL, "U1"))

    assert not (tmp_path / f"{VIDEO_ID}.mp3").exists()


async def test_no_strategy_is_a_tool_failure(tmp_path: Path, runner: MagicMock):
    downloader = _downloader(tmp_path, runner)

    with patch.object(AudioDownloader, "available_strategies", return_value=[]):
        with pytest.raises(ToolFailedError):
            await downloader.download(build_request(URL, "U1"))

    runner.run.assert_not_awaited()


async def test_metadata_defaults(tmp_path: Path, runner: MagicMock):
    async def run(args, timeout_seconds):
        (tmp_path / "unknown.mp3").write_bytes(b"\0")
        return CommandResult(0, "{}\n", "")

    runner.run.side_effect = run
    result = await _downloader(tmp_path, runner).download(build_request(URL, "U1"))

    assert result.title == "Unknown Title"
    assert result.duration_seconds == 0
    assert result.video_id == "unknown"


# -- Parsing and classification --


def test_parse_metadata_takes_last_json_line():
    stdout = "\n".join(
        [
            '{"id": "first", "title": "Old"}',
            "[download] 50% of 3.00MiB",
            '{"id": "second", "title": "New"}',
            "[ExtractAudio] Destination: temp/second.mp3",
        ]
    )
    assert parse_metadata(stdout)["id"] == "second"


def test_parse_metadata_without_json_raises():
    with pytest.raises(MetadataParseError):
        parse_metadata("[download] 100%\nDeleting original file\n")


@pytest.mark.parametrize(
    "stderr, error_type",
    [
        (BOT_STDERR, BotDetectedError),
        ("ERROR: Private video", PrivateVideoError),
        ("ERROR: Video unavailable. This video has been removed", VideoUnavailableError),
        ("ERROR: This video is not available in your country", VideoUnavailableError),
        ("ERROR: Please confirm your age to watch this video", AgeRestrictedError),
        ("ERROR: 'foo' is not a valid URL", UnsupportedUrlError),
        ("ERROR: Unsupported URL: https://example.com", UnsupportedUrlError),
        ("ERROR: ffmpeg not found", ToolFailedError),
    ],
)
def test_classify_failure(stderr: str, error_type: type):
    assert isinstance(classify_failure(_failure(stderr), 120), error_type)


def test_unclassified_failure_truncates_diagnostics():
    error = classify_failure(_failure("x" * 500), 120)
    assert isinstance(error, ToolFailedError)
    assert str(error) == "yt-dlp failed: " + "x" * 200


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0:00"), (5, "0:05"), (125, "2:05"), (600, "10:00"), (3725, "62:05"), (61.9, "1:01")],
)
def test_format_duration(seconds: float, expected: str):
    assert format_duration(seconds) == expected
