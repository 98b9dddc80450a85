"""Scrape-and-upload client for top4top.io.

The host has no API; uploading means replaying its HTML form:

1. GET the landing page for the hidden ``sid`` field and session cookies.
2. POST a multipart form with ``sid``, the submit button label, and ``file_1_``.
3. Follow the redirect (if any) to the result page and mine it for links.

The raw result HTML is saved next to the uploaded file for diagnosis; the
temp sweep removes it later.
"""

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from urllib.parse import urljoin

import httpx

from yt2samp.errors import (
    HostUnavailableError,
    LinkNotFoundError,
    SessionTokenNotFoundError,
    UploadSourceMissingError,
    UploadTransportError,
)
from yt2samp.models.upload import UploadResult, UploadSession
from yt2samp.upload.links import extract_direct_link
from yt2samp.upload.multipart import FilePart, build_multipart_body
from yt2samp.upload.resolver import create_resolved_client

logger = logging.getLogger(__name__)

# Label of the form's submit button; the host checks it verbatim
SUBMIT_FIELD = "submitr"
SUBMIT_LABEL = "[ رفع الملفات ]"
FILE_FIELD = "file_1_"
MAX_REDIRECTS = 10

# Attribute order of the hidden input is not stable, so try both
SID_PATTERNS = (
    re.compile(r"""name=["']sid["']\s+value=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""name=["']sid["'][^>]*value=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""value=["']([^"']+)["']\s+name=["']sid["']""", re.IGNORECASE),
)


def extract_sid(html: str) -> str | None:
    """Return the hidden ``sid`` value from the landing page, or None."""
    for pattern in SID_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def collect_cookies(response: httpx.Response) -> list[str]:
    """Return ``name=value`` pairs from every Set-Cookie header."""
    return [
        header.split(";", 1)[0].strip()
        for header in response.headers.get_list("set-cookie")
        if header.strip()
    ]


def _is_redirect(response: httpx.Response) -> bool:
    return 300 <= response.status_code < 400 and "location" in response.headers


class Top4topUploader:
    """Uploads a local audio file to top4top.io and returns its links."""

    def __init__(
        self,
        *,
        base_url: str = "https://top4top.io/",
        host: str = "top4top.io",
        host_address: str = "188.165.137.170",
        session_timeout_seconds: float = 60.0,
        upload_timeout_seconds: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url
        self.host = host
        self.host_address = host_address
        self.session_timeout_seconds = session_timeout_seconds
        self.upload_timeout_seconds = upload_timeout_seconds
        self.transport = transport
        self.clock = clock

    async def upload(self, file_path: Path) -> UploadResult:
        """Run the three-phase upload protocol.

        Raises:
            UploadError: any phase failed (host down, token missing, transport
                failure, or no link on the result page).
        """
        if not file_path.is_file():
            raise UploadSourceMissingError(file_path)

        logger.info("Starting upload: %s", file_path.name)
        async with create_resolved_client(self.host, self.host_address, self.transport) as client:
            session = await self.acquire_session(client)
            response = await self.post_file(client, session, file_path)
            html, page_link = await self.resolve_result(client, session, response)

        debug_path = await asyncio.to_thread(self._save_debug_html, file_path.parent, html)
        logger.info("Result HTML saved to %s", debug_path)

        direct_link = extract_direct_link(html)
        if direct_link is None:
            logger.error("No link on result page (first 1000 chars): %s", html[:1000])
            raise LinkNotFoundError(debug_path)

        result = UploadResult(direct_link=direct_link, page_link=page_link or direct_link)
        logger.info("Upload complete: direct=%s page=%s", result.direct_link, result.page_link)
        return result

    async def acquire_session(self, client: httpx.AsyncClient) -> UploadSession:
        """GET the landing page and scrape the session token and cookies."""
        logger.info("Fetching session from %s", self.host)
        response = await self._send(
            "session", client.get(self.base_url, timeout=self.session_timeout_seconds)
        )
        if response.status_code != 200:
            raise HostUnavailableError(self.host, response.status_code)

        sid = extract_sid(response.text)
        if sid is None:
            logger.error("Landing page without sid (first 500 chars): %s", response.text[:500])
            raise SessionTokenNotFoundError(self.host)

        session = UploadSession(sid=sid, cookies=collect_cookies(response))
        logger.info("Session found: sid=%s... cookies=%d", sid[:20], len(session.cookies))
        return session

    async def post_file(
        self, client: httpx.AsyncClient, session: UploadSession, file_path: Path
    ) -> httpx.Response:
        """POST the multipart upload form."""
        content = await asyncio.to_thread(file_path.read_bytes)
        body, content_type = build_multipart_body(
            [("sid", session.sid), (SUBMIT_FIELD, SUBMIT_LABEL)],
            FilePart(name=FILE_FIELD, filename=file_path.name, content=content),
        )
        origin = self.base_url.rstrip("/")
        headers = {
            "Content-Type": content_type,
            "Referer": self.base_url,
            "Origin": origin,
            "Cookie": session.cookie_header,
        }

        logger.info("Uploading %s (%d bytes)", file_path.name, len(content))
        response = await self._send(
            "upload",
            client.post(
                self.base_url, content=body, headers=headers, timeout=self.upload_timeout_seconds
            ),
        )
        logger.info("Upload POST status: %d", response.status_code)
        return response

    async def resolve_result(
        self, client: httpx.AsyncClient, session: UploadSession, response: httpx.Response
    ) -> tuple[str, str | None]:
        """Follow redirects from the POST response to the result page.

        Returns:
            Tuple of (result HTML, first redirect target or None if the POST
            answered inline).
        """
        if not _is_redirect(response):
            return response.text, None

        page_link = urljoin(self.base_url, response.headers["location"])
        current = response
        for _ in range(MAX_REDIRECTS):
            location = urljoin(self.base_url, current.headers["location"])
            logger.info("Following redirect: %s", location)
            current = await self._send(
                "redirect",
                client.get(
                    location,
                    headers={"Cookie": session.cookie_header},
                    timeout=self.session_timeout_seconds,
                ),
            )
            if not _is_redirect(current):
                return current.text, page_link
        raise UploadTransportError("redirect", f"more than {MAX_REDIRECTS} redirects")

    async def _send(self, phase: str, request: Awaitable[httpx.Response]) -> httpx.Response:
        """Await one request, mapping transport failures to UploadTransportError."""
        try:
            return await request
        except httpx.HTTPError as exc:
            logger.warning("Upload %s phase failed: %s", phase, exc)
            raise UploadTransportError(phase, str(exc) or type(exc).__name__) from exc

    def _save_debug_html(self, directory: Path, html: str) -> Path:
        path = directory / f"debug-result-{int(self.clock() * 1000)}.html"
        path.write_text(html, encoding="utf-8")
        return path
