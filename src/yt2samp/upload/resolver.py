"""HTTP transport that pins one hostname to a fixed IP address.

top4top.io is blocked by some resolvers (Cloudflare WARP, ad blockers), so the
host and its subdomains are dialed at a known address while every other
hostname goes through the system resolver. TLS SNI and the Host header keep
the real hostname.

Certificate validation is relaxed on the transport built by
``create_resolved_client`` only: the pinned address does not present a chain
that typical client environments accept. No other client is affected.
"""

import httpx

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class StaticHostResolver:
    """Maps a hostname and all of its subdomains to a fixed address."""

    def __init__(self, hostname: str, address: str) -> None:
        self.hostname = hostname.lower()
        self.address = address

    def resolve(self, hostname: str) -> str | None:
        """Return the pinned address, or None to fall back to the system resolver."""
        host = hostname.lower()
        if host == self.hostname or host.endswith("." + self.hostname):
            return self.address
        return None


class ResolvingTransport(httpx.AsyncBaseTransport):
    """Wraps a transport and rewrites pinned hostnames to their fixed address."""

    def __init__(self, resolver: StaticHostResolver, transport: httpx.AsyncBaseTransport) -> None:
        self.resolver = resolver
        self.transport = transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        hostname = request.url.host
        address = self.resolver.resolve(hostname)
        if address is None:
            return await self.transport.handle_async_request(request)

        # Host header was fixed when the request was built; SNI follows the real name
        pinned = httpx.Request(
            request.method,
            request.url.copy_with(host=address),
            headers=request.headers,
            stream=request.stream,
            extensions={**request.extensions, "sni_hostname": hostname},
        )
        return await self.transport.handle_async_request(pinned)

    async def aclose(self) -> None:
        await self.transport.aclose()


def create_resolved_client(
    hostname: str,
    address: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an AsyncClient that dials ``hostname`` (and subdomains) at ``address``.

    Redirects are not followed automatically; callers resolve them so they can
    keep the redirect target as the page link.

    Args:
        hostname: Host to pin, e.g. "top4top.io".
        address: IPv4 address to dial for that host.
        transport: Inner transport (tests pass ``httpx.MockTransport``).
            Defaults to an unverified ``AsyncHTTPTransport`` scoped to this client.
    """
    inner = transport or httpx.AsyncHTTPTransport(verify=False)
    return httpx.AsyncClient(
        transport=ResolvingTransport(StaticHostResolver(hostname, address), inner),
        headers=BROWSER_HEADERS,
        follow_redirects=False,
    )
