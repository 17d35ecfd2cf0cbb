import asyncio
import ipaddress
import socket
from typing import Awaitable, Callable, Mapping, NamedTuple, Optional
from urllib.parse import urljoin, urlparse

import httpx

from linkshelf.config import settings

ALLOWED_SCHEMES = {"http", "https"}

BROWSER_HEADERS = {
    "User-Agent": settings.user_agent,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}
JSON_HEADERS = {
    "User-Agent": settings.user_agent,
    "Accept": "application/json",
}


class FetchResponse(NamedTuple):
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


# Injected fetch capability: (url, headers) -> FetchResponse
Fetcher = Callable[[str, Optional[Mapping[str, str]]], Awaitable[FetchResponse]]


async def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = await asyncio.get_running_loop().getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = info[4][0].split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


async def _validate_url(url: str) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if await _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


async def fetch_page(
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FetchResponse:
    """Fetch *url* and return its status code and body text.

    Redirects are followed manually so that every redirect destination is
    validated against the SSRF rules before the next request is made.
    Non-success statuses are returned to the caller, not raised.

    Raises:
        ValueError: if the URL fails SSRF / scheme validation.
        httpx.HTTPError: on network errors.
        RuntimeError: if the body exceeds the configured maximum size or
            there are too many redirects.
    """
    await _validate_url(url)

    max_size = settings.max_content_size
    current_url = url
    async with httpx.AsyncClient(
        follow_redirects=False,
        timeout=settings.fetch_timeout,
        headers=dict(headers or BROWSER_HEADERS),
        transport=transport,
    ) as client:
        for _ in range(settings.max_redirects + 1):
            async with client.stream("GET", current_url) as response:
                if response.is_redirect:
                    location = response.headers.get("location", "")
                    next_url = urljoin(current_url, location)
                    await _validate_url(next_url)
                    current_url = next_url
                    continue

                content_length = response.headers.get("content-length")
                if content_length and content_length.isdigit() and int(content_length) > max_size:
                    raise RuntimeError("Response body exceeds the maximum allowed size.")

                chunks = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > max_size:
                        raise RuntimeError("Response body exceeds the maximum allowed size.")
                    chunks.append(chunk)

                encoding = response.encoding or "utf-8"
                return FetchResponse(
                    status=response.status_code,
                    body=b"".join(chunks).decode(encoding, errors="replace"),
                )

    raise RuntimeError("Too many redirects.")
