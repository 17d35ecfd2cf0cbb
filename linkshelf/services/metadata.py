"""Metadata extraction for a resolved URL.

:func:`extract` dispatches on the :data:`~linkshelf.services.resolver.ContentSource`
variant produced by the resolver:

``VideoSource``
    oEmbed title → page title → synthesized title.  Image and canonical URL
    are always built from the video ID, never taken from page markup.

``GenericSource``
    One HTML fetch, then an ordered rule list per field (see
    :mod:`linkshelf.services.parsing`).  A failed fetch degrades to a
    minimal record instead of failing the save.

Network access goes exclusively through the injected fetchers, so every
path here can be exercised against canned responses.
"""

import json
import logging
from typing import Optional
from urllib.parse import quote, urlencode, urljoin, urlsplit

import httpx

from linkshelf.errors import FetchError, Outcome, ResolutionError
from linkshelf.models.content import ContentRecord, SourceTrace
from linkshelf.services.fetcher import BROWSER_HEADERS, JSON_HEADERS, Fetcher
from linkshelf.services.parsing import (
    CANONICAL_RULES,
    DESCRIPTION_RULES,
    IMAGE_RULES,
    TITLE_RULES,
    collect_candidates,
    first_match,
    parse_html,
)
from linkshelf.services.resolver import ResolvedUrl, VideoSource

logger = logging.getLogger(__name__)

OEMBED_ENDPOINT = "https://www.youtube.com/oembed"
VIDEO_CANONICAL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"
VIDEO_THUMBNAIL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
VIDEO_TITLE_TEMPLATE = "YouTube Video ({video_id})"

# Failures an injected fetcher may raise; anything else is a bug and propagates
FETCH_EXCEPTIONS = (ValueError, RuntimeError, OSError, httpx.HTTPError, httpx.InvalidURL)


# ---------------------------------------------------------------------------
# Recoverable steps
# ---------------------------------------------------------------------------

async def fetch_html(url: str, html_fetcher: Fetcher) -> Outcome[str]:
    """Fetch *url* with browser-like headers; any failure becomes a :class:`FetchError`."""
    try:
        response = await html_fetcher(url, BROWSER_HEADERS)
    except FETCH_EXCEPTIONS as exc:
        return Outcome(error=FetchError(url, str(exc) or type(exc).__name__))
    if not response.ok:
        return Outcome(error=FetchError(url, f"HTTP {response.status}", response.status))
    return Outcome(response.body)


def oembed_url(video_url: str) -> str:
    return f"{OEMBED_ENDPOINT}?{urlencode({'url': video_url, 'format': 'json'})}"


async def fetch_oembed_title(video_url: str, oembed_fetcher: Fetcher) -> Outcome[str]:
    """Return the non-empty ``title`` from the platform's oEmbed response."""
    endpoint = oembed_url(video_url)
    try:
        response = await oembed_fetcher(endpoint, JSON_HEADERS)
    except FETCH_EXCEPTIONS as exc:
        return Outcome(error=FetchError(endpoint, str(exc) or type(exc).__name__))
    if not response.ok:
        return Outcome(error=FetchError(endpoint, f"HTTP {response.status}", response.status))

    try:
        data = json.loads(response.body)
    except ValueError:
        return Outcome(error=FetchError(endpoint, "invalid JSON body", response.status))

    title = data.get("title") if isinstance(data, dict) else None
    if not isinstance(title, str) or not title.strip():
        return Outcome(error=FetchError(endpoint, "response has no title", response.status))
    return Outcome(title)


def absolutize(href: str, base_url: str) -> Outcome[str]:
    """Resolve *href* against *base_url* into an absolute http(s) URL."""
    try:
        resolved = urljoin(base_url, href.strip())
        parts = urlsplit(resolved)
    except ValueError as exc:
        return Outcome(error=ResolutionError(f"Cannot resolve {href!r}: {exc}"))
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return Outcome(error=ResolutionError(f"Cannot resolve {href!r} to an http(s) URL"))
    return Outcome(resolved)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def fallback_record(resolved: ResolvedUrl) -> ContentRecord:
    """Minimal article record used when the page could not be fetched."""
    return ContentRecord(
        raw_url=resolved.raw_url,
        canonical_url=resolved.cleaned_url,
        domain=resolved.domain,
        title=resolved.domain,
        content_type="article",
        source_trace=SourceTrace(fetch_failed=True),
    )


def extract_from_html(html: str, resolved: ResolvedUrl) -> ContentRecord:
    """Build an article record from already-fetched *html*."""
    soup = parse_html(html)

    title, title_source = first_match(soup, TITLE_RULES)
    description, description_source = first_match(soup, DESCRIPTION_RULES)
    image, image_source = first_match(soup, IMAGE_RULES)
    canonical, canonical_source = first_match(soup, CANONICAL_RULES)

    image_url: Optional[str] = None
    if image:
        outcome = absolutize(image, resolved.raw_url)
        if outcome.ok:
            image_url = outcome.value
        else:
            logger.warning("Dropping image for %s: %s", resolved.raw_url, outcome.error)
            image_source = None

    canonical_url = resolved.cleaned_url
    if canonical:
        outcome = absolutize(canonical, resolved.raw_url)
        if outcome.ok:
            canonical_url = outcome.value
        else:
            logger.warning("Ignoring canonical for %s: %s", resolved.raw_url, outcome.error)
            canonical_source = None

    if not title or not title.strip():
        title, title_source = resolved.domain, None

    trace = SourceTrace(
        title=title_source,
        description=description_source,
        image=image_source,
        canonical=canonical_source,
        candidates={
            "title": collect_candidates(soup, TITLE_RULES),
            "description": collect_candidates(soup, DESCRIPTION_RULES),
            "image": collect_candidates(soup, IMAGE_RULES),
            "canonical": collect_candidates(soup, CANONICAL_RULES),
        },
    )
    return ContentRecord(
        raw_url=resolved.raw_url,
        canonical_url=canonical_url,
        domain=resolved.domain,
        title=title,
        description=description,
        image_url=image_url,
        content_type="article",
        source_trace=trace,
    )


async def extract_article(resolved: ResolvedUrl, html_fetcher: Fetcher) -> ContentRecord:
    page = await fetch_html(resolved.raw_url, html_fetcher)
    if not page.ok:
        logger.warning("Page fetch failed, saving bare URL: %s", page.error)
        return fallback_record(resolved)
    return extract_from_html(page.value, resolved)


async def extract_video(
    resolved: ResolvedUrl,
    source: VideoSource,
    html_fetcher: Fetcher,
    oembed_fetcher: Fetcher,
) -> ContentRecord:
    video_id = quote(source.video_id, safe="")
    title_source: Optional[str] = None

    oembed = await fetch_oembed_title(resolved.raw_url, oembed_fetcher)
    if oembed.ok:
        title, title_source = oembed.value, "oembed"
    else:
        logger.warning("oEmbed lookup failed, falling back to page title: %s", oembed.error)
        title = None
        page = await fetch_html(resolved.raw_url, html_fetcher)
        if page.ok:
            title, title_source = first_match(parse_html(page.value), TITLE_RULES)
        else:
            logger.warning("Video page fetch failed: %s", page.error)

    if not title or not title.strip():
        title, title_source = VIDEO_TITLE_TEMPLATE.format(video_id=video_id), None

    return ContentRecord(
        raw_url=resolved.raw_url,
        canonical_url=VIDEO_CANONICAL_TEMPLATE.format(video_id=video_id),
        domain=resolved.domain,
        title=title,
        description=None,
        image_url=VIDEO_THUMBNAIL_TEMPLATE.format(video_id=video_id),
        content_type="video",
        source_trace=SourceTrace(title=title_source),
    )


async def extract(
    resolved: ResolvedUrl,
    html_fetcher: Fetcher,
    oembed_fetcher: Fetcher,
) -> ContentRecord:
    """Return best-effort metadata for *resolved*.  Never raises for fetch failures."""
    source = resolved.source
    if isinstance(source, VideoSource):
        logger.info("Extracting video metadata for %s (id=%s)", resolved.raw_url, source.video_id)
        return await extract_video(resolved, source, html_fetcher, oembed_fetcher)

    logger.info("Extracting page metadata for %s", resolved.raw_url)
    return await extract_article(resolved, html_fetcher)
