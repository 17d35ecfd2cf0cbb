"""URL identity resolution: validation, tracking-parameter stripping, video IDs.

:func:`resolve` is the single entry point.  It classifies a submitted URL
once into a :data:`ContentSource` variant so the extractor never has to
re-derive platform identity from domain strings.

No network I/O happens here.
"""

import re
from typing import Literal, NamedTuple, Optional, Union
from urllib.parse import parse_qs, parse_qsl, quote, urlsplit, urlunsplit

from linkshelf.errors import InvalidUrlError

ALLOWED_SCHEMES = {"http", "https"}
DEFAULT_PORTS = {"http": 80, "https": 443}

# Browsers drop tab/CR/LF and percent-encode the remaining C0 controls and DEL
_STRIPPED_CHARS = re.compile(r"[\t\r\n]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# Analytics / referral parameters that never change which content a URL points at
TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "fbclid",
        "gclid",
        "ref",
        "source",
        "mc_cid",
        "mc_eid",
        "msclkid",
        "igshid",
    }
)

# ---------------------------------------------------------------------------
# Video platform hosts
# ---------------------------------------------------------------------------
_LONG_FORM_HOST = "youtube.com"
_SHORT_LINK_HOST = "youtu.be"
_VIDEO_QUERY_PARAM = "v"
# /embed/<id>, /shorts/<id>, /live/<id>
_ID_PATH_PREFIXES = ("embed", "shorts", "live")


class GenericSource(NamedTuple):
    kind: Literal["generic"] = "generic"


class VideoSource(NamedTuple):
    video_id: str
    kind: Literal["video"] = "video"


ContentSource = Union[GenericSource, VideoSource]


class ResolvedUrl(NamedTuple):
    raw_url: str
    domain: str
    cleaned_url: str
    platform_id: Optional[str]

    @property
    def source(self) -> ContentSource:
        if self.platform_id:
            return VideoSource(self.platform_id)
        return GenericSource()


def _host_matches(hostname: str, host: str) -> bool:
    return hostname == host or hostname.endswith("." + host)


def _parse(raw_url: str):
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise InvalidUrlError("URL is required")

    try:
        parts = urlsplit(raw_url.strip())
        # Accessing .port validates the numeric range
        parts.port
    except ValueError as exc:
        raise InvalidUrlError(f"Invalid URL: {raw_url!r} ({exc})") from exc

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(f"Invalid URL: {raw_url!r} (scheme must be http or https)")
    if not parts.hostname:
        raise InvalidUrlError(f"Invalid URL: {raw_url!r} (missing hostname)")
    if _CONTROL_CHARS.search(parts.hostname):
        raise InvalidUrlError(f"Invalid URL: {raw_url!r} (control character in hostname)")
    return parts


def extract_video_id(url: str) -> Optional[str]:
    """Return the video identifier for a known video-platform URL, else ``None``.

    * ``youtube.com`` (and subdomains): the ``v`` query parameter, or the
      segment following ``/embed/``, ``/shorts/`` or ``/live/``.
    * ``youtu.be``: the first path segment.
    """
    parts = urlsplit(url)
    hostname = (parts.hostname or "").lower()
    segments = [s for s in parts.path.split("/") if s]

    if _host_matches(hostname, _LONG_FORM_HOST):
        values = parse_qs(parts.query).get(_VIDEO_QUERY_PARAM)
        if values and values[0]:
            return values[0]
        if len(segments) >= 2 and segments[0] in _ID_PATH_PREFIXES:
            return segments[1]
        return None

    if _host_matches(hostname, _SHORT_LINK_HOST):
        return segments[0] if segments else None

    return None


def strip_tracking_params(url: str) -> str:
    """Remove known tracking query parameters from *url*.

    Surviving parameters keep their order and original encoding; when the
    query becomes empty the ``?`` is dropped.  Applying this twice yields the
    same result as applying it once.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url

    kept = [
        pair
        for pair in parts.query.split("&")
        if pair and _param_name(pair).lower() not in TRACKING_PARAMS
    ]
    return urlunsplit(parts._replace(query="&".join(kept)))


def _param_name(pair: str) -> str:
    """Return the decoded name of a ``name=value`` query pair."""
    decoded = parse_qsl(pair, keep_blank_values=True)
    return decoded[0][0] if decoded else pair.split("=", 1)[0]


def _encode_controls(url: str) -> str:
    url = _STRIPPED_CHARS.sub("", url)
    return _CONTROL_CHARS.sub(lambda match: quote(match.group()), url)


def _normalize_netloc(parts) -> str:
    """Lowercase the host and drop the scheme's default port."""
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    userinfo = parts.netloc.rpartition("@")[0]
    netloc = f"{userinfo}@{host}" if userinfo else host
    port = parts.port
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme):
        netloc = f"{netloc}:{port}"
    return netloc


def resolve(raw_url: str) -> ResolvedUrl:
    """Validate *raw_url* and derive its identities.

    Control characters are percent-encoded in both the raw and cleaned URL.
    The cleaned URL also has a lowercase host, no default port and at least
    ``/`` as its path, so trivially different spellings share one identity.

    Raises:
        InvalidUrlError: if *raw_url* is not an absolute http(s) URL.
    """
    _parse(raw_url)
    raw_url = _encode_controls(raw_url.strip())
    parts = urlsplit(raw_url)

    parts = parts._replace(netloc=_normalize_netloc(parts))
    if not parts.path:
        parts = parts._replace(path="/")
    cleaned_url = strip_tracking_params(urlunsplit(parts))

    return ResolvedUrl(
        raw_url=raw_url,
        domain=parts.hostname,
        cleaned_url=cleaned_url,
        platform_id=extract_video_id(raw_url),
    )
