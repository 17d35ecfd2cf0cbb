"""Tag-attribute extraction from page markup.

Each metadata field has an ordered tuple of :class:`FieldRule` objects.  The
first rule that yields a non-blank value wins; :func:`collect_candidates`
runs every rule so the losing values can still be recorded for diagnostics.
"""

import re
from typing import Callable, Dict, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup

# Broken page templates sometimes emit this instead of a real href
UNDEFINED_TOKEN = "undefined"


class FieldRule(NamedTuple):
    source: str
    extract: Callable[[BeautifulSoup], Optional[str]]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _exact(value: str) -> re.Pattern:
    return re.compile(rf"^\s*{re.escape(value)}\s*$", re.IGNORECASE)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
    """Return the ``content`` of the first ``<meta>`` whose property/name is *key*.

    Social-preview tags show up under both ``property`` and ``name`` in the
    wild, so both attributes are checked.  Blank content is skipped.
    """
    pattern = _exact(key)
    for attr in ("property", "name"):
        for tag in soup.find_all("meta", attrs={attr: pattern}):
            content = tag.get("content")
            if not _blank(content):
                return str(content)
    return None


def title_text(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    text = tag.get_text(strip=True)
    return text or None


def canonical_href(soup: BeautifulSoup) -> Optional[str]:
    """Return the canonical link href, treating the literal ``"undefined"`` as absent."""
    pattern = _exact("canonical")
    for tag in soup.find_all("link", rel=pattern):
        href = tag.get("href")
        if _blank(href):
            continue
        href = str(href).strip()
        if href.lower() == UNDEFINED_TOKEN:
            return None
        return href
    return None


def _meta(key: str) -> FieldRule:
    return FieldRule(key, lambda soup: meta_content(soup, key))


TITLE_RULES: Tuple[FieldRule, ...] = (
    _meta("og:title"),
    _meta("twitter:title"),
    FieldRule("title", title_text),
)

DESCRIPTION_RULES: Tuple[FieldRule, ...] = (
    _meta("description"),
    _meta("og:description"),
)

IMAGE_RULES: Tuple[FieldRule, ...] = (
    _meta("og:image"),
    _meta("twitter:image"),
)

CANONICAL_RULES: Tuple[FieldRule, ...] = (FieldRule("canonical", canonical_href),)


def first_match(
    soup: BeautifulSoup, rules: Tuple[FieldRule, ...]
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, source)`` from the first rule that yields a value."""
    for rule in rules:
        value = rule.extract(soup)
        if not _blank(value):
            return value, rule.source
    return None, None


def collect_candidates(
    soup: BeautifulSoup, rules: Tuple[FieldRule, ...]
) -> Dict[str, Optional[str]]:
    """Return every rule's value keyed by its source name."""
    return {rule.source: rule.extract(soup) for rule in rules}
