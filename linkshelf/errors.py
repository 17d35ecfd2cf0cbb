"""Error taxonomy for the save pipeline.

Fatal errors (:class:`InvalidUrlError`, :class:`AuthRequiredError`) abort a
request and are mapped to HTTP responses in :mod:`linkshelf.main`.

Recoverable errors (:class:`FetchError`, :class:`ResolutionError`) never
escape the extractor: they are carried inside an :class:`Outcome` so the
caller can pick a fallback value and continue with the remaining fields.
"""

from typing import Generic, NamedTuple, Optional, TypeVar

T = TypeVar("T")


class LinkshelfError(Exception):
    """Base class for all errors raised by linkshelf."""


class InvalidUrlError(LinkshelfError, ValueError):
    """The submitted URL is not a syntactically valid absolute http(s) URL."""


class AuthRequiredError(LinkshelfError):
    """No authenticated owner identity is attached to the request."""


class FetchError(LinkshelfError):
    """An HTML or oEmbed fetch failed or returned a non-success status."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class ResolutionError(LinkshelfError):
    """A relative URL could not be resolved into an absolute http(s) URL."""


class DuplicateItemError(LinkshelfError):
    """Raised by a store when an insert would violate per-owner URL uniqueness."""

    def __init__(self, existing_id) -> None:
        super().__init__(f"Item already exists: {existing_id}")
        self.existing_id = existing_id


class Outcome(NamedTuple, Generic[T]):
    """Result of a recoverable step: either a value or the error that prevented it."""

    value: Optional[T] = None
    error: Optional[LinkshelfError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
