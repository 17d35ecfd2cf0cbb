"""Save pipeline: resolve → extract → duplicate check → insert."""

import logging
from typing import NamedTuple

from linkshelf.errors import AuthRequiredError, DuplicateItemError
from linkshelf.models.item import StoredItem
from linkshelf.services.fetcher import Fetcher
from linkshelf.services.metadata import extract
from linkshelf.services.resolver import resolve
from linkshelf.services.store import ItemStore

logger = logging.getLogger(__name__)


class SaveOutcome(NamedTuple):
    item: StoredItem
    existing: bool


async def save_url(
    owner_id: str,
    url: str,
    store: ItemStore,
    html_fetcher: Fetcher,
    oembed_fetcher: Fetcher,
    source_client: str = "browser_extension",
    source_platform: str = "chrome",
) -> SaveOutcome:
    """Save *url* to *owner_id*'s list, or return the item already saved under it.

    An already-saved URL is a successful outcome (``existing=True``), not an
    error.  The store's insert-time uniqueness check covers the window between
    the duplicate lookup and the insert.

    Raises:
        AuthRequiredError: if *owner_id* is empty.
        InvalidUrlError: if *url* is not an absolute http(s) URL.
    """
    if not owner_id:
        raise AuthRequiredError("Authentication required to save items")

    resolved = resolve(url)
    logger.info("Processing %s (domain: %s) for owner %s", resolved.raw_url, resolved.domain, owner_id)

    submitted = [resolved.raw_url, resolved.cleaned_url]

    # Skip the fetch entirely when the submitted URL itself is already saved
    existing = await store.find_by_identity(owner_id, submitted, None)
    if existing is None:
        record = await extract(resolved, html_fetcher, oembed_fetcher)
        existing = await store.find_by_identity(owner_id, submitted, record.canonical_url)
    if existing is not None:
        logger.info("Item already exists: %s", existing.id)
        return SaveOutcome(existing, existing=True)

    try:
        item = await store.insert(
            owner_id, resolved.cleaned_url, record, source_client, source_platform
        )
    except DuplicateItemError as exc:
        logger.info("Concurrent save resolved to existing item %s", exc.existing_id)
        item = await store.get(owner_id, exc.existing_id)
        if item is None:
            raise
        return SaveOutcome(item, existing=True)

    return SaveOutcome(item, existing=False)
