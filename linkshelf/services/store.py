"""Item storage boundary.

The save pipeline only talks to an :class:`ItemStore`.  :class:`InMemoryItemStore`
is the reference implementation; it enforces one item per URL identity per
owner at insert time, so two racing saves of the same URL cannot both land.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol, Tuple
from uuid import UUID, uuid4

from linkshelf.errors import DuplicateItemError
from linkshelf.models.content import ContentRecord
from linkshelf.models.item import StoredItem

logger = logging.getLogger(__name__)


class ItemStore(Protocol):
    async def find_by_identity(
        self, owner_id: str, urls: Iterable[str], canonical_url: Optional[str]
    ) -> Optional[StoredItem]: ...

    async def insert(
        self,
        owner_id: str,
        url: str,
        record: ContentRecord,
        source_client: str,
        source_platform: str,
    ) -> StoredItem: ...

    async def get(self, owner_id: str, item_id: UUID) -> Optional[StoredItem]: ...


def identity_urls(item: StoredItem) -> List[str]:
    """Every URL under which *item* counts as already saved."""
    urls = [item.url]
    if item.canonical_url:
        urls.append(item.canonical_url)
    return urls


class InMemoryItemStore:
    def __init__(self) -> None:
        self._items: Dict[UUID, StoredItem] = {}
        # (owner_id, url) -> item id, covering both url and canonical_url
        self._index: Dict[Tuple[str, str], UUID] = {}

    def _lookup(self, owner_id: str, urls: Iterable[str]) -> Optional[StoredItem]:
        for url in urls:
            item_id = self._index.get((owner_id, url))
            if item_id is not None:
                return self._items[item_id]
        return None

    async def find_by_identity(
        self, owner_id: str, urls: Iterable[str], canonical_url: Optional[str]
    ) -> Optional[StoredItem]:
        candidates = list(urls)
        if canonical_url:
            candidates.append(canonical_url)
        return self._lookup(owner_id, candidates)

    async def insert(
        self,
        owner_id: str,
        url: str,
        record: ContentRecord,
        source_client: str,
        source_platform: str,
    ) -> StoredItem:
        item = StoredItem(
            id=uuid4(),
            owner_id=owner_id,
            url=url,
            canonical_url=record.canonical_url,
            domain=record.domain,
            title=record.title,
            description=record.description,
            image_url=record.image_url,
            content_type=record.content_type,
            status="unread",
            source_client=source_client,
            source_platform=source_platform,
            metadata=record.source_trace.model_dump(),
            added_at=datetime.now(timezone.utc),
        )

        # No await between the check and the write, so this is atomic on the event loop
        existing = self._lookup(owner_id, identity_urls(item))
        if existing is not None:
            raise DuplicateItemError(existing.id)
        self._items[item.id] = item
        for identity in identity_urls(item):
            self._index[(owner_id, identity)] = item.id

        logger.info("Stored item %s for owner %s", item.id, owner_id)
        return item

    async def get(self, owner_id: str, item_id: UUID) -> Optional[StoredItem]:
        item = self._items.get(item_id)
        if item is None or item.owner_id != owner_id:
            return None
        return item

    def __len__(self) -> int:
        return len(self._items)
