from datetime import datetime
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from linkshelf.models.content import ContentType

ItemStatus = Literal["unread", "in_progress", "read", "archived"]


class StoredItem(BaseModel):
    """A saved reading-list item as returned by the item store."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    owner_id: str
    url: str
    canonical_url: Optional[str]
    domain: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    content_type: ContentType
    status: ItemStatus = "unread"
    source_client: str
    source_platform: str
    metadata: Dict[str, Any]
    added_at: datetime
