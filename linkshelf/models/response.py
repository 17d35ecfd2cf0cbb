from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from linkshelf.models.content import ContentType
from linkshelf.models.item import ItemStatus


class ExistingItemResponse(BaseModel):
    """Returned with HTTP 200 when the URL is already on the owner's list."""

    message: str = "Item already exists"
    id: UUID
    existing: bool = True
    status: ItemStatus


class ItemSummary(BaseModel):
    """Compact view of a newly added item (manual add endpoint)."""

    id: UUID
    status: ItemStatus
    content_type: ContentType
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    domain: str
    added_at: datetime


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
