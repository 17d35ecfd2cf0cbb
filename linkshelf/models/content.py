from typing import Dict, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 1000

ContentType = Literal["article", "video"]


class SourceTrace(BaseModel):
    """Which markup field supplied each extracted value.

    ``None`` means no markup field did: the value was synthesized (video
    identity, domain fallback) or is absent.  Diagnostic only.
    """

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    canonical: Optional[str] = None
    fetch_failed: bool = False
    candidates: Dict[str, Dict[str, Optional[str]]] = Field(default_factory=dict)


class ContentRecord(BaseModel):
    """Normalized metadata for one save attempt. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    raw_url: str
    canonical_url: str
    domain: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    content_type: ContentType
    source_trace: SourceTrace = Field(default_factory=SourceTrace)

    @field_validator("title", mode="before")
    @classmethod
    def _truncate_title(cls, value):
        if isinstance(value, str):
            return value[:TITLE_MAX_LENGTH]
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _truncate_description(cls, value):
        if isinstance(value, str):
            return value[:DESCRIPTION_MAX_LENGTH] or None
        return value

    @field_validator("canonical_url")
    @classmethod
    def _reject_undefined(cls, value: str) -> str:
        if value.strip().lower() == "undefined":
            raise ValueError("canonical_url must not be the literal 'undefined'")
        return value

    @field_validator("image_url")
    @classmethod
    def _require_absolute(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parts = urlsplit(value)
            if not parts.scheme or not parts.netloc:
                raise ValueError("image_url must be an absolute URL")
        return value

    @model_validator(mode="after")
    def _video_has_no_description(self) -> "ContentRecord":
        if self.content_type == "video" and self.description is not None:
            raise ValueError("video content never carries a description")
        return self
