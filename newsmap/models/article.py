from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so comparisons never mix naive/aware values."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Article(BaseModel):
    """Read-only projection of one row of the ``articles`` collection."""

    model_config = ConfigDict(frozen=True)

    id: str
    slug: Optional[str] = None
    title: str = ""
    excerpt: Optional[str] = None
    image_url: Optional[str] = None
    tags: List[str] = []
    category_name: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published: bool = False
    canonical_url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        return value if value is None else str(value)

    @field_validator("tags", "title", "published", mode="before")
    @classmethod
    def _null_to_default(cls, value: object, info: ValidationInfo) -> object:
        # PostgREST returns NULL for unset columns
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    @field_validator("published_at", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def effective_published_at(self) -> Optional[datetime]:
        """``published_at`` when set, otherwise ``created_at``."""
        return self.published_at or self.created_at
