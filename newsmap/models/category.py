from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Category(BaseModel):
    """Read-only projection of one row of the ``categories`` collection."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    parent_id: Optional[str] = None

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> object:
        # Backends hand out integer or UUID keys; compare them as strings.
        return None if value is None else str(value)
