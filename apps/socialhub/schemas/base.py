from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from socialhub.schemas.ids import PyObjectId


class WireModel(BaseModel):
    """Base for payloads exchanged with the web client (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class MongoRecord(WireModel):
    """A stored document: Mongo `_id` plus the app-managed timestamps."""

    model_config = ConfigDict(extra="ignore")

    id: PyObjectId = Field(alias="_id")
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["MongoRecord", "WireModel"]
