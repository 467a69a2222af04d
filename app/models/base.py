import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """Opaque unique identifier for groups, members, expenses and payments."""
    return uuid.uuid4().hex


class DomainModel(BaseModel):
    """Immutable record. Field aliases carry the persisted camelCase names."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        from_attributes=True
    )
