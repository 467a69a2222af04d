"""
GroupRepository - Persists every group as one opaque blob.

The blob is read and written wholesale. Loading goes through a strict
typed boundary: either every group validates, or the whole blob is
discarded and the app starts with no groups.
"""

import logging
from datetime import datetime, timezone
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import TypeAdapter, ValidationError

from app.core.config import settings
from app.models.group import Group
from app.services.group_service import GroupStore

logger = logging.getLogger(__name__)

_groups_adapter = TypeAdapter(List[Group])


class GroupRepository:
    """Repository for the stored group list."""

    def __init__(self, db: AsyncIOMotorDatabase, key: str = None):
        self.db = db
        self.collection = db[settings.STORAGE_COLLECTION]
        self.key = key or settings.STORAGE_KEY

    async def load_groups(self) -> List[Group]:
        """
        Read and validate the stored groups.

        Returns [] when nothing is stored yet, or when the stored blob is
        corrupt in any way.
        """
        doc = await self.collection.find_one({"_id": self.key})
        if not doc:
            return []

        try:
            return _groups_adapter.validate_python(doc.get("groups"))
        except ValidationError as exc:
            logger.warning(
                "Discarding corrupt group data under %s (%d errors)",
                self.key, exc.error_count()
            )
            return []

    async def save_groups(self, groups: List[Group]) -> None:
        """Replace the stored blob with the given groups."""
        payload = _groups_adapter.dump_python(list(groups), mode="json", by_alias=True)
        await self.collection.update_one(
            {"_id": self.key},
            {"$set": {"groups": payload, "updated_at": datetime.now(timezone.utc)}},
            upsert=True
        )

    async def load_store(self) -> GroupStore:
        return GroupStore(groups=tuple(await self.load_groups()))

    async def save_store(self, store: GroupStore) -> None:
        await self.save_groups(store.groups)
