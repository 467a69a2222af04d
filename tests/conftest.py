import asyncio
from datetime import datetime, timezone
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_group_repository
from app.main import app
from app.models.group import Expense, Group, Member, PaidSettlement
from app.services.group_service import GroupStore


class InMemoryGroupRepository:
    """Stands in for GroupRepository in API tests."""

    def __init__(self, groups: List[Group] = None):
        self.groups = list(groups or [])
        self.saves = 0

    async def load_groups(self) -> List[Group]:
        return list(self.groups)

    async def save_groups(self, groups) -> None:
        self.groups = list(groups)
        self.saves += 1

    async def load_store(self) -> GroupStore:
        return GroupStore(groups=tuple(self.groups))

    async def save_store(self, store: GroupStore) -> None:
        await self.save_groups(store.groups)


@pytest.fixture
def alice():
    return Member(id="alice", name="Alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Member(id="bob", name="Bob")


@pytest.fixture
def carol():
    return Member(id="carol", name="Carol")


@pytest.fixture
def members(alice, bob, carol):
    return [alice, bob, carol]


@pytest.fixture
def dinner(alice, bob, carol):
    """Alice pays $30 for all three."""
    return Expense(
        id="dinner",
        description="Dinner",
        amount=30.0,
        paid_by=alice.id,
        participants=[alice.id, bob.id, carol.id],
        category="Food & Dining",
        date=datetime(2024, 5, 1, tzinfo=timezone.utc)
    )


@pytest.fixture
def bob_paid_alice(alice, bob):
    return PaidSettlement(
        id="p1",
        from_id=bob.id,
        to_id=alice.id,
        amount=10.0,
        date_paid=datetime(2024, 5, 2, tzinfo=timezone.utc)
    )


@pytest.fixture
def trip(members, dinner):
    return Group(id="trip", name="Weekend Trip", members=members, expenses=[dinner])


@pytest.fixture
def mock_db():
    """Motor database double whose collections are MagicMocks with async methods."""
    db = MagicMock()
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    db.__getitem__.return_value = collection
    return db


@pytest.fixture
def repo(trip):
    return InMemoryGroupRepository([trip])


class SlowGroupRepository(InMemoryGroupRepository):
    """Yields to the event loop between reading and returning the stored groups."""

    async def load_store(self) -> GroupStore:
        store = GroupStore(groups=tuple(self.groups))
        await asyncio.sleep(0.01)
        return store


@pytest.fixture
def slow_repo(trip):
    return SlowGroupRepository([trip])


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_group_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
