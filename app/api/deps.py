import asyncio
from typing import Callable

from fastapi import Depends, HTTPException, status

from app.db.mongo import get_db
from app.repositories.group_repo import GroupRepository
from app.services.group_service import GroupStore
from app.utils.group_validation import GroupValidationError


# One writer at a time, so no command saves over another
_write_lock = asyncio.Lock()


def get_group_repository(db = Depends(get_db)) -> GroupRepository:
    return GroupRepository(db)


async def apply_command(
    repo: GroupRepository,
    command: Callable[[GroupStore], GroupStore]
) -> GroupStore:
    """Load the stored groups, apply one command, save the new snapshot."""
    async with _write_lock:
        store = await repo.load_store()
        try:
            new_store = command(store)
        except (GroupValidationError, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(exc)
            )
        except LookupError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Not found: {exc}"
            )
        await repo.save_store(new_store)
        return new_store


async def load_group_or_404(repo: GroupRepository, group_id: str):
    store = await repo.load_store()
    try:
        return store.get_group(group_id)
    except LookupError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found"
        )
