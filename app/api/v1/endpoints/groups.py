from typing import List
from fastapi import APIRouter, Depends
from app.api.deps import apply_command, get_group_repository, load_group_or_404
from app.models.group import Expense, Group, Member
from app.repositories.group_repo import GroupRepository
from app.schemas.group import ExpenseCreate, GroupCreate, GroupUpdate, MemberCreate

router = APIRouter()


def _build_expense(expense_in: ExpenseCreate, expense_id: str = None) -> Expense:
    data = expense_in.model_dump(exclude_none=True)
    if expense_id is not None:
        data["id"] = expense_id
    return Expense(**data)


@router.get("/", response_model=List[Group])
async def list_groups(repo: GroupRepository = Depends(get_group_repository)):
    """List all groups"""
    return await repo.load_groups()

@router.post("/", response_model=Group)
async def create_group(
    group_in: GroupCreate,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Create a new, empty group"""
    store = await apply_command(
        repo, lambda s: s.create_group(group_in.name, group_in.description)
    )
    return store.current_group

@router.get("/{group_id}", response_model=Group)
async def get_group(
    group_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Get a group with its members, expenses and recorded payments"""
    return await load_group_or_404(repo, group_id)

@router.patch("/{group_id}", response_model=Group)
async def update_group(
    group_id: str,
    group_in: GroupUpdate,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Rename a group or change its description"""
    store = await apply_command(
        repo, lambda s: s.update_group(group_id, group_in.name, group_in.description)
    )
    return store.get_group(group_id)

@router.delete("/{group_id}")
async def delete_group(
    group_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Delete a group and everything in it"""
    await apply_command(repo, lambda s: s.delete_group(group_id))
    return {"message": "Group deleted successfully"}

@router.post("/{group_id}/members", response_model=Group)
async def add_member(
    group_id: str,
    member_in: MemberCreate,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Add a member to a group"""
    member = Member(**member_in.model_dump())
    store = await apply_command(repo, lambda s: s.add_member(group_id, member))
    return store.get_group(group_id)

@router.delete("/{group_id}/members/{member_id}", response_model=Group)
async def remove_member(
    group_id: str,
    member_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Remove a member along with every expense they were part of"""
    store = await apply_command(repo, lambda s: s.remove_member(group_id, member_id))
    return store.get_group(group_id)

@router.post("/{group_id}/expenses", response_model=Group)
async def add_expense(
    group_id: str,
    expense_in: ExpenseCreate,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Add an expense, split equally among its participants"""
    store = await apply_command(
        repo, lambda s: s.add_expense(group_id, _build_expense(expense_in))
    )
    return store.get_group(group_id)

@router.put("/{group_id}/expenses/{expense_id}", response_model=Group)
async def update_expense(
    group_id: str,
    expense_id: str,
    expense_in: ExpenseCreate,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Replace an existing expense"""
    store = await apply_command(
        repo, lambda s: s.update_expense(group_id, _build_expense(expense_in, expense_id))
    )
    return store.get_group(group_id)

@router.delete("/{group_id}/expenses/{expense_id}", response_model=Group)
async def delete_expense(
    group_id: str,
    expense_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Delete an expense"""
    store = await apply_command(repo, lambda s: s.delete_expense(group_id, expense_id))
    return store.get_group(group_id)
