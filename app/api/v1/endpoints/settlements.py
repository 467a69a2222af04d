from typing import List
from fastapi import APIRouter, Depends
from app.api.deps import apply_command, get_group_repository, load_group_or_404
from app.models.group import Group, Settlement
from app.repositories.group_repo import GroupRepository
from app.schemas.settlement import GroupBalancesResponse, MemberBalanceResponse, SettlementPaidRequest
from app.services.balance_service import (
    check_balance_sum,
    compute_balances,
    get_member_expenses,
    get_total_expenses,
)
from app.services.explanation_service import SettlementExplanation, generate_settlement_explanation
from app.services.settlement_service import compute_settlements_for_group

router = APIRouter()


def _status(balance: float) -> str:
    if balance > 0.01:
        return "owed"
    if balance < -0.01:
        return "owes"
    return "settled"


@router.get("/{group_id}/balances", response_model=GroupBalancesResponse)
async def get_balances(
    group_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Net balance of every member in the group"""
    group = await load_group_or_404(repo, group_id)
    balances = compute_balances(
        group.members,
        group.expenses,
        group.paid_settlements,
        valid_member_ids=group.member_ids()
    )
    return GroupBalancesResponse(
        group_id=group.id,
        total_expenses=get_total_expenses(group.expenses),
        balance_check_sum=check_balance_sum(balances),
        balances=[
            MemberBalanceResponse(
                member_id=member.id,
                name=member.name,
                balance=balances[member.id],
                total_paid=get_member_expenses(member.id, group.expenses),
                status=_status(balances[member.id])
            )
            for member in group.members
        ]
    )

@router.get("/{group_id}/settlements", response_model=List[Settlement])
async def get_settlements(
    group_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Suggested payments that settle every outstanding debt"""
    group = await load_group_or_404(repo, group_id)
    return compute_settlements_for_group(group)

@router.post("/{group_id}/settlements/paid", response_model=Group)
async def mark_settlement_paid(
    group_id: str,
    settlement_in: SettlementPaidRequest,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Record a suggested settlement as paid"""
    settlement = Settlement(**settlement_in.model_dump())
    store = await apply_command(
        repo, lambda s: s.mark_settlement_paid(group_id, settlement)
    )
    return store.get_group(group_id)

@router.get("/{group_id}/settlements/explanation", response_model=SettlementExplanation)
async def explain_settlements(
    group_id: str,
    repo: GroupRepository = Depends(get_group_repository)
):
    """Step-by-step explanation of the suggested settlements"""
    group = await load_group_or_404(repo, group_id)
    return generate_settlement_explanation(
        group.members, group.expenses, group.paid_settlements
    )
