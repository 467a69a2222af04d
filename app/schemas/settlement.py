from typing import List
from pydantic import BaseModel, ConfigDict, Field


class SettlementPaidRequest(BaseModel):
    """A suggested settlement the payer has now actually paid."""
    from_id: str = Field(..., alias="from")
    to_id: str = Field(..., alias="to")
    amount: float = Field(..., gt=0, allow_inf_nan=False)

    model_config = ConfigDict(populate_by_name=True)


class MemberBalanceResponse(BaseModel):
    member_id: str
    name: str
    balance: float
    total_paid: float
    status: str  # owed | owes | settled


class GroupBalancesResponse(BaseModel):
    group_id: str
    total_expenses: float
    balance_check_sum: float
    balances: List[MemberBalanceResponse]
