"""
Step-by-step explanation of how the suggested settlements were reached.

Runs the same balance and settlement engine as the settlements endpoint,
then describes each stage in plain text for display.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from app.models.group import Expense, Member, PaidSettlement
from app.services.balance_service import check_balance_sum, compute_balances, get_total_expenses
from app.services.settlement_service import partition_balances, compute_settlements
from app.utils.money import format_currency


class CalculationStepDetails(BaseModel):
    member: Optional[str] = None
    amount: Optional[float] = None
    calculation: Optional[str] = None


class CalculationStep(BaseModel):
    id: str
    type: str  # balance_calculation | settlement_optimization | final_result
    title: str
    description: str
    details: Optional[CalculationStepDetails] = None


class ExplanationSummary(BaseModel):
    total_expenses: float
    total_members: int
    total_settlements: int
    balance_check_sum: float


class SettlementExplanation(BaseModel):
    steps: List[CalculationStep]
    summary: ExplanationSummary


GREEDY_STEPS = "\n".join([
    "1. Sort debts (largest first)",
    "2. Sort credits (largest first)",
    "3. Match largest debt with largest credit",
    "4. Transfer min(debt, credit)",
    "5. Repeat until all = 0",
])


def _reduction_percent(naive: int, greedy: int) -> int:
    if naive == 0:
        return 0
    return round((1 - greedy / naive) * 100)


def generate_settlement_explanation(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    paid_settlements: Sequence[PaidSettlement] = ()
) -> SettlementExplanation:
    steps: List[CalculationStep] = []

    def add_step(step_type: str, title: str, description: str, details=None):
        steps.append(CalculationStep(
            id=f"step-{len(steps) + 1}",
            type=step_type,
            title=title,
            description=description,
            details=details
        ))

    names: Dict[str, str] = {member.id: member.name for member in members}
    total_expenses = get_total_expenses(expenses)
    balances = compute_balances(
        members, expenses, paid_settlements, valid_member_ids=list(names)
    )

    add_step(
        "balance_calculation",
        "Current Balances",
        f"After analyzing {len(expenses)} expenses totaling "
        f"{format_currency(total_expenses)}, here's who owes what:"
    )

    lines = []
    for member in members:
        balance = balances[member.id]
        if balance > 0.01:
            lines.append(f"{member.name} should receive {format_currency(balance)}")
        elif balance < -0.01:
            lines.append(f"{member.name} owes {format_currency(abs(balance))}")

    if not lines:
        add_step(
            "balance_calculation",
            "Everyone is settled up!",
            "All members have paid exactly their fair share."
        )
        return SettlementExplanation(
            steps=steps,
            summary=ExplanationSummary(
                total_expenses=total_expenses,
                total_members=len(members),
                total_settlements=0,
                balance_check_sum=0.0
            )
        )

    add_step("balance_calculation", "Balance Summary", "\n".join(lines))
    add_step("settlement_optimization", "Greedy Algorithm Steps", GREEDY_STEPS)

    settlements = compute_settlements(balances)
    creditors, debtors = partition_balances(balances)
    naive = len(creditors) * len(debtors)
    greedy = len(settlements)
    add_step(
        "settlement_optimization",
        "Optimization Result",
        f"Without algorithm: Up to {naive} transactions\n"
        f"With greedy: {greedy} transactions\n"
        f"Reduction: {_reduction_percent(naive, greedy)}%"
    )

    remaining = {member_id: abs(amount) for member_id, amount in balances.items()}
    transactions = []
    for settlement in settlements:
        from_name = names.get(settlement.from_id, "Unknown")
        to_name = names.get(settlement.to_id, "Unknown")
        if settlement.amount == remaining[settlement.from_id]:
            outcome = f"all of {from_name}'s debt"
        elif settlement.amount == remaining[settlement.to_id]:
            outcome = f"all of {to_name}'s credit"
        else:
            outcome = "partial amounts"
        transactions.append(
            f"{from_name} pays {format_currency(settlement.amount)} to {to_name} (settles {outcome})"
        )
        remaining[settlement.from_id] = round(remaining[settlement.from_id] - settlement.amount, 2)
        remaining[settlement.to_id] = round(remaining[settlement.to_id] - settlement.amount, 2)

    if settlements:
        add_step("settlement_optimization", "Optimal Transactions", "\n".join(transactions))
        total_paid = sum(settlement.amount for settlement in settlements)
        plural = "" if len(settlements) == 1 else "s"
        add_step(
            "final_result",
            "Result",
            f"{len(settlements)} transaction{plural} settle {format_currency(total_paid)} "
            f"in debts. Minimum payments needed.",
            details=CalculationStepDetails(amount=round(total_paid, 2))
        )

    return SettlementExplanation(
        steps=steps,
        summary=ExplanationSummary(
            total_expenses=total_expenses,
            total_members=len(members),
            total_settlements=len(settlements),
            balance_check_sum=check_balance_sum(balances)
        )
    )
