"""
Settlement optimization.

Turns a balance map into a short list of debtor -> creditor payments
using greedy largest-first matching:

1. Split members into creditors (> 0.01) and debtors (< -0.01)
2. Sort both largest first; equal amounts keep balance-map order,
   which for compute_balances output is the group's member order
3. For each creditor, scan every debtor and transfer
   min(remaining credit, remaining debt) while both exceed 0.01
4. Emit payments in creditor-major, debtor-minor order

Work happens on private decimal copies; the input map is never touched.
Only emitted amounts are rounded to the cent.
"""

from typing import Dict, List

from app.models.group import Group, Settlement
from app.services.balance_service import compute_balances
from app.utils.money import SETTLED_THRESHOLD, from_cents, to_cents, to_decimal


def partition_balances(balances: Dict[str, float]):
    """Creditors and debtors as unrounded decimals, each sorted largest first."""
    creditors = []
    debtors = []

    for member_id, balance in balances.items():
        amount = to_decimal(balance)
        if amount > SETTLED_THRESHOLD:
            creditors.append({"member_id": member_id, "amount": amount})
        elif amount < -SETTLED_THRESHOLD:
            debtors.append({"member_id": member_id, "amount": -amount})  # Store positive debt

    # list.sort is stable, ties stay in balance-map order
    creditors.sort(key=lambda x: x["amount"], reverse=True)
    debtors.sort(key=lambda x: x["amount"], reverse=True)
    return creditors, debtors


def compute_settlements(balances: Dict[str, float]) -> List[Settlement]:
    """
    Suggested payments that clear every balance to within a cent.

    No creditors or no debtors means nothing to pay. The balance sum is
    not checked here.
    """
    creditors, debtors = partition_balances(balances)
    settlements: List[Settlement] = []

    for creditor in creditors:
        for debtor in debtors:
            if creditor["amount"] <= SETTLED_THRESHOLD:
                break
            if debtor["amount"] <= SETTLED_THRESHOLD:
                continue

            amount = min(creditor["amount"], debtor["amount"])
            settlements.append(Settlement(
                from_id=debtor["member_id"],
                to_id=creditor["member_id"],
                amount=from_cents(to_cents(amount))
            ))

            creditor["amount"] -= amount
            debtor["amount"] -= amount

    return settlements


def compute_settlements_for_group(group: Group) -> List[Settlement]:
    """Balances and settlements for one group in a single call."""
    balances = compute_balances(
        group.members,
        group.expenses,
        group.paid_settlements,
        valid_member_ids=group.member_ids()
    )
    return compute_settlements(balances)
