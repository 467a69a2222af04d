"""
Balance calculation.

Each member's net balance is rebuilt from the full expense and payment
history on every call. Positive means the member should receive money,
negative means they owe.

Algorithm:
1. Seed every member at 0 cents
2. Credit each payer the full expense, debit each participant one share
3. Apply recorded payments (receiver loses credit, payer loses debt)
4. Convert cents back to amounts

Records that cannot be interpreted are skipped, not raised.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence

from app.models.group import Expense, Member, PaidSettlement
from app.utils.money import divide_cents, from_cents, is_valid_amount, sanitize_amount, to_cents

logger = logging.getLogger(__name__)


def _expense_cents(expense) -> Optional[int]:
    """Amount in cents for a usable expense, None for a malformed one."""
    if expense is None:
        return None
    amount = getattr(expense, "amount", None)
    participants = getattr(expense, "participants", None)
    if not is_valid_amount(amount):
        return None
    if not isinstance(participants, (list, tuple)) or not participants:
        return None
    return to_cents(amount)


def _settlement_cents(settlement) -> Optional[int]:
    if settlement is None:
        return None
    amount = getattr(settlement, "amount", None)
    if not is_valid_amount(amount):
        return None
    return to_cents(amount)


def _accumulate_cents(
    balances: Dict[str, int],
    expenses: Iterable[Expense],
    paid_settlements: Iterable[PaidSettlement],
    valid_member_ids: Optional[Iterable[str]] = None
) -> Dict[str, int]:
    for expense in expenses or ():
        amount_cents = _expense_cents(expense)
        if amount_cents is None:
            logger.debug("Skipping malformed expense %r", getattr(expense, "id", None))
            continue

        participants = expense.participants
        share_cents = divide_cents(amount_cents, len(participants))

        payer_id = getattr(expense, "paid_by", None)
        if payer_id in balances:
            balances[payer_id] += amount_cents
        for participant_id in participants:
            if participant_id in balances:
                balances[participant_id] -= share_cents

    allowed = set(valid_member_ids) if valid_member_ids is not None else None
    for settlement in paid_settlements or ():
        amount_cents = _settlement_cents(settlement)
        if amount_cents is None:
            logger.debug("Skipping malformed payment %r", getattr(settlement, "id", None))
            continue
        from_id = getattr(settlement, "from_id", None)
        to_id = getattr(settlement, "to_id", None)
        if allowed is not None and (from_id not in allowed or to_id not in allowed):
            continue

        if to_id in balances:
            balances[to_id] -= amount_cents
        if from_id in balances:
            balances[from_id] += amount_cents

    return balances


def compute_balances_cents(
    members: Sequence[Member],
    expenses: Iterable[Expense],
    paid_settlements: Iterable[PaidSettlement] = (),
    valid_member_ids: Optional[Iterable[str]] = None
) -> Dict[str, int]:
    """Same as compute_balances, but leaves every balance in integer cents."""
    balances = {member.id: 0 for member in members}
    return _accumulate_cents(balances, expenses, paid_settlements, valid_member_ids)


def compute_balances(
    members: Sequence[Member],
    expenses: Iterable[Expense],
    paid_settlements: Iterable[PaidSettlement] = (),
    valid_member_ids: Optional[Iterable[str]] = None
) -> Dict[str, float]:
    """
    Net balance per member id, in member order.

    Ids referenced by expenses or payments but missing from members have
    no slot and contribute nothing. When valid_member_ids is given,
    payments touching any other id are ignored entirely.
    """
    cents = compute_balances_cents(members, expenses, paid_settlements, valid_member_ids)
    return {member_id: from_cents(value) for member_id, value in cents.items()}


def get_member_balance(
    member_id: str,
    expenses: Iterable[Expense],
    paid_settlements: Iterable[PaidSettlement] = (),
    valid_member_ids: Optional[Iterable[str]] = None
) -> float:
    """Balance of a single member."""
    if not member_id:
        return 0.0
    cents = _accumulate_cents({member_id: 0}, expenses, paid_settlements, valid_member_ids)
    return from_cents(cents[member_id])


def get_total_expenses(expenses: Iterable[Expense]) -> float:
    total = sum(cents for cents in map(_expense_cents, expenses or ()) if cents is not None)
    return from_cents(total)


def get_member_expenses(member_id: str, expenses: Iterable[Expense]) -> float:
    """Total fronted by a member across usable expenses."""
    total = 0
    for expense in expenses or ():
        cents = _expense_cents(expense)
        if cents is not None and getattr(expense, "paid_by", None) == member_id:
            total += cents
    return from_cents(total)


def check_balance_sum(balances: Dict[str, float]) -> float:
    """Sum of all balances. Zero (to the cent) for a consistent group."""
    return sanitize_amount(from_cents(sum(to_cents(value) for value in balances.values())))
