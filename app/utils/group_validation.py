"""Group validation utilities."""
from typing import Iterable

from app.models.group import Expense, Group, Member, Settlement
from app.utils.money import is_valid_amount


class GroupValidationError(Exception):
    """Raised when a command would leave a group inconsistent."""
    pass


class GroupNotFoundError(LookupError):
    pass


class MemberNotFoundError(LookupError):
    pass


class ExpenseNotFoundError(LookupError):
    pass


def validate_member(member: Member, existing: Iterable[Member]) -> None:
    """
    Validate a member about to join a group.

    Rules:
    - name must not be blank
    - id must be unique in the group
    - name must be unique in the group (case-insensitive)
    - email, when given, must be unique in the group (case-insensitive)
    """
    if not member.name.strip():
        raise GroupValidationError("Member name is required")

    for other in existing:
        if other.id == member.id:
            raise GroupValidationError(f"Member id '{member.id}' already exists")
        if other.name.strip().lower() == member.name.strip().lower():
            raise GroupValidationError(f"A member named '{member.name}' already exists")
        if member.email and other.email and other.email.lower() == member.email.lower():
            raise GroupValidationError(f"Email '{member.email}' is already in use")


def validate_expense(expense: Expense, group: Group) -> None:
    """
    Validate an expense against the group roster.

    Rules:
    - amount must be positive
    - payer must be a member
    - every participant must be a member
    """
    if not is_valid_amount(expense.amount):
        raise GroupValidationError(f"Expense amount must be positive: {expense.amount}")

    member_ids = set(group.member_ids())
    if expense.paid_by not in member_ids:
        raise GroupValidationError(f"Payer '{expense.paid_by}' is not a member of this group")

    unknown = [participant for participant in expense.participants if participant not in member_ids]
    if unknown:
        raise GroupValidationError(
            f"Participants are not members of this group: {', '.join(unknown)}"
        )


def validate_settlement(settlement: Settlement, group: Group) -> None:
    """Validate a suggested settlement before it is recorded as paid."""
    if not settlement.from_id or not settlement.to_id:
        raise GroupValidationError("Settlement must name a payer and a receiver")

    if settlement.from_id == settlement.to_id:
        raise GroupValidationError("A member cannot pay themselves")

    if not is_valid_amount(settlement.amount):
        raise GroupValidationError(f"Settlement amount must be positive: {settlement.amount}")

    for member_id in (settlement.from_id, settlement.to_id):
        if group.get_member(member_id) is None:
            raise GroupValidationError(f"Settlement involves unknown member '{member_id}'")
