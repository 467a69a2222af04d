"""
Group commands.

Groups are immutable snapshots. Every command takes a snapshot and
returns a new one; nothing is edited in place. GroupStore holds the
current snapshot of all groups and applies the same commands by group id.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from app.models.base import DomainModel, _utcnow
from app.models.group import Expense, Group, Member, PaidSettlement, Settlement
from app.utils.group_validation import (
    ExpenseNotFoundError,
    GroupNotFoundError,
    GroupValidationError,
    MemberNotFoundError,
    validate_expense,
    validate_member,
    validate_settlement,
)

logger = logging.getLogger(__name__)


def add_member(group: Group, member: Member) -> Group:
    validate_member(member, group.members)
    return group.model_copy(update={"members": group.members + (member,)})


def remove_member(group: Group, member_id: str) -> Group:
    """
    Drop a member and every expense they paid for or took part in.

    Recorded payments stay; balances ignore the ones that now point at
    a missing member.
    """
    if group.get_member(member_id) is None:
        raise MemberNotFoundError(member_id)

    members = tuple(m for m in group.members if m.id != member_id)
    expenses = tuple(
        e for e in group.expenses
        if e.paid_by != member_id and member_id not in e.participants
    )
    return group.model_copy(update={"members": members, "expenses": expenses})


def add_expense(group: Group, expense: Expense) -> Group:
    validate_expense(expense, group)
    if group.get_expense(expense.id) is not None:
        raise GroupValidationError(f"Expense id '{expense.id}' already exists")
    return group.model_copy(update={"expenses": group.expenses + (expense,)})


def update_expense(group: Group, expense: Expense) -> Group:
    if group.get_expense(expense.id) is None:
        raise ExpenseNotFoundError(expense.id)
    validate_expense(expense, group)
    expenses = tuple(expense if e.id == expense.id else e for e in group.expenses)
    return group.model_copy(update={"expenses": expenses})


def delete_expense(group: Group, expense_id: str) -> Group:
    if group.get_expense(expense_id) is None:
        raise ExpenseNotFoundError(expense_id)
    expenses = tuple(e for e in group.expenses if e.id != expense_id)
    return group.model_copy(update={"expenses": expenses})


def mark_settlement_paid(
    group: Group,
    settlement: Settlement,
    date_paid: Optional[datetime] = None
) -> Group:
    """Record a suggested settlement as an actual payment."""
    validate_settlement(settlement, group)
    paid = PaidSettlement(
        from_id=settlement.from_id,
        to_id=settlement.to_id,
        amount=settlement.amount,
        date_paid=date_paid or _utcnow()
    )
    return group.model_copy(update={"paid_settlements": group.paid_settlements + (paid,)})


class GroupStore(DomainModel):
    """All groups plus the currently selected one."""
    groups: Tuple[Group, ...] = ()
    current_group_id: Optional[str] = None

    def get_group(self, group_id: str) -> Group:
        for group in self.groups:
            if group.id == group_id:
                return group
        raise GroupNotFoundError(group_id)

    @property
    def current_group(self) -> Optional[Group]:
        if self.current_group_id is None:
            return None
        try:
            return self.get_group(self.current_group_id)
        except GroupNotFoundError:
            return None

    def _replace(self, group: Group) -> "GroupStore":
        groups = tuple(group if g.id == group.id else g for g in self.groups)
        return self.model_copy(update={"groups": groups})

    def _apply(self, group_id: str, command: Callable[..., Group], *args) -> "GroupStore":
        group = command(self.get_group(group_id), *args)
        logger.info("Applied %s to group %s", command.__name__, group_id)
        return self._replace(group)

    def create_group(self, name: str, description: Optional[str] = None) -> "GroupStore":
        """Add a new empty group and make it current."""
        if not name or not name.strip():
            raise GroupValidationError("Group name is required")
        group = Group(name=name.strip(), description=description)
        logger.info("Created group %s", group.id)
        return self.model_copy(update={
            "groups": self.groups + (group,),
            "current_group_id": group.id
        })

    def update_group(
        self,
        group_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> "GroupStore":
        group = self.get_group(group_id)
        updates = {}
        if name is not None:
            if not name.strip():
                raise GroupValidationError("Group name is required")
            updates["name"] = name.strip()
        if description is not None:
            updates["description"] = description
        return self._replace(group.model_copy(update=updates))

    def delete_group(self, group_id: str) -> "GroupStore":
        self.get_group(group_id)
        current = None if self.current_group_id == group_id else self.current_group_id
        return self.model_copy(update={
            "groups": tuple(g for g in self.groups if g.id != group_id),
            "current_group_id": current
        })

    def select_group(self, group_id: Optional[str]) -> "GroupStore":
        if group_id is not None:
            self.get_group(group_id)
        return self.model_copy(update={"current_group_id": group_id})

    def add_member(self, group_id: str, member: Member) -> "GroupStore":
        return self._apply(group_id, add_member, member)

    def remove_member(self, group_id: str, member_id: str) -> "GroupStore":
        return self._apply(group_id, remove_member, member_id)

    def add_expense(self, group_id: str, expense: Expense) -> "GroupStore":
        return self._apply(group_id, add_expense, expense)

    def update_expense(self, group_id: str, expense: Expense) -> "GroupStore":
        return self._apply(group_id, update_expense, expense)

    def delete_expense(self, group_id: str, expense_id: str) -> "GroupStore":
        return self._apply(group_id, delete_expense, expense_id)

    def mark_settlement_paid(self, group_id: str, settlement: Settlement) -> "GroupStore":
        return self._apply(group_id, mark_settlement_paid, settlement)
