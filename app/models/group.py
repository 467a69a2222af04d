"""
Group domain records.

Design principles:
- Every record is an immutable snapshot; changes produce new objects
- Member identity is the id, names are display-only
- Expenses are always split equally among their participants
- Paid settlements are never edited once recorded
- Persisted shape uses camelCase aliases (paidBy, datePaid, ...)
"""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import EmailStr, Field, field_validator, model_validator

from app.models.base import DomainModel, _utcnow, generate_id


EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Accommodation",
    "Entertainment",
    "Shopping",
    "Utilities",
    "Health",
    "Other",
)


class Member(DomainModel):
    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class Expense(DomainModel):
    """
    One purchase paid by a single member on behalf of participants.

    Participants are kept as given: a repeated id is charged once per
    occurrence.
    """
    id: str = Field(default_factory=generate_id, min_length=1)
    description: str = ""
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    paid_by: str = Field(..., alias="paidBy", min_length=1)
    participants: Tuple[str, ...] = Field(..., min_length=1)
    category: str = "Other"
    date: datetime = Field(default_factory=_utcnow)
    receipt: Optional[str] = None

    @field_validator("participants")
    @classmethod
    def participants_not_blank(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not participant.strip() for participant in value):
            raise ValueError("participant ids must be non-empty")
        return value

    @field_validator("category")
    @classmethod
    def known_category(cls, value: str) -> str:
        if value not in EXPENSE_CATEGORIES:
            raise ValueError(f"unknown category: {value}")
        return value


class Settlement(DomainModel):
    """Suggested payment. Computed on demand, never stored."""
    from_id: str = Field(..., alias="from")
    to_id: str = Field(..., alias="to")
    amount: float
    id: Optional[str] = None


class PaidSettlement(DomainModel):
    """A payment that actually happened. Immutable once recorded."""
    id: str = Field(default_factory=generate_id, min_length=1)
    from_id: str = Field(..., alias="from", min_length=1)
    to_id: str = Field(..., alias="to", min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    date_paid: datetime = Field(default_factory=_utcnow, alias="datePaid")

    @model_validator(mode="after")
    def distinct_parties(self) -> "PaidSettlement":
        if self.from_id == self.to_id:
            raise ValueError("a member cannot pay themselves")
        return self


class Group(DomainModel):
    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    members: Tuple[Member, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    paid_settlements: Tuple[PaidSettlement, ...] = Field(default=(), alias="paidSettlements")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def member_ids(self) -> Tuple[str, ...]:
        return tuple(member.id for member in self.members)

    def get_member(self, member_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None
