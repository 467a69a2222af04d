from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


class MemberCreate(BaseModel):
    """Add a member to a group."""
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class ExpenseCreate(BaseModel):
    """Create or fully replace an expense. Always split equally."""
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    paid_by: str = Field(..., alias="paidBy")
    participants: List[str] = Field(..., min_length=1)
    category: str = "Other"
    date: Optional[datetime] = None
    receipt: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
