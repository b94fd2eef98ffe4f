"""
Pydantic schemas for API request/response validation.
Separate from models to control what data is exposed via API.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .models import TransactionType


# ============================================
# Envelope
# ============================================

class Envelope(BaseModel):
    """Uniform response wrapper; unset keys are left out of the JSON."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    id: Optional[int] = None


# ============================================
# Transaction Schemas
# ============================================

class TransactionBase(BaseModel):
    """Base transaction schema."""
    type: TransactionType
    category: str = Field(min_length=1)
    amount: Decimal = Field(
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Amount must be greater than 0, at most two decimal places",
    )
    description: str = ""
    date: dt.date = Field(default_factory=dt.date.today)

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", mode="before")
    @classmethod
    def description_defaults_to_empty(cls, v):
        """A null description is stored as an empty string."""
        return "" if v is None else v

    @field_validator("date", mode="before")
    @classmethod
    def date_defaults_to_today(cls, v):
        return dt.date.today() if v is None else v


class TransactionCreate(TransactionBase):
    """Schema for creating a transaction."""
    pass


class TransactionUpdate(TransactionBase):
    """Schema for replacing a transaction; omitted optional fields are reset."""
    pass


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    id: int
    type: TransactionType
    category: str
    amount: float
    description: str
    date: dt.date
    created_at: dt.datetime

    class Config:
        from_attributes = True


# ============================================
# Statistics Schemas
# ============================================

class CategoryTotal(BaseModel):
    category: str
    type: TransactionType
    total: float


class MonthlyTotal(BaseModel):
    month: str = Field(description="YYYY-MM")
    type: TransactionType
    total: float


class TransactionStats(BaseModel):
    """Schema for transaction statistics."""
    total_income: float = Field(serialization_alias="totalIncome")
    total_expense: float = Field(serialization_alias="totalExpense")
    balance: float
    categories: List[CategoryTotal] = []
    monthly: List[MonthlyTotal] = []


def dump_transaction(transaction) -> dict:
    """JSON-ready dict of a Transaction row."""
    return TransactionResponse.model_validate(transaction).model_dump(mode="json")
