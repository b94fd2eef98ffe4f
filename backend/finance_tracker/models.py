import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

class TransactionType(str, Enum):
    income = "income"
    expense = "expense"

def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)

class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    type: TransactionType = Field(index=True)
    category: str
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    description: str = Field(default="")
    date: dt.date = Field(default_factory=dt.date.today, index=True)
    created_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
