# expense_tracker/schemas/transaction.py
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from decimal import Decimal
import datetime as dt
import math
import uuid

from expense_tracker.models.types import EntryType

SORT_FIELDS = ("date", "amount", "created_at")
SORT_ORDERS = ("asc", "desc")

class TransactionIn(BaseModel):
    amount: Optional[Decimal] = Field(None, description="Positive amount, e.g. 50 or \"12.40\"")
    description: Optional[str] = None
    date: Optional[dt.date] = Field(None, description="Calendar date, YYYY-MM-DD")
    type: Optional[str] = None
    category_id: Optional[uuid.UUID] = None

class TransactionRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: float
    description: str = ""
    date: dt.date
    type: EntryType
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)

class TransactionListParams(BaseModel):
    """Normalised filter/sort/page request for the transaction listing."""
    q: Optional[str] = None
    type: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    sort_by: Literal["date", "amount", "created_at"] = "date"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = 1
    limit: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))

class TransactionPage(BaseModel):
    transactions: List[TransactionRead]
    pagination: Pagination
