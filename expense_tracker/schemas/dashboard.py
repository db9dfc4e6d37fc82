# expense_tracker/schemas/dashboard.py
from typing import List, Optional
from pydantic import BaseModel
import uuid

from expense_tracker.models.types import EntryType
from expense_tracker.schemas.transaction import TransactionRead

class CategoryTotal(BaseModel):
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    type: EntryType
    total: float

class DashboardSummary(BaseModel):
    total_income: float
    total_expense: float
    balance: float
    transaction_count: int
    categories: List[CategoryTotal]
    recent_transactions: List[TransactionRead]
