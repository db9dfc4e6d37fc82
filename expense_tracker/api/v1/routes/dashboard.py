# expense_tracker/api/v1/routes/dashboard.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import date

from expense_tracker.core.database import get_async_session
from expense_tracker.core.auth import User
from expense_tracker.crud.transaction import (
    get_recent_transactions,
    get_totals_by_category,
    get_totals_by_type,
)
from expense_tracker.models.types import EntryType
from expense_tracker.schemas.dashboard import CategoryTotal, DashboardSummary
from expense_tracker.schemas.transaction import TransactionRead
from expense_tracker.api.deps import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_LIMIT = 5

@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Returns the figures behind the dashboard cards:
    - Cards: total income, total expense, balance, number of transactions
    - Breakdown: totals per category and type (uncategorised rows grouped together)
    - Table: the latest transactions
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="start_date must not be after end_date")

    totals = await get_totals_by_type(user.id, db, start_date, end_date)
    income, income_count = totals.get(EntryType.income, (0.0, 0))
    expense, expense_count = totals.get(EntryType.expense, (0.0, 0))

    category_rows = await get_totals_by_category(user.id, db, start_date, end_date)
    recent = await get_recent_transactions(db, user.id, RECENT_LIMIT, start_date, end_date)

    return DashboardSummary(
        total_income=round(income, 2),
        total_expense=round(expense, 2),
        balance=round(income - expense, 2),
        transaction_count=income_count + expense_count,
        categories=[
            CategoryTotal(
                category_id=category_id,
                category_name=name,
                type=entry_type,
                total=round(float(total or 0), 2),
            )
            for category_id, name, entry_type, total in category_rows
        ],
        recent_transactions=[TransactionRead.model_validate(tx) for tx in recent],
    )
