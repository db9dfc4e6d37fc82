# expense_tracker/api/v1/routes/transactions.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import datetime as dt
import logging
import uuid

from expense_tracker.schemas.common import Message
from expense_tracker.schemas.transaction import (
    SORT_FIELDS,
    SORT_ORDERS,
    Pagination,
    TransactionIn,
    TransactionListParams,
    TransactionPage,
    TransactionRead,
)
from expense_tracker.crud.transaction import (
    create_transaction_for_user,
    delete_transaction,
    get_transaction_by_id,
    list_transactions_for_user,
    lock_transaction,
    update_transaction,
)
from expense_tracker.crud.category import get_category_by_id
from expense_tracker.core.config import Settings, get_app_settings
from expense_tracker.core.database import get_async_session
from expense_tracker.core.auth import User
from expense_tracker.api.deps import get_current_user
from expense_tracker.models.types import DESCRIPTION_MAX_LENGTH, ENTRY_TYPES, EntryType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

CENT = Decimal("0.01")
# NUMERIC(12, 2) holds at most ten integer digits
MAX_AMOUNT = Decimal("9999999999.99")
# OFFSET is a signed 64-bit integer on every supported engine
MAX_OFFSET = 2**63 - 1


def validate_transaction_input(tx_in: TransactionIn) -> dict:
    """Column values for a create/update body, or a 400."""
    if tx_in.amount is None or tx_in.date is None or not tx_in.type:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Amount, date, and type are required")

    if tx_in.type not in ENTRY_TYPES:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Type must be income or expense")

    if not tx_in.amount.is_finite() or tx_in.amount <= 0:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Amount must be greater than 0")
    # bound before quantize, which fails on very wide values
    if tx_in.amount > MAX_AMOUNT:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Amount is too large")
    amount = tx_in.amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Amount must be greater than 0")
    if amount > MAX_AMOUNT:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Amount is too large")

    description = tx_in.description or ""
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Description is too long")

    return {
        "amount": amount,
        "description": description,
        "date": tx_in.date,
        "type": EntryType(tx_in.type),
        "category_id": tx_in.category_id,
    }


def build_list_params(
    settings: Settings,
    q: Optional[str],
    type_: Optional[str],
    category_id: Optional[uuid.UUID],
    start_date: Optional[dt.date],
    end_date: Optional[dt.date],
    sort_by: str,
    sort_order: str,
    page: int,
    limit: Optional[int],
) -> TransactionListParams:
    """Validate sorting and normalise the page window; no storage access."""
    if sort_by not in SORT_FIELDS:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Invalid sort_by parameter")
    if sort_order not in SORT_ORDERS:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Invalid sort_order parameter")

    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)

    return TransactionListParams(
        q=q,
        type=type_,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=min(max(page, 1), MAX_OFFSET // limit + 1),
        limit=limit,
    )


async def ensure_category_owned(category_id: Optional[uuid.UUID], user: User, db: AsyncSession) -> None:
    if category_id is None:
        return
    if await get_category_by_id(category_id, user.id, db) is None:
        logger.info(f"User {user.id} referenced unknown category {category_id}")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Invalid category")


@router.get("", response_model=TransactionPage)
async def read_transactions(
    q: Optional[str] = Query(None, description="Substring of the description or category name"),
    type_: Optional[str] = Query(None, alias="type", description="income or expense; other values are ignored"),
    category_id: Optional[uuid.UUID] = Query(None),
    start_date: Optional[dt.date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[dt.date] = Query(None, description="Inclusive upper bound"),
    sort_by: str = Query("date", description="date, amount or created_at"),
    sort_order: str = Query("desc", description="asc or desc"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
):
    params = build_list_params(
        settings, q, type_, category_id, start_date, end_date, sort_by, sort_order, page, limit
    )
    transactions, total = await list_transactions_for_user(user.id, params, db)
    return TransactionPage(
        transactions=[TransactionRead.model_validate(tx) for tx in transactions],
        pagination=Pagination.build(params.page, params.limit, total),
    )

@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    tx_in: TransactionIn,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    values = validate_transaction_input(tx_in)
    await ensure_category_owned(values["category_id"], user, db)
    return await create_transaction_for_user(user.id, values, db)

@router.get("/{transaction_id}", response_model=TransactionRead)
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return tx

@router.put("/{transaction_id}", response_model=TransactionRead)
async def update_transaction_endpoint(
    transaction_id: uuid.UUID,
    tx_in: TransactionIn,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    values = validate_transaction_input(tx_in)
    if not await lock_transaction(transaction_id, user.id, db):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    await ensure_category_owned(values["category_id"], user, db)
    return await update_transaction(transaction_id, user.id, values, db)

@router.delete("/{transaction_id}", response_model=Message)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    if not await lock_transaction(transaction_id, user.id, db):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    await delete_transaction(transaction_id, user.id, db)
    return {"message": "Transaction deleted successfully"}
