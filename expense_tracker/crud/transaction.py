# expense_tracker/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager
from sqlalchemy.sql import Select
from sqlalchemy import select, update, delete, asc, desc, func, or_
from expense_tracker.core.db_utils import with_db_timeout
from expense_tracker.models.category import Category
from expense_tracker.models.transaction import Transaction
from expense_tracker.models.types import ENTRY_TYPES, EntryType
from expense_tracker.schemas.transaction import TransactionListParams
from typing import List, Optional, Tuple
import datetime as dt
import uuid

SORT_COLUMNS = {
    "date": Transaction.date,
    "amount": Transaction.amount,
    "created_at": Transaction.created_at,
}


def build_transaction_filters(user_id: uuid.UUID, params: TransactionListParams) -> list:
    """
    WHERE predicates for a listing request, ANDed together.

    The owner predicate always comes first. Text search covers the
    category name, so callers must LEFT JOIN categories. A ``type`` outside
    income/expense adds no predicate.
    """
    filters = [Transaction.user_id == user_id]

    if params.q:
        filters.append(
            or_(
                Transaction.description.icontains(params.q, autoescape=True),
                Category.name.icontains(params.q, autoescape=True),
            )
        )

    if params.type in ENTRY_TYPES:
        filters.append(Transaction.type == EntryType(params.type))

    if params.category_id is not None:
        filters.append(Transaction.category_id == params.category_id)

    if params.start_date is not None:
        filters.append(Transaction.date >= params.start_date)

    if params.end_date is not None:
        filters.append(Transaction.date <= params.end_date)

    return filters


def build_transaction_queries(user_id: uuid.UUID, params: TransactionListParams) -> Tuple[Select, Select]:
    """Page query and count query over the same join and the same predicates."""
    filters = build_transaction_filters(user_id, params)

    direction = asc if params.sort_order == "asc" else desc
    sort_column = SORT_COLUMNS[params.sort_by]

    data_query = (
        select(Transaction)
        .outerjoin(Transaction.category)
        .options(contains_eager(Transaction.category))
        .where(*filters)
        # id breaks ties so pages never overlap
        .order_by(direction(sort_column), direction(Transaction.id))
        .limit(params.limit)
        .offset(params.offset)
    )

    count_query = (
        select(func.count(Transaction.id))
        .select_from(Transaction)
        .outerjoin(Category, Transaction.category_id == Category.id)
        .where(*filters)
    )

    return data_query, count_query


@with_db_timeout
async def list_transactions_for_user(
    user_id: uuid.UUID,
    params: TransactionListParams,
    db: AsyncSession,
) -> Tuple[List[Transaction], int]:
    """Run both listing queries; returns (page rows, total matching rows)."""
    data_query, count_query = build_transaction_queries(user_id, params)

    result = await db.execute(data_query.execution_options(populate_existing=True))
    transactions = list(result.scalars().all())

    total = (await db.execute(count_query)).scalar_one()
    return transactions, total


@with_db_timeout
async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@with_db_timeout
async def lock_transaction(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> bool:
    """Ownership check that row-locks the transaction until the next commit."""
    result = await db.execute(
        select(Transaction.id)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .with_for_update()
    )
    return result.scalar_one_or_none() is not None


@with_db_timeout
async def create_transaction_for_user(user_id: uuid.UUID, values: dict, db: AsyncSession) -> Transaction:
    new_tx = Transaction(**values, user_id=user_id)
    db.add(new_tx)
    await db.commit()
    return await get_transaction_by_id(new_tx.id, user_id, db)


@with_db_timeout
async def update_transaction(transaction_id: uuid.UUID, user_id: uuid.UUID, values: dict, db: AsyncSession) -> Transaction:
    await db.execute(
        update(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .values(**values)
    )
    await db.commit()
    return await get_transaction_by_id(transaction_id, user_id, db)


@with_db_timeout
async def delete_transaction(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
    await db.execute(
        delete(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    await db.commit()


@with_db_timeout
async def get_totals_by_type(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> dict:
    """{EntryType: (sum of amounts, row count)} for the user's transactions."""
    filters = build_transaction_filters(
        user_id, TransactionListParams(start_date=start_date, end_date=end_date)
    )
    result = await db.execute(
        select(Transaction.type, func.sum(Transaction.amount), func.count(Transaction.id))
        .where(*filters)
        .group_by(Transaction.type)
    )
    return {row[0]: (float(row[1] or 0), row[2]) for row in result.all()}


@with_db_timeout
async def get_totals_by_category(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> list:
    """Rows of (category_id, category_name, type, total), largest total first."""
    filters = build_transaction_filters(
        user_id, TransactionListParams(start_date=start_date, end_date=end_date)
    )
    total = func.sum(Transaction.amount).label("total")
    result = await db.execute(
        select(Transaction.category_id, Category.name, Transaction.type, total)
        .select_from(Transaction)
        .outerjoin(Category, Transaction.category_id == Category.id)
        .where(*filters)
        .group_by(Transaction.category_id, Category.name, Transaction.type)
        .order_by(desc(total))
    )
    return result.all()


@with_db_timeout
async def get_recent_transactions(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 5,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> List[Transaction]:
    """Get the most recent transactions for a user with optional limit"""
    params = TransactionListParams(
        start_date=start_date, end_date=end_date, sort_by="date", sort_order="desc", limit=limit
    )
    data_query, _ = build_transaction_queries(user_id, params)
    result = await db.execute(data_query.execution_options(populate_existing=True))
    return list(result.scalars().all())
