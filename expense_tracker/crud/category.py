# expense_tracker/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc
from expense_tracker.core.db_utils import with_db_timeout
from expense_tracker.models.category import Category
from typing import List, Optional
import uuid

@with_db_timeout
async def get_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    result = await db.execute(
        select(Category)
        .where(Category.user_id == user_id)
        .order_by(desc(Category.created_at), desc(Category.id))
    )
    return list(result.scalars().all())

@with_db_timeout
async def get_category_by_id(
    category_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    for_update: bool = False,
) -> Optional[Category]:
    """Owner-scoped lookup; another user's category reads as missing."""
    stmt = select(Category).where(Category.id == category_id, Category.user_id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt.execution_options(populate_existing=True))
    return result.scalar_one_or_none()

@with_db_timeout
async def create_category_for_user(user_id: uuid.UUID, values: dict, db: AsyncSession) -> Category:
    new_cat = Category(**values, user_id=user_id)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat

@with_db_timeout
async def update_category(category: Category, values: dict, db: AsyncSession) -> Category:
    for field, value in values.items():
        setattr(category, field, value)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category

@with_db_timeout
async def delete_category(category: Category, db: AsyncSession) -> None:
    # Core DELETE so the FK (ON DELETE SET NULL) detaches transactions
    await db.execute(
        delete(Category).where(Category.id == category.id, Category.user_id == category.user_id)
    )
    await db.commit()
