# expense_tracker/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging
import uuid

from expense_tracker.schemas.category import CategoryIn, CategoryRead
from expense_tracker.schemas.common import Message
from expense_tracker.crud.category import (
    create_category_for_user,
    get_categories_for_user,
    get_category_by_id,
    update_category,
    delete_category,
)
from expense_tracker.core.database import get_async_session
from expense_tracker.core.auth import User
from expense_tracker.api.deps import get_current_user
from expense_tracker.models.types import DESCRIPTION_MAX_LENGTH, ENTRY_TYPES, NAME_MAX_LENGTH, EntryType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


def validate_category_input(cat_in: CategoryIn) -> dict:
    """Column values for a create/update body, or a 400."""
    name = (cat_in.name or "").strip()
    if not name:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category name is too long")

    category_type = cat_in.type or EntryType.expense.value
    if category_type not in ENTRY_TYPES:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Category type must be income or expense")

    description = cat_in.description or ""
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Description is too long")

    return {
        "name": name,
        "description": description,
        "type": EntryType(category_type),
    }


def _conflict() -> HTTPException:
    return HTTPException(status.HTTP_409_CONFLICT, detail="Category name already exists")


@router.get("", response_model=List[CategoryRead])
async def read_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await get_categories_for_user(user.id, db)

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryIn,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    values = validate_category_input(cat_in)
    # rollback expires the session-bound user
    user_id = user.id
    try:
        return await create_category_for_user(user_id, values, db)
    except IntegrityError:
        await db.rollback()
        logger.info(f"Duplicate category name {values['name']!r} for user {user_id}")
        raise _conflict()

@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await get_category_by_id(category_id, user.id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category

@router.put("/{category_id}", response_model=CategoryRead)
async def update_category_endpoint(
    category_id: uuid.UUID,
    cat_in: CategoryIn,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    values = validate_category_input(cat_in)
    category = await get_category_by_id(category_id, user.id, db, for_update=True)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    try:
        return await update_category(category, values, db)
    except IntegrityError:
        await db.rollback()
        raise _conflict()

@router.delete("/{category_id}", response_model=Message)
async def delete_category_endpoint(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await get_category_by_id(category_id, user.id, db, for_update=True)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    await delete_category(category, db)
    return {"message": "Category deleted successfully"}
