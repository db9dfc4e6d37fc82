# expense_tracker/schemas/category.py
from typing import Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime
import uuid

from expense_tracker.models.types import EntryType

class CategoryIn(BaseModel):
    """Body of POST/PUT /categories. Checked by the route, not by pydantic,
    so that every rejection carries the same messages as the listing API."""
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None

class CategoryRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str = ""
    type: EntryType
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
