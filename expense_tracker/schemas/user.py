# expense_tracker/schemas/user.py
import uuid
from typing import Optional
from datetime import datetime
from fastapi_users import schemas
from pydantic import BaseModel, Field

# Public fields returned on registration and GET /users/me
class UserRead(schemas.BaseUser[uuid.UUID]):
    username: Optional[str] = None
    created_at: Optional[datetime] = None

class UserCreate(schemas.BaseUserCreate):
    username: Optional[str] = Field(None, max_length=50)

class UserUpdate(schemas.BaseUserUpdate):
    username: Optional[str] = Field(None, max_length=50)

# Fields accepted on PATCH /users/me
class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, max_length=50)
