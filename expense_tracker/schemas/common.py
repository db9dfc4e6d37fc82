# expense_tracker/schemas/common.py
from pydantic import BaseModel

class Message(BaseModel):
    message: str
