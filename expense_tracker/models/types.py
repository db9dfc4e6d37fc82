# expense_tracker/models/types.py
import enum


class EntryType(str, enum.Enum):
    """Direction of money movement, shared by categories and transactions."""
    income = "income"
    expense = "expense"


ENTRY_TYPES = tuple(t.value for t in EntryType)

# Column widths; request validation rejects longer values with a 400
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 255
