# expense_tracker/models/category.py
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Uuid, UniqueConstraint, func
from sqlalchemy.orm import relationship
from expense_tracker.core.database import Base
from expense_tracker.models.types import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, EntryType

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        # Names are unique per owner, not globally
        UniqueConstraint("user_id", "name", name="uq_categories_user_id_name"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=NAME_MAX_LENGTH), nullable=False)
    description = Column(String(length=DESCRIPTION_MAX_LENGTH), nullable=False, default="")
    type = Column(
        Enum(EntryType, name="entry_type", native_enum=False, length=10),
        nullable=False,
        default=EntryType.expense,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="categories")
    # No ORM cascade: the FK's ON DELETE SET NULL detaches transactions
    transactions = relationship("Transaction", back_populates="category", passive_deletes="all")

    def __repr__(self):
        return f"<Category name={self.name} user_id={self.user_id}>"
