"""
Module: pickup_kernel.models.item
Responsibility: ORM persistence for items recorded against a reception.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - (reception_id, position) is unique.  position is the 1-based ledger
      ordinal assigned by ItemLedgerService while it holds the reception row
      lock, so positions within a reception are dense and increasing.
    - Items are immutable once created; the only mutation is deletion of the
      most recent item of an open reception.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pickup_kernel.db.base import Base, UUIDString, enum_column_type
from pickup_kernel.domain.values import ItemType


class Item(Base):
    """A unit of goods accepted by a reception."""

    __tablename__ = "items"

    __table_args__ = (
        UniqueConstraint("reception_id", "position", name="uq_items_reception_position"),
        Index("idx_items_reception_created", "reception_id", "created_at"),
    )

    reception_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("receptions.id", ondelete="CASCADE"),
        nullable=False,
    )

    item_type: Mapped[ItemType] = mapped_column(
        enum_column_type(ItemType),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    # Ledger ordinal within the reception (1, 2, 3, ...)
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    reception: Mapped["Reception"] = relationship(  # noqa: F821
        back_populates="items",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Item {self.id} #{self.position}: {self.item_type.value}>"
