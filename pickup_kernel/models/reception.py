"""
Module: pickup_kernel.models.reception
Responsibility: ORM persistence for receptions -- the open/closed batches
    through which a site accepts goods.
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - At most one reception per site has status OPEN.  ReceptionService
      enforces this under a site row lock; the partial unique index
      ``uq_receptions_one_open_per_site`` backs it at the store level.
    - CLOSED is terminal: ``close()`` refuses a reception that is not open.

Failure modes:
    - IntegrityError from the partial unique index if two open receptions
      race past the service-level check.
    - ValueError from ``close()`` on an already-closed reception.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pickup_kernel.db.base import Base, UUIDString, enum_column_type
from pickup_kernel.domain.values import ReceptionStatus

_OPEN_PREDICATE = text(f"status = '{ReceptionStatus.OPEN.value}'")


class Reception(Base):
    """
    A batch-receiving session at a site.

    Guarantees:
        - status transitions only OPEN -> CLOSED.
        - created_at comes from the injected clock, never the database.
    """

    __tablename__ = "receptions"

    __table_args__ = (
        Index("idx_receptions_site_status", "site_id", "status"),
        Index("idx_receptions_created_at", "created_at"),
        Index(
            "uq_receptions_one_open_per_site",
            "site_id",
            unique=True,
            postgresql_where=_OPEN_PREDICATE,
            sqlite_where=_OPEN_PREDICATE,
        ),
    )

    site_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    status: Mapped[ReceptionStatus] = mapped_column(
        enum_column_type(ReceptionStatus, length=20),
        default=ReceptionStatus.OPEN,
        nullable=False,
    )

    site: Mapped["Site"] = relationship(  # noqa: F821
        back_populates="receptions",
        lazy="raise",
    )

    items: Mapped[list["Item"]] = relationship(  # noqa: F821
        back_populates="reception",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Reception {self.id} site={self.site_id}: {self.status.value}>"

    @property
    def is_open(self) -> bool:
        return self.status == ReceptionStatus.OPEN

    def close(self) -> None:
        """Transition OPEN -> CLOSED.

        Raises: ValueError if the reception is already closed.
        """
        if not self.is_open:
            raise ValueError(f"Reception {self.id} is already closed")
        self.status = ReceptionStatus.CLOSED
