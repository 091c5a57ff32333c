"""
Module: pickup_kernel.models.site
Responsibility: ORM persistence for pickup points (sites).
Architecture position: Kernel > Models.  May import from db/ and
    domain/values.py only.

Invariants enforced:
    - Site id is unique (primary key).  Duplicate registration surfaces as
      IntegrityError and is translated to SiteAlreadyExistsError by
      SiteService.
    - city is a member of the closed City enumeration.
    - Sites are immutable after creation; no service updates them.

Failure modes:
    - IntegrityError on duplicate id.
"""

from datetime import datetime

from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pickup_kernel.db.base import Base, enum_column_type
from pickup_kernel.domain.values import City


class Site(Base):
    """
    A pickup point that accepts goods through receptions.

    Site rows are the row-lock anchor for opening receptions: SELECT ...
    FOR UPDATE on the site serializes concurrent open attempts.
    """

    __tablename__ = "sites"

    __table_args__ = (
        Index("idx_sites_registered_at", "registered_at", "id"),
    )

    city: Mapped[City] = mapped_column(
        enum_column_type(City),
        nullable=False,
    )

    registered_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    receptions: Mapped[list["Reception"]] = relationship(  # noqa: F821
        back_populates="site",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Site {self.id}: {self.city.value}>"
