"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable structures that leave the kernel: SiteInfo,
    ReceptionInfo, ItemInfo, and the read-model hierarchy
    SiteWithReceptions -> ReceptionWithItems -> ItemInfo.  Also defines
    SiteListQuery, the validated query struct for the paginated listing, and
    the PaginationPolicy that decides how out-of-range page/limit are treated.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked from
    services and selectors only.

Invariants enforced:
    - Services and selectors return DTOs, never ORM entities.
    - SiteListQuery is built once at the entry point; defaulting and clamping
      of page/limit happen in ``SiteListQuery.build`` and nowhere else.
    - start > end is rejected before any query is issued.

Failure modes:
    - InvalidDateRangeError when start is after end.
    - InvalidPaginationError for out-of-range page/limit under a strict policy.
    - InvalidValueError for naive start/end datetimes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pickup_kernel.domain.values import City, ItemType, ReceptionStatus
from pickup_kernel.exceptions import (
    InvalidDateRangeError,
    InvalidPaginationError,
    InvalidValueError,
)

if TYPE_CHECKING:
    from pickup_kernel.models.item import Item as ItemModel
    from pickup_kernel.models.reception import Reception as ReceptionModel
    from pickup_kernel.models.site import Site as SiteModel


def require_aware(field_name: str, value: datetime | None) -> None:
    """Reject naive datetimes at the boundary; every stored timestamp is UTC."""
    if value is not None and value.tzinfo is None:
        raise InvalidValueError(field_name, value, ("timezone-aware datetime",))


@dataclass(frozen=True)
class SiteInfo:
    """A registered pickup point."""

    id: UUID
    city: City
    registered_at: datetime

    @classmethod
    def from_model(cls, model: SiteModel) -> SiteInfo:
        return cls(id=model.id, city=model.city, registered_at=model.registered_at)


@dataclass(frozen=True)
class ReceptionInfo:
    """A reception (batch) at a site."""

    id: UUID
    site_id: UUID
    created_at: datetime
    status: ReceptionStatus

    @property
    def is_open(self) -> bool:
        return self.status is ReceptionStatus.OPEN

    @classmethod
    def from_model(cls, model: ReceptionModel) -> ReceptionInfo:
        return cls(
            id=model.id,
            site_id=model.site_id,
            created_at=model.created_at,
            status=model.status,
        )


@dataclass(frozen=True)
class ItemInfo:
    """An item recorded against a reception."""

    id: UUID
    reception_id: UUID
    item_type: ItemType
    created_at: datetime
    position: int

    @classmethod
    def from_model(cls, model: ItemModel) -> ItemInfo:
        return cls(
            id=model.id,
            reception_id=model.reception_id,
            item_type=model.item_type,
            created_at=model.created_at,
            position=model.position,
        )


@dataclass(frozen=True)
class ReceptionWithItems:
    """A reception and its items in insertion order."""

    reception: ReceptionInfo
    items: tuple[ItemInfo, ...] = ()


@dataclass(frozen=True)
class SiteWithReceptions:
    """
    Read-model node: a site with its receptions, most recent first.

    Never persisted and never mutated; rebuilt on every read.
    """

    site: SiteInfo
    receptions: tuple[ReceptionWithItems, ...] = ()


# ---------------------------------------------------------------------------
# Paginated listing query
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginationPolicy:
    """
    Bounds and defaults for site listing pagination.

    ``strict=False`` substitutes defaults for out-of-range values;
    ``strict=True`` rejects them with InvalidPaginationError.
    """

    default_page: int = 1
    default_limit: int = 10
    max_limit: int = 30
    strict: bool = False

    def __post_init__(self) -> None:
        if self.default_page < 1:
            raise ValueError(f"default_page must be >= 1, got {self.default_page}")
        if not 1 <= self.default_limit <= self.max_limit:
            raise ValueError(
                f"default_limit must be in [1, {self.max_limit}], got {self.default_limit}"
            )


@dataclass(frozen=True)
class SiteListQuery:
    """
    Validated parameters for ``SiteSelector.list_sites_with_receptions``.

    Contract:
        - ``start``/``end`` are inclusive bounds on reception creation time;
          either may be None.
        - ``page`` >= 1 and 1 <= ``limit`` <= policy max once built.
    """

    start: datetime | None = None
    end: datetime | None = None
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_date_filter(self) -> bool:
        return self.start is not None or self.end is not None

    @classmethod
    def build(
        cls,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
        policy: PaginationPolicy | None = None,
    ) -> SiteListQuery:
        """
        Build a query from raw, optional caller input.

        Raises:
            InvalidDateRangeError: If start is after end.
            InvalidPaginationError: If page/limit are out of range and the
                policy is strict.
        """
        policy = policy or PaginationPolicy()

        for name, bound in (("start", start), ("end", end)):
            require_aware(name, bound)

        if start is not None and end is not None and start > end:
            raise InvalidDateRangeError(start.isoformat(), end.isoformat())

        if page is None:
            page = policy.default_page
        elif page < 1:
            if policy.strict:
                raise InvalidPaginationError("page", page, 1)
            page = policy.default_page

        if limit is None:
            limit = policy.default_limit
        elif not 1 <= limit <= policy.max_limit:
            if policy.strict:
                raise InvalidPaginationError("limit", limit, 1, policy.max_limit)
            limit = policy.default_limit

        return cls(start=start, end=end, page=page, limit=limit)


@dataclass(frozen=True)
class SitePage:
    """One page of the hierarchical listing plus paging metadata."""

    query: SiteListQuery
    sites: tuple[SiteWithReceptions, ...] = field(default_factory=tuple)
    total_sites: int | None = None
