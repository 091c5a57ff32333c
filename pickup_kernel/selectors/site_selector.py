"""
Module: pickup_kernel.selectors.site_selector
Responsibility: Hierarchical, paginated read model over sites, receptions and
    items.  Pages are counted in sites, never in joined rows.
Architecture position: Kernel > Selectors.  Read-only.  Called by
    ReceptionDesk.list_sites / list_all_sites.

Two-phase listing:
    1. Page the distinct ids of sites that have at least one reception in the
       date window (every site when there is no window), ordered by
       (registered_at, id).
    2. For exactly those ids, fetch every (site, reception, item) row under the
       same window and fold the flat rows into
       SiteWithReceptions -> ReceptionWithItems -> ItemInfo.

Invariants enforced:
    - The reception window is built by ``_reception_window`` and used by both
      phases, so the paged set and the detail set agree.
    - Sites keep the phase-1 order.  Receptions run most recent first.  Items
      run in insertion order (created_at, then ledger position).
    - Null reception/item columns from the outer joins never produce empty
      child entries.

Failure modes:
    - Returns empty results when nothing matches; never raises on absence.

Phases 1 and 2 are separate statements without locks.  A reception created
between them may or may not show up in the detail set.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import NamedTuple
from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, select
from sqlalchemy.orm import Session

from pickup_kernel.domain.dtos import (
    ItemInfo,
    ReceptionInfo,
    ReceptionWithItems,
    SiteInfo,
    SiteListQuery,
    SitePage,
    SiteWithReceptions,
)
from pickup_kernel.domain.values import City, ItemType, ReceptionStatus
from pickup_kernel.logging_config import get_logger
from pickup_kernel.models.item import Item
from pickup_kernel.models.reception import Reception
from pickup_kernel.models.site import Site
from pickup_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.site")


class HierarchyRow(NamedTuple):
    """One flat (site, reception, item) row of the phase-2 join."""

    site_id: UUID
    city: City
    registered_at: datetime
    reception_id: UUID | None = None
    reception_created_at: datetime | None = None
    status: ReceptionStatus | None = None
    item_id: UUID | None = None
    item_type: ItemType | None = None
    item_created_at: datetime | None = None
    position: int | None = None


def assemble_hierarchy(rows: Iterable[HierarchyRow]) -> list[SiteWithReceptions]:
    """
    Fold ordered flat rows into the site -> reception -> item hierarchy.

    A new site entry starts whenever the site id changes; a new reception
    entry starts whenever the reception id changes within the current site;
    every row with an item appends that item to the current reception.
    Rows must arrive grouped by site and, within a site, by reception.

    Pure function: no I/O, no session.
    """
    result: list[SiteWithReceptions] = []

    site: SiteInfo | None = None
    receptions: list[ReceptionWithItems] = []
    reception: ReceptionInfo | None = None
    items: list[ItemInfo] = []

    def flush_reception() -> None:
        if reception is not None:
            receptions.append(ReceptionWithItems(reception=reception, items=tuple(items)))

    def flush_site() -> None:
        if site is not None:
            flush_reception()
            result.append(SiteWithReceptions(site=site, receptions=tuple(receptions)))

    for row in rows:
        if site is None or row.site_id != site.id:
            flush_site()
            site = SiteInfo(id=row.site_id, city=row.city, registered_at=row.registered_at)
            receptions = []
            reception = None
            items = []

        if row.reception_id is None:
            continue

        if reception is None or row.reception_id != reception.id:
            flush_reception()
            reception = ReceptionInfo(
                id=row.reception_id,
                site_id=row.site_id,
                created_at=row.reception_created_at,
                status=row.status,
            )
            items = []

        if row.item_id is not None:
            items.append(
                ItemInfo(
                    id=row.item_id,
                    reception_id=row.reception_id,
                    item_type=row.item_type,
                    created_at=row.item_created_at,
                    position=row.position,
                )
            )

    flush_site()
    return result


def _reception_window(query: SiteListQuery) -> list[ColumnElement[bool]]:
    """Inclusive bounds on reception creation time."""
    conditions: list[ColumnElement[bool]] = []
    if query.start is not None:
        conditions.append(Reception.created_at >= query.start)
    if query.end is not None:
        conditions.append(Reception.created_at <= query.end)
    return conditions


class SiteSelector(BaseSelector[Site]):
    """
    Read-only selector for the site hierarchy.

    Guarantees:
        - ``list_sites_with_receptions`` returns at most ``query.limit`` sites.
        - Paging over all pages yields every matching site exactly once.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _matching_sites(self, query: SiteListQuery):
        """Phase-1 statement: distinct (site id, registered_at) in the window."""
        stmt = select(Site.id, Site.registered_at).select_from(Site)
        if query.has_date_filter:
            stmt = stmt.join(Reception, Reception.site_id == Site.id).where(
                *_reception_window(query)
            )
        return stmt.distinct()

    def page_site_ids(self, query: SiteListQuery) -> list[UUID]:
        """Phase 1: the ids of the sites on the requested page, in order."""
        stmt = (
            self._matching_sites(query)
            .order_by(Site.registered_at, Site.id)
            .offset(query.offset)
            .limit(query.limit)
        )
        return [row.id for row in self.session.execute(stmt)]

    def count_sites(self, query: SiteListQuery) -> int:
        """Number of distinct sites matching the window, ignoring paging."""
        matching = self._matching_sites(query).subquery()
        return self.session.execute(
            select(func.count()).select_from(matching)
        ).scalar_one()

    def fetch_hierarchy_rows(
        self, site_ids: list[UUID], query: SiteListQuery
    ) -> list[HierarchyRow]:
        """Phase 2: flat rows for exactly ``site_ids`` under the same window."""
        if not site_ids:
            return []

        stmt = (
            select(
                Site.id,
                Site.city,
                Site.registered_at,
                Reception.id,
                Reception.created_at,
                Reception.status,
                Item.id,
                Item.item_type,
                Item.created_at,
                Item.position,
            )
            .select_from(Site)
            .outerjoin(
                Reception,
                and_(Reception.site_id == Site.id, *_reception_window(query)),
            )
            .outerjoin(Item, Item.reception_id == Reception.id)
            .where(Site.id.in_(site_ids))
            .order_by(
                Site.registered_at,
                Site.id,
                Reception.created_at.desc(),
                Reception.id,
                Item.created_at,
                Item.position,
            )
        )
        return [HierarchyRow(*row) for row in self.session.execute(stmt)]

    def list_sites_with_receptions(
        self, query: SiteListQuery
    ) -> list[SiteWithReceptions]:
        """
        One page of the hierarchical listing.

        Args:
            query: Validated query (see ``SiteListQuery.build``).

        Returns:
            Sites in (registered_at, id) order, each with its receptions in
            the window and their items.
        """
        site_ids = self.page_site_ids(query)
        sites = assemble_hierarchy(self.fetch_hierarchy_rows(site_ids, query))

        logger.debug(
            "sites_listed",
            extra={
                "page": query.page,
                "limit": query.limit,
                "windowed": query.has_date_filter,
                "site_count": len(sites),
            },
        )
        return sites

    def get_page(self, query: SiteListQuery) -> SitePage:
        """Listing page plus the total number of matching sites."""
        return SitePage(
            query=query,
            sites=tuple(self.list_sites_with_receptions(query)),
            total_sites=self.count_sites(query),
        )

    def list_sites(self) -> list[SiteInfo]:
        """Every site, flat.  No ordering contract."""
        sites = self.session.execute(select(Site)).scalars().all()
        return [SiteInfo.from_model(site) for site in sites]
