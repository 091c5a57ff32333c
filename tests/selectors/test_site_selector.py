"""
Tests for SiteSelector -- the two-phase, site-counted listing.

Covers:
- Pagination counts sites, never joined rows
- Union of pages is the full set, each site once
- Date window applied identically to paging and detail
- Ordering of sites, receptions and items
"""

from datetime import UTC, datetime, timedelta

import pytest

from pickup_kernel.domain.clock import DeterministicClock
from pickup_kernel.domain.dtos import SiteListQuery
from pickup_kernel.domain.values import City, ItemType, ReceptionStatus
from pickup_kernel.selectors.site_selector import SiteSelector
from pickup_kernel.services.item_ledger import ItemLedgerService
from pickup_kernel.services.reception_service import ReceptionService
from pickup_kernel.services.site_service import SiteService

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock():
    return DeterministicClock(T0)


@pytest.fixture
def world(session, clock, id_provider):
    """Services sharing one clock, so tests can place receptions in time."""
    receptions = ReceptionService(session, clock, id_provider)
    return {
        "sites": SiteService(session, clock, id_provider),
        "receptions": receptions,
        "items": ItemLedgerService(session, clock, id_provider, reception_service=receptions),
    }


@pytest.fixture
def selector(session):
    return SiteSelector(session)


def _register(world, count, city=City.MOSCOW):
    return [
        world["sites"].register_site(city, registered_at=T0 + timedelta(minutes=i))
        for i in range(count)
    ]


class TestPagination:

    def test_page_sizes_over_five_sites(self, world, selector):
        _register(world, 5)

        first = selector.list_sites_with_receptions(SiteListQuery.build(page=1, limit=2))
        third = selector.list_sites_with_receptions(SiteListQuery.build(page=3, limit=2))
        beyond = selector.list_sites_with_receptions(SiteListQuery.build(page=4, limit=2))

        assert len(first) == 2
        assert len(third) == 1
        assert beyond == []

    def test_union_of_pages_is_full_set(self, world, selector):
        sites = _register(world, 5)

        seen = []
        for page in (1, 2, 3):
            seen += [
                s.site.id
                for s in selector.list_sites_with_receptions(
                    SiteListQuery.build(page=page, limit=2)
                )
            ]

        assert seen == [s.id for s in sites]

    def test_site_with_fifty_items_counts_once(self, world, selector):
        busy, quiet = _register(world, 2)
        world["receptions"].open_reception(busy.id)
        for _ in range(50):
            world["items"].add_item(busy.id, ItemType.CLOTHES)

        page = selector.list_sites_with_receptions(SiteListQuery.build(page=1, limit=2))

        assert [s.site.id for s in page] == [busy.id, quiet.id]
        assert len(page[0].receptions[0].items) == 50

    def test_sites_ordered_by_registration(self, world, selector):
        later = world["sites"].register_site(City.KAZAN, registered_at=T0 + timedelta(days=1))
        earlier = world["sites"].register_site(City.KAZAN, registered_at=T0)

        page = selector.list_sites_with_receptions(SiteListQuery.build())

        assert [s.site.id for s in page] == [earlier.id, later.id]

    def test_sites_without_receptions_listed_without_window(self, world, selector):
        (site,) = _register(world, 1)

        (entry,) = selector.list_sites_with_receptions(SiteListQuery.build())

        assert entry.site.id == site.id
        assert entry.site.city is City.MOSCOW
        assert entry.receptions == ()

    def test_count_sites(self, world, selector):
        sites = _register(world, 3)
        world["receptions"].open_reception(sites[0].id)
        for _ in range(4):
            world["items"].add_item(sites[0].id, ItemType.SHOES)

        assert selector.count_sites(SiteListQuery.build(limit=1)) == 3

    def test_get_page(self, world, selector):
        _register(world, 3)

        page = selector.get_page(SiteListQuery.build(page=2, limit=2))

        assert page.total_sites == 3
        assert len(page.sites) == 1
        assert page.query.page == 2


class TestDateWindow:

    def _two_receptions(self, world, clock, site):
        clock.set_time(T0)
        first = world["receptions"].open_reception(site.id)
        world["items"].add_item(site.id, ItemType.ELECTRONICS)
        world["receptions"].close_last_reception(site.id)
        clock.set_time(T0 + timedelta(days=2))
        second = world["receptions"].open_reception(site.id)
        world["items"].add_item(site.id, ItemType.SHOES)
        return first, second

    def test_window_filters_receptions(self, world, clock, selector):
        (site,) = _register(world, 1)
        first, second = self._two_receptions(world, clock, site)

        (entry,) = selector.list_sites_with_receptions(
            SiteListQuery.build(start=T0 + timedelta(days=1), end=T0 + timedelta(days=3))
        )

        assert [r.reception.id for r in entry.receptions] == [second.id]
        assert entry.receptions[0].items[0].item_type is ItemType.SHOES

    def test_bounds_inclusive(self, world, clock, selector):
        (site,) = _register(world, 1)
        first, second = self._two_receptions(world, clock, site)

        (entry,) = selector.list_sites_with_receptions(
            SiteListQuery.build(start=T0, end=T0)
        )

        assert [r.reception.id for r in entry.receptions] == [first.id]

    def test_sites_without_matching_reception_excluded(self, world, clock, selector):
        with_reception, without = _register(world, 2)
        self._two_receptions(world, clock, with_reception)

        page = selector.list_sites_with_receptions(
            SiteListQuery.build(start=T0 - timedelta(days=1))
        )

        assert [s.site.id for s in page] == [with_reception.id]
        assert selector.count_sites(SiteListQuery.build(start=T0 - timedelta(days=1))) == 1

    def test_window_paging_counts_matching_sites_only(self, world, clock, selector):
        sites = _register(world, 4)
        for site in sites[1:]:
            clock.set_time(T0 + timedelta(days=5))
            world["receptions"].open_reception(site.id)

        query = SiteListQuery.build(start=T0 + timedelta(days=4), page=1, limit=2)
        page = selector.list_sites_with_receptions(query)

        assert [s.site.id for s in page] == [sites[1].id, sites[2].id]

    def test_only_end_bound(self, world, clock, selector):
        (site,) = _register(world, 1)
        first, _ = self._two_receptions(world, clock, site)

        (entry,) = selector.list_sites_with_receptions(
            SiteListQuery.build(end=T0 + timedelta(hours=1))
        )

        assert [r.reception.id for r in entry.receptions] == [first.id]


class TestHierarchyOrdering:

    def test_receptions_most_recent_first(self, world, clock, selector):
        (site,) = _register(world, 1)
        opened = []
        for day in range(3):
            clock.set_time(T0 + timedelta(days=day))
            opened.append(world["receptions"].open_reception(site.id))
            world["receptions"].close_last_reception(site.id)

        (entry,) = selector.list_sites_with_receptions(SiteListQuery.build())

        assert [r.reception.id for r in entry.receptions] == [r.id for r in reversed(opened)]
        assert all(r.reception.status is ReceptionStatus.CLOSED for r in entry.receptions)

    def test_items_in_insertion_order(self, world, selector):
        (site,) = _register(world, 1)
        world["receptions"].open_reception(site.id)
        added = [
            world["items"].add_item(site.id, item_type)
            for item_type in (ItemType.SHOES, ItemType.CLOTHES, ItemType.ELECTRONICS)
        ]

        (entry,) = selector.list_sites_with_receptions(SiteListQuery.build())

        assert [i.id for i in entry.receptions[0].items] == [a.id for a in added]

    def test_empty_reception_has_no_items(self, world, selector):
        (site,) = _register(world, 1)
        world["receptions"].open_reception(site.id)

        (entry,) = selector.list_sites_with_receptions(SiteListQuery.build())

        assert len(entry.receptions) == 1
        assert entry.receptions[0].items == ()
        assert entry.receptions[0].reception.is_open

    def test_receptions_do_not_leak_between_sites(self, world, selector):
        a, b = _register(world, 2)
        world["receptions"].open_reception(a.id)
        world["items"].add_item(a.id, ItemType.SHOES)

        page = selector.list_sites_with_receptions(SiteListQuery.build())

        assert len(page[0].receptions) == 1
        assert page[1].site.id == b.id
        assert page[1].receptions == ()


class TestListSites:

    def test_flat_enumeration(self, world, selector):
        sites = _register(world, 3)

        listed = selector.list_sites()

        assert {s.id for s in listed} == {s.id for s in sites}

    def test_empty(self, selector):
        assert selector.list_sites() == []
