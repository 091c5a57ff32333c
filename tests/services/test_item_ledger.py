"""
Tests for ItemLedgerService -- append and remove-most-recent over a site's
open reception.

Covers:
- Items attach to the open reception only
- Last-in-first-out removal, including timestamp ties
- N deletes on N items, then NoItems
- Positions stay unique per reception
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from pickup_kernel.domain.clock import DeterministicClock
from pickup_kernel.domain.values import City, ItemType
from pickup_kernel.exceptions import ErrorKind, NoItemsError, NoOpenReceptionError
from pickup_kernel.models.item import Item
from pickup_kernel.services.item_ledger import ItemLedgerService
from pickup_kernel.services.reception_service import ReceptionService


def _item_count(session) -> int:
    return session.execute(select(func.count()).select_from(Item)).scalar_one()


class TestAddItem:

    def test_attaches_to_open_reception(self, item_ledger, site, open_reception):
        item = item_ledger.add_item(site.id, ItemType.ELECTRONICS)

        assert item.reception_id == open_reception.id
        assert item.item_type is ItemType.ELECTRONICS
        assert item.position == 1

    def test_positions_increase(self, item_ledger, site, open_reception):
        positions = [item_ledger.add_item(site.id, ItemType.SHOES).position for _ in range(4)]

        assert positions == [1, 2, 3, 4]
        assert item_ledger.count_items(open_reception.id) == 4

    def test_no_open_reception(self, item_ledger, site, session):
        with pytest.raises(NoOpenReceptionError) as exc_info:
            item_ledger.add_item(site.id, ItemType.CLOTHES)

        assert exc_info.value.kind is ErrorKind.NO_OPEN_RECEPTION
        assert _item_count(session) == 0

    def test_closed_reception_receives_nothing(
        self, item_ledger, reception_service, site, open_reception, session
    ):
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        reception_service.close_last_reception(site.id)

        with pytest.raises(NoOpenReceptionError):
            item_ledger.add_item(site.id, ItemType.CLOTHES)

        assert _item_count(session) == 1

    def test_new_reception_starts_at_position_one(
        self, item_ledger, reception_service, site, open_reception
    ):
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        reception_service.close_last_reception(site.id)
        second = reception_service.open_reception(site.id)

        item = item_ledger.add_item(site.id, ItemType.SHOES)

        assert item.reception_id == second.id
        assert item.position == 1

    def test_other_site_unaffected(self, item_ledger, site_service, site, open_reception):
        other = site_service.register_site(City.MOSCOW)

        with pytest.raises(NoOpenReceptionError):
            item_ledger.add_item(other.id, ItemType.SHOES)


class TestDeleteLastItem:

    def test_removes_latest(self, session, site, deterministic_clock, id_provider):
        clock = DeterministicClock(deterministic_clock.now(), auto_advance=timedelta(seconds=1))
        receptions = ReceptionService(session, clock, id_provider)
        ledger = ItemLedgerService(session, clock, id_provider, reception_service=receptions)
        receptions.open_reception(site.id)
        first = ledger.add_item(site.id, ItemType.ELECTRONICS)
        last = ledger.add_item(site.id, ItemType.SHOES)

        removed = ledger.delete_last_item(site.id)

        assert removed.id == last.id
        assert removed.item_type is ItemType.SHOES
        remaining = session.execute(select(Item.id)).scalars().all()
        assert remaining == [first.id]

    def test_timestamp_tie_broken_by_position(self, item_ledger, site, open_reception):
        """The fixed clock gives every item the same created_at."""
        items = [item_ledger.add_item(site.id, ItemType.CLOTHES) for _ in range(3)]

        removed = item_ledger.delete_last_item(site.id)

        assert removed.id == items[-1].id
        assert removed.position == 3

    def test_n_deletes_then_no_items(self, item_ledger, site, open_reception, session):
        added = [item_ledger.add_item(site.id, ItemType.ELECTRONICS) for _ in range(5)]

        removed = [item_ledger.delete_last_item(site.id) for _ in range(5)]

        assert [r.id for r in removed] == [a.id for a in reversed(added)]
        assert _item_count(session) == 0
        with pytest.raises(NoItemsError) as exc_info:
            item_ledger.delete_last_item(site.id)
        assert exc_info.value.reception_id == str(open_reception.id)
        assert exc_info.value.kind is ErrorKind.NO_ITEMS

    def test_empty_reception(self, item_ledger, site, open_reception):
        with pytest.raises(NoItemsError):
            item_ledger.delete_last_item(site.id)

    def test_no_open_reception(self, item_ledger, site):
        with pytest.raises(NoOpenReceptionError):
            item_ledger.delete_last_item(site.id)

    def test_closed_reception_items_untouched(
        self, item_ledger, reception_service, site, open_reception, session
    ):
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        reception_service.close_last_reception(site.id)
        reception_service.open_reception(site.id)

        with pytest.raises(NoItemsError):
            item_ledger.delete_last_item(site.id)

        assert _item_count(session) == 1

    def test_add_after_delete_reuses_tail_position(self, item_ledger, site, open_reception):
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        item_ledger.add_item(site.id, ItemType.CLOTHES)
        item_ledger.delete_last_item(site.id)

        assert item_ledger.add_item(site.id, ItemType.SHOES).position == 2


class TestLedgerLogging:

    def test_add_and_delete_logged(self, item_ledger, site, open_reception, captured_logs):
        item = item_ledger.add_item(site.id, ItemType.SHOES)
        item_ledger.delete_last_item(site.id)

        messages = {r["message"]: r for r in captured_logs()}
        assert messages["item_added"]["item_id"] == str(item.id)
        assert messages["item_added"]["item_type"] == "обувь"
        assert messages["item_deleted"]["position"] == 1
