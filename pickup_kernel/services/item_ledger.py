"""
ItemLedgerService -- append / remove-most-recent ledger over a site's open
reception.

Responsibility:
    Adds items to the open reception of a site and removes the most recently
    added one.  Items are never edited; the ledger only grows at the tail and
    shrinks from the tail.

Architecture position:
    Kernel > Services -- imperative shell.  Uses ReceptionService for the
    locked open-reception lookup.  Called by ReceptionDesk.

Invariants enforced:
    - An item is only ever attached to the reception that is open for its
      site at the moment of insert.  The lookup and the insert share one
      transaction and the reception row stays locked until the caller
      commits, so a concurrent close cannot interleave.
    - Last-in-first-out removal: ``delete_last_item`` removes exactly one
      item, the one with the latest created_at (ties broken by position).
    - Positions are assigned as max(position)+1 while the reception row is
      locked, so no two items of one reception share a position.
    - Flush-only: never commits or rolls back.

Failure modes:
    - NoOpenReceptionError: the site has no open reception.
    - NoItemsError: the open reception is empty.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from pickup_kernel.domain.clock import Clock
from pickup_kernel.domain.dtos import ItemInfo
from pickup_kernel.domain.identity import IdProvider
from pickup_kernel.domain.values import ItemType
from pickup_kernel.exceptions import NoItemsError, NoOpenReceptionError
from pickup_kernel.logging_config import get_logger
from pickup_kernel.models.item import Item
from pickup_kernel.models.reception import Reception
from pickup_kernel.services.base import BaseService
from pickup_kernel.services.reception_service import ReceptionService

logger = get_logger("services.item_ledger")


class ItemLedgerService(BaseService[Item]):
    """Service for the item ledger of open receptions."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        id_provider: IdProvider | None = None,
        reception_service: ReceptionService | None = None,
    ):
        super().__init__(session, clock, id_provider)
        self._receptions = reception_service or ReceptionService(
            session, self._clock, self._ids
        )

    def _require_open_reception(self, site_id: UUID, operation: str) -> Reception:
        reception = self._receptions.lock_open_reception(site_id)
        if reception is None:
            logger.warning(
                f"{operation}_rejected",
                extra={"site_id": str(site_id), "reason": "no_open_reception"},
            )
            raise NoOpenReceptionError(str(site_id))
        return reception

    def add_item(self, site_id: UUID, item_type: ItemType) -> ItemInfo:
        """
        Append an item to the site's open reception.

        Postconditions:
            - A new item references the open reception, with created_at from
              the clock and position one past the current tail.

        Raises:
            NoOpenReceptionError: If no reception is open.  No item is written.
        """
        reception = self._require_open_reception(site_id, "item_add")

        tail = self.session.execute(
            select(func.max(Item.position)).where(Item.reception_id == reception.id)
        ).scalar()

        item = Item(
            id=self._ids.new_id(),
            reception_id=reception.id,
            item_type=item_type,
            created_at=self._clock.now(),
            position=(tail or 0) + 1,
        )
        self.session.add(item)
        self.session.flush()

        logger.info(
            "item_added",
            extra={
                "site_id": str(site_id),
                "reception_id": str(reception.id),
                "item_id": str(item.id),
                "item_type": item.item_type.value,
                "position": item.position,
            },
        )
        return ItemInfo.from_model(item)

    def delete_last_item(self, site_id: UUID) -> ItemInfo:
        """
        Remove the most recently added item of the site's open reception.

        Returns:
            ItemInfo of the removed item.

        Raises:
            NoOpenReceptionError: If no reception is open.
            NoItemsError: If the open reception has no items.
        """
        reception = self._require_open_reception(site_id, "item_delete")

        item = self.session.execute(
            select(Item)
            .where(Item.reception_id == reception.id)
            .order_by(Item.created_at.desc(), Item.position.desc())
            .limit(1)
        ).scalars().first()

        if item is None:
            logger.warning(
                "item_delete_rejected",
                extra={
                    "site_id": str(site_id),
                    "reception_id": str(reception.id),
                    "reason": "no_items",
                },
            )
            raise NoItemsError(str(site_id), str(reception.id))

        removed = ItemInfo.from_model(item)
        self.session.execute(delete(Item).where(Item.id == item.id))
        self.session.flush()

        logger.info(
            "item_deleted",
            extra={
                "site_id": str(site_id),
                "reception_id": str(reception.id),
                "item_id": str(removed.id),
                "position": removed.position,
            },
        )
        return removed

    def count_items(self, reception_id: UUID) -> int:
        """Number of items currently recorded against a reception."""
        return self.session.execute(
            select(func.count()).select_from(Item).where(Item.reception_id == reception_id)
        ).scalar_one()
