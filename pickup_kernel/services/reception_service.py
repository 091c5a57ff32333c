"""
ReceptionService -- reception lifecycle state machine.

Responsibility:
    Opens and closes receptions for a site while guaranteeing that at most
    one reception per site is open at any instant.  Also provides the locked
    lookup of a site's open reception that the item ledger builds on.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by ReceptionDesk for open/close and by ItemLedgerService for the
    locked open-reception lookup.

State machine:
    (none) --open--> OPEN --close--> CLOSED   (CLOSED is terminal)

Invariants enforced:
    - One open reception per site.  ``open_reception`` locks the site row
      (SELECT ... FOR UPDATE) before checking for an open reception, so
      concurrent opens for one site are serialized and all but the first
      see the committed open reception.  The partial unique index
      ``uq_receptions_one_open_per_site`` rejects anything that slips past,
      and that IntegrityError is translated to ReceptionConflictError.
    - Every lifecycle and ledger operation on a site's open reception locks
      that reception row first, so add / delete-last / close on one site are
      totally ordered.  Different sites never contend.
    - Flush-only: never commits or rolls back.  Locks are held until the
      caller's transaction ends.

Failure modes:
    - ReceptionConflictError: site missing, or a reception is already open.
    - NoOpenReceptionError: close requested with nothing open.
    - OperationalError: lock wait timeout (translated by the caller).
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pickup_kernel.domain.dtos import ReceptionInfo
from pickup_kernel.domain.values import ReceptionStatus
from pickup_kernel.exceptions import NoOpenReceptionError, ReceptionConflictError
from pickup_kernel.logging_config import LogContext, get_logger
from pickup_kernel.models.reception import Reception
from pickup_kernel.models.site import Site
from pickup_kernel.services.base import BaseService

logger = get_logger("services.reception")


class ReceptionService(BaseService[Reception]):
    """
    Service for the reception lifecycle.

    Guarantees:
        - ``open_reception`` inserts only when the site exists and has no
          open reception, evaluated under the site row lock.
        - ``close_last_reception`` affects exactly one reception: the open
          one of the given site.
        - Returned values are frozen ReceptionInfo DTOs.
    """

    def lock_open_reception(self, site_id: UUID) -> Reception | None:
        """
        Select the site's open reception with an exclusive row lock.

        Under READ COMMITTED a waiter that acquires the lock after a
        concurrent close re-evaluates the status predicate and gets None.

        The reception id, when found, is bound into the log context.

        Returns:
            The locked Reception, or None if nothing is open.
        """
        reception = self.session.execute(
            select(Reception)
            .where(
                Reception.site_id == site_id,
                Reception.status == ReceptionStatus.OPEN,
            )
            .limit(1)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().first()
        if reception is not None:
            LogContext.set(reception_id=str(reception.id))
        return reception

    def get_open_reception(self, site_id: UUID) -> ReceptionInfo | None:
        """Non-locking read of the site's open reception."""
        reception = self.session.execute(
            select(Reception).where(
                Reception.site_id == site_id,
                Reception.status == ReceptionStatus.OPEN,
            )
        ).scalars().first()
        return ReceptionInfo.from_model(reception) if reception else None

    def open_reception(self, site_id: UUID) -> ReceptionInfo:
        """
        Open a new reception for a site.

        Preconditions:
            - The caller is inside an active transaction.

        Postconditions:
            - A reception with status OPEN exists for the site, created at
              ``clock.now()`` with a fresh id.
            - The site row stays locked until the caller's transaction ends.

        Raises:
            ReceptionConflictError: If the site does not exist or already
                has an open reception.  Nothing is written.
        """
        site = self.session.execute(
            select(Site)
            .where(Site.id == site_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if site is None:
            logger.warning(
                "reception_open_rejected",
                extra={"site_id": str(site_id), "reason": ReceptionConflictError.SITE_NOT_FOUND},
            )
            raise ReceptionConflictError(str(site_id), ReceptionConflictError.SITE_NOT_FOUND)

        existing = self.get_open_reception(site_id)
        if existing is not None:
            logger.warning(
                "reception_open_rejected",
                extra={
                    "site_id": str(site_id),
                    "reason": ReceptionConflictError.ALREADY_OPEN,
                    "open_reception_id": str(existing.id),
                },
            )
            raise ReceptionConflictError(
                str(site_id),
                ReceptionConflictError.ALREADY_OPEN,
                open_reception_id=str(existing.id),
            )

        reception = Reception(
            id=self._ids.new_id(),
            site_id=site_id,
            created_at=self._clock.now(),
            status=ReceptionStatus.OPEN,
        )

        savepoint = self.session.begin_nested()
        try:
            self.session.add(reception)
            self.session.flush()
        except IntegrityError:
            # Partial unique index: another open reception won the race.
            savepoint.rollback()
            logger.warning(
                "reception_open_rejected",
                extra={"site_id": str(site_id), "reason": "unique_index"},
            )
            raise ReceptionConflictError(
                str(site_id), ReceptionConflictError.ALREADY_OPEN
            ) from None
        savepoint.commit()
        LogContext.set(reception_id=str(reception.id))

        logger.info(
            "reception_opened",
            extra={"site_id": str(site_id), "reception_id": str(reception.id)},
        )
        return ReceptionInfo.from_model(reception)

    def close_last_reception(self, site_id: UUID) -> ReceptionInfo:
        """
        Close the site's open reception.

        Postconditions:
            - The previously open reception has status CLOSED.
            - No other reception is touched.

        Raises:
            NoOpenReceptionError: If the site has no open reception.
        """
        reception = self.lock_open_reception(site_id)
        if reception is None:
            logger.warning(
                "reception_close_rejected",
                extra={"site_id": str(site_id)},
            )
            raise NoOpenReceptionError(str(site_id))

        reception.close()
        self.session.flush()

        logger.info(
            "reception_closed",
            extra={"site_id": str(site_id), "reception_id": str(reception.id)},
        )
        return ReceptionInfo.from_model(reception)
