"""
pickup_services.reception_desk -- Business rule layer over the pickup kernel.

Responsibility:
    The single entry point for callers (HTTP handlers, CLIs, tests).  For
    each operation it checks the caller's role, parses wire strings into
    domain enums, opens one session, runs the kernel services inside one
    transaction, and commits or rolls back.

Architecture position:
    Services -- stateful orchestration over the kernel.  This is the only
    place where kernel services are constructed and where transactions end.

Invariants enforced:
    - Role check happens before any store access.
    - One operation = one session = one transaction.  Commit on success,
      rollback on any exception (BaseException included), session always
      closed.
    - Domain errors (PickupKernelError subclasses) pass through unchanged.
      SQLAlchemyError is translated to StoreUnavailableError with the
      original chained as ``__cause__``.
    - No internal retries.

Failure modes:
    - AccessDeniedError: role may not perform the action.
    - InvalidValueError: unknown role/city/item type string.
    - ReceptionConflictError, NoOpenReceptionError, NoItemsError,
      SiteAlreadyExistsError, InvalidDateRangeError, InvalidPaginationError:
      see pickup_kernel.exceptions.
    - StoreUnavailableError: connectivity, lock timeout, commit failure.

Usage:
    from pickup_kernel.db import get_session_factory
    from pickup_services import ReceptionDesk

    desk = ReceptionDesk(session_factory=get_session_factory())
    site = desk.register_site("moderator", "Казань")
    desk.open_reception("employee", site.id)
    desk.add_item("employee", site.id, "обувь")
"""

from __future__ import annotations

import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pickup_kernel.domain.clock import Clock, SystemClock
from pickup_kernel.domain.dtos import (
    ItemInfo,
    PaginationPolicy,
    ReceptionInfo,
    SiteInfo,
    SiteListQuery,
    SitePage,
    SiteWithReceptions,
)
from pickup_kernel.domain.identity import IdProvider, RandomIdProvider
from pickup_kernel.domain.values import City, ItemType, Role
from pickup_kernel.exceptions import PickupKernelError, StoreUnavailableError
from pickup_kernel.logging_config import LogContext, get_logger
from pickup_kernel.selectors.site_selector import SiteSelector
from pickup_kernel.services.item_ledger import ItemLedgerService
from pickup_kernel.services.reception_service import ReceptionService
from pickup_kernel.services.site_service import SiteService
from pickup_services.access_policy import AccessPolicy, Action

logger = get_logger("services.reception_desk")


class ReceptionDesk:
    """
    Role-checked, transactional facade over sites, receptions and items.

    Contract:
        Every public method is one unit of work.  Write methods return the
        DTO of the affected entity after commit.

    Guarantees:
        - A failed call leaves no partial state behind.
        - Collaborators are injected; the desk holds no mutable state of its
          own and is safe to share between threads.

    Non-goals:
        - Does NOT verify tokens or resolve who the caller is; ``role`` is
          trusted input from the access-control collaborator.
        - Does NOT retry on transient failures.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        id_provider: IdProvider | None = None,
        access_policy: AccessPolicy | None = None,
        pagination: PaginationPolicy | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._ids = id_provider or RandomIdProvider()
        self._access = access_policy or AccessPolicy()
        self._pagination = pagination or PaginationPolicy()

    @property
    def pagination(self) -> PaginationPolicy:
        return self._pagination

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def _authorize(self, role: Role | str, action: Action) -> Role:
        parsed = Role.parse(role)
        self._access.check(parsed, action)
        return parsed

    @contextmanager
    def _unit_of_work(
        self,
        operation: str,
        role: Role | None = None,
        site_id: UUID | None = None,
        *,
        write: bool = True,
    ) -> Generator[Session, None, None]:
        """
        One session, one transaction.

        On normal exit a write is committed; a read is simply closed.  Any
        exception rolls the session back before it propagates.
        """
        with LogContext.bind(
            correlation_id=str(uuid4()),
            site_id=str(site_id) if site_id is not None else None,
            actor_role=role.value if role is not None else None,
        ):
            session = self._session_factory()
            t0 = time.monotonic()
            try:
                yield session
                if write:
                    session.commit()
                logger.info(
                    f"{operation}_completed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                )
            except PickupKernelError as exc:
                session.rollback()
                logger.warning(
                    f"{operation}_rejected",
                    extra={
                        "error_code": exc.code,
                        "error_kind": exc.kind.value,
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    },
                )
                raise
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    f"{operation}_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise StoreUnavailableError(operation, type(exc).__name__) from exc
            except BaseException:
                session.rollback()
                logger.error(f"{operation}_aborted", exc_info=True)
                raise
            finally:
                session.close()

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def register_site(
        self,
        role: Role | str,
        city: City | str,
        site_id: UUID | None = None,
        registered_at: datetime | None = None,
    ) -> SiteInfo:
        """
        Register a pickup point.  Moderators only.

        ``site_id`` and ``registered_at`` are taken from the caller when
        given, otherwise generated.

        Raises:
            SiteAlreadyExistsError: If ``site_id`` is already registered.
        """
        actor = self._authorize(role, Action.REGISTER_SITE)
        parsed_city = City.parse(city)
        with self._unit_of_work("register_site", actor, site_id) as session:
            return SiteService(session, self._clock, self._ids).register_site(
                parsed_city, site_id=site_id, registered_at=registered_at
            )

    # ------------------------------------------------------------------
    # Receptions
    # ------------------------------------------------------------------

    def open_reception(self, role: Role | str, site_id: UUID) -> ReceptionInfo:
        """Open a reception.  Employees only.  See ReceptionService.open_reception."""
        actor = self._authorize(role, Action.OPEN_RECEPTION)
        with self._unit_of_work("open_reception", actor, site_id) as session:
            return ReceptionService(session, self._clock, self._ids).open_reception(site_id)

    def close_last_reception(self, role: Role | str, site_id: UUID) -> ReceptionInfo:
        """Close the site's open reception.  Employees only."""
        actor = self._authorize(role, Action.CLOSE_RECEPTION)
        with self._unit_of_work("close_reception", actor, site_id) as session:
            return ReceptionService(
                session, self._clock, self._ids
            ).close_last_reception(site_id)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(
        self, role: Role | str, site_id: UUID, item_type: ItemType | str
    ) -> ItemInfo:
        """Add an item to the site's open reception.  Employees only."""
        actor = self._authorize(role, Action.ADD_ITEM)
        parsed_type = ItemType.parse(item_type)
        with self._unit_of_work("add_item", actor, site_id) as session:
            return ItemLedgerService(session, self._clock, self._ids).add_item(
                site_id, parsed_type
            )

    def delete_last_item(self, role: Role | str, site_id: UUID) -> ItemInfo:
        """Remove the most recent item of the open reception.  Employees only."""
        actor = self._authorize(role, Action.DELETE_ITEM)
        with self._unit_of_work("delete_item", actor, site_id) as session:
            return ItemLedgerService(session, self._clock, self._ids).delete_last_item(
                site_id
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def build_query(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> SiteListQuery:
        """Validate raw listing parameters under the configured pagination policy."""
        return SiteListQuery.build(start, end, page, limit, policy=self._pagination)

    def list_sites(
        self,
        role: Role | str,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[SiteWithReceptions]:
        """
        One page of sites with their receptions and items.

        Raises:
            InvalidDateRangeError: If start is after end (no query is issued).
        """
        actor = self._authorize(role, Action.LIST_SITES)
        query = self.build_query(start, end, page, limit)
        with self._unit_of_work("list_sites", actor, write=False) as session:
            return SiteSelector(session).list_sites_with_receptions(query)

    def get_site_page(
        self,
        role: Role | str,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> SitePage:
        """Like ``list_sites`` but with the total count of matching sites."""
        actor = self._authorize(role, Action.LIST_SITES)
        query = self.build_query(start, end, page, limit)
        with self._unit_of_work("list_sites", actor, write=False) as session:
            return SiteSelector(session).get_page(query)

    def list_all_sites(self) -> list[SiteInfo]:
        """Every site, flat, unpaged.  Internal enumeration; no role check."""
        with self._unit_of_work("list_all_sites", write=False) as session:
            return SiteSelector(session).list_sites()
