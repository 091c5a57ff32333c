"""
SiteService -- registration of pickup points.

Responsibility:
    Inserts new sites.  Accepts a caller-supplied id and registration time so
    that a registration can be replayed idempotently by its producer; fills
    both from the injected IdProvider and Clock otherwise.

Architecture position:
    Kernel > Services -- imperative shell.  Called by ReceptionDesk.

Invariants enforced:
    - Site ids are unique.  A duplicate surfaces as SiteAlreadyExistsError
      and leaves the caller's transaction usable (the insert runs inside a
      savepoint).
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - SiteAlreadyExistsError: id already registered.
    - InvalidValueError: naive registration timestamp.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from pickup_kernel.domain.dtos import SiteInfo, require_aware
from pickup_kernel.domain.values import City
from pickup_kernel.exceptions import SiteAlreadyExistsError
from pickup_kernel.logging_config import get_logger
from pickup_kernel.models.site import Site
from pickup_kernel.services.base import BaseService

logger = get_logger("services.site")


class SiteService(BaseService[Site]):
    """Service for registering sites."""

    def register_site(
        self,
        city: City,
        site_id: UUID | None = None,
        registered_at: datetime | None = None,
    ) -> SiteInfo:
        """
        Register a new site.

        Args:
            city: City of the pickup point.
            site_id: Caller-supplied id (generated when None).
            registered_at: Caller-supplied registration time (clock when None).

        Returns:
            SiteInfo for the new site.

        Raises:
            SiteAlreadyExistsError: If a site with this id exists.
            InvalidValueError: If registered_at is a naive datetime.
        """
        require_aware("registered_at", registered_at)

        if site_id is not None and self.session.get(Site, site_id) is not None:
            logger.warning("site_already_exists", extra={"site_id": str(site_id)})
            raise SiteAlreadyExistsError(str(site_id))

        site = Site(
            id=site_id or self._ids.new_id(),
            city=city,
            registered_at=registered_at or self._clock.now(),
        )

        savepoint = self.session.begin_nested()
        try:
            self.session.add(site)
            self.session.flush()
        except IntegrityError:
            savepoint.rollback()
            logger.warning(
                "site_already_exists",
                extra={"site_id": str(site.id)},
            )
            raise SiteAlreadyExistsError(str(site.id)) from None
        savepoint.commit()

        logger.info(
            "site_registered",
            extra={"site_id": str(site.id), "city": site.city.value},
        )
        return SiteInfo.from_model(site)
