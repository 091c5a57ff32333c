"""
pickup_services.wiring -- Process wiring from configuration.

Initializes logging and the engine registry from a PickupConfig, optionally
creates the schema, and returns a ReceptionDesk bound to the session factory.
Call once per process.
"""

from __future__ import annotations

from pickup_config import PickupConfig, get_active_config
from pickup_config.bridges import (
    configure_logging_from_config,
    init_engine_from_config,
    pagination_policy_from_config,
)
from pickup_kernel.db.engine import create_tables, get_session_factory
from pickup_kernel.domain.clock import Clock
from pickup_kernel.domain.identity import IdProvider
from pickup_kernel.logging_config import get_logger
from pickup_services.access_policy import AccessPolicy
from pickup_services.reception_desk import ReceptionDesk

logger = get_logger("services.wiring")


def bootstrap(
    config: PickupConfig | None = None,
    *,
    create_schema: bool = False,
    clock: Clock | None = None,
    id_provider: IdProvider | None = None,
    access_policy: AccessPolicy | None = None,
) -> ReceptionDesk:
    """
    Wire a ReceptionDesk from configuration.

    Args:
        config: Loaded configuration; ``get_active_config()`` when None.
        create_schema: Create missing tables after the engine is up.
        clock: Clock override (tests).
        id_provider: Id provider override (tests).
        access_policy: Access policy override.

    Raises:
        ValueError: If the pagination bounds are inconsistent.
    """
    config = config or get_active_config()
    configure_logging_from_config(config.logging)
    pagination = pagination_policy_from_config(config.pagination)

    engine = init_engine_from_config(config.database)
    if create_schema:
        create_tables()

    logger.info(
        "desk_bootstrapped",
        extra={
            "dialect": engine.dialect.name,
            "config_source": config.source,
            "pagination_strict": pagination.strict,
        },
    )
    return ReceptionDesk(
        session_factory=get_session_factory(),
        clock=clock,
        id_provider=id_provider,
        access_policy=access_policy,
        pagination=pagination,
    )
