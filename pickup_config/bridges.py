"""
Config -> Kernel Bridges.

Functions that convert PickupConfig sections into kernel inputs.  They live
in pickup_config (the producer) because the kernel must never import
pickup_config.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from pickup_config.schema import DatabaseConfig, LoggingConfig, PaginationConfig
from pickup_kernel.db.engine import init_engine_from_url
from pickup_kernel.domain.dtos import PaginationPolicy
from pickup_kernel.logging_config import configure_logging


def pagination_policy_from_config(config: PaginationConfig) -> PaginationPolicy:
    """Build the kernel PaginationPolicy.  ValueError if the bounds are inconsistent."""
    return PaginationPolicy(
        default_page=config.default_page,
        default_limit=config.default_limit,
        max_limit=config.max_limit,
        strict=config.strict,
    )


def init_engine_from_config(config: DatabaseConfig) -> Engine:
    """Initialize the kernel engine registry from the database section."""
    return init_engine_from_url(
        config.url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        lock_timeout_ms=config.lock_timeout_ms,
    )


def configure_logging_from_config(config: LoggingConfig) -> None:
    configure_logging(level=config.level)
