"""Pure domain layer: values, DTOs, clock and identity providers."""

from pickup_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from pickup_kernel.domain.dtos import (
    ItemInfo,
    PaginationPolicy,
    ReceptionInfo,
    ReceptionWithItems,
    SiteInfo,
    SiteListQuery,
    SitePage,
    SiteWithReceptions,
)
from pickup_kernel.domain.identity import (
    IdProvider,
    RandomIdProvider,
    SequentialIdProvider,
)
from pickup_kernel.domain.values import City, ItemType, ReceptionStatus, Role

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "IdProvider",
    "RandomIdProvider",
    "SequentialIdProvider",
    "City",
    "ItemType",
    "ReceptionStatus",
    "Role",
    "SiteInfo",
    "ReceptionInfo",
    "ItemInfo",
    "ReceptionWithItems",
    "SiteWithReceptions",
    "SiteListQuery",
    "SitePage",
    "PaginationPolicy",
]
