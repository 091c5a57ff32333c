"""
Kernel services -- flush-only write operations.

All services accept a Session from the caller and never commit.
"""

from pickup_kernel.services.base import BaseService
from pickup_kernel.services.item_ledger import ItemLedgerService
from pickup_kernel.services.reception_service import ReceptionService
from pickup_kernel.services.site_service import SiteService

__all__ = [
    "BaseService",
    "SiteService",
    "ReceptionService",
    "ItemLedgerService",
]
