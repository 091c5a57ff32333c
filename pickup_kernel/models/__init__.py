"""ORM models for the pickup kernel."""

from pickup_kernel.models.item import Item
from pickup_kernel.models.reception import Reception
from pickup_kernel.models.site import Site

__all__ = [
    "Site",
    "Reception",
    "Item",
]
