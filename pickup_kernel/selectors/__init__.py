"""
Kernel selectors -- read-only query access.
"""

from pickup_kernel.selectors.base import BaseSelector
from pickup_kernel.selectors.site_selector import (
    HierarchyRow,
    SiteSelector,
    assemble_hierarchy,
)

__all__ = [
    "BaseSelector",
    "HierarchyRow",
    "SiteSelector",
    "assemble_hierarchy",
]
