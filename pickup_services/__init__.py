"""
pickup_services -- business rule layer over the pickup kernel.
"""

from pickup_services.access_policy import ROLE_PERMISSIONS, AccessPolicy, Action
from pickup_services.wiring import bootstrap
from pickup_services.reception_desk import ReceptionDesk

__all__ = [
    "ROLE_PERMISSIONS",
    "AccessPolicy",
    "Action",
    "ReceptionDesk",
    "bootstrap",
]
