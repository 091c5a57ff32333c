"""
pickup_services.access_policy -- Role check at the business-rule boundary.

Responsibility:
    Decide whether a caller's role may perform an action.  The role itself
    comes from the access-control collaborator (token verification lives
    outside this package); this module only maps role -> allowed actions.

Architecture position:
    Services layer.  Called by ReceptionDesk before any store access.

Invariants:
    - Kernel remains actor-agnostic; only ReceptionDesk consults the policy.
    - Denial raises AccessDeniedError; nothing is read or written first.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pickup_kernel.domain.values import Role
from pickup_kernel.exceptions import AccessDeniedError
from pickup_kernel.logging_config import get_logger

logger = get_logger("services.access_policy")


class Action(str, Enum):
    """Actions exposed by ReceptionDesk."""

    REGISTER_SITE = "register_site"
    OPEN_RECEPTION = "open_reception"
    CLOSE_RECEPTION = "close_reception"
    ADD_ITEM = "add_item"
    DELETE_ITEM = "delete_item"
    LIST_SITES = "list_sites"


# role -> actions that role may perform
ROLE_PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.MODERATOR: frozenset({Action.REGISTER_SITE, Action.LIST_SITES}),
    Role.EMPLOYEE: frozenset(
        {
            Action.OPEN_RECEPTION,
            Action.CLOSE_RECEPTION,
            Action.ADD_ITEM,
            Action.DELETE_ITEM,
            Action.LIST_SITES,
        }
    ),
}


class AccessPolicy:
    """
    Role -> permitted actions.

    Contract:
        ``check`` returns None when allowed and raises AccessDeniedError
        otherwise.  ``is_allowed`` is the non-raising form.
    """

    def __init__(self, permissions: Mapping[Role, frozenset[Action]] | None = None):
        self._permissions = dict(permissions if permissions is not None else ROLE_PERMISSIONS)

    def is_allowed(self, role: Role, action: Action) -> bool:
        return action in self._permissions.get(role, frozenset())

    def check(self, role: Role, action: Action) -> None:
        """Raise AccessDeniedError unless ``role`` may perform ``action``."""
        if not self.is_allowed(role, action):
            logger.warning(
                "access_denied",
                extra={"actor_role": role.value, "action": action.value},
            )
            raise AccessDeniedError(role.value, action.value)
