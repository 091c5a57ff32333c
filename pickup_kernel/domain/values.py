"""
Values -- Closed enumerations for every string-typed domain concept.

Responsibility:
    Replaces free-form strings for city, item type, reception status and
    caller role with str-valued enums.  Raw strings are converted exactly once,
    at the boundary, through ``parse()``; everything past that point handles
    enum members only.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Imported by models, services,
    selectors and the business layer.

Failure modes:
    - InvalidValueError from ``parse()`` for any string outside the set.

Wire values are the ones clients already send and store, so they are kept
verbatim (including the Cyrillic city and item type names).
"""

from __future__ import annotations

from enum import Enum

from pickup_kernel.exceptions import InvalidValueError


class _ClosedEnum(str, Enum):
    """str-valued enum with a validating boundary constructor."""

    @classmethod
    def field_name(cls) -> str:
        return cls.__name__.lower()

    @classmethod
    def parse(cls, value: object):
        """Return the member whose value equals ``value``.

        Members pass through unchanged.

        Raises:
            InvalidValueError: if ``value`` matches no member.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise InvalidValueError(
            cls.field_name(), value, tuple(m.value for m in cls)
        )

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(m.value for m in cls)


class City(_ClosedEnum):
    """Cities where pickup points may be registered."""

    MOSCOW = "Москва"
    SAINT_PETERSBURG = "Санкт-Петербург"
    KAZAN = "Казань"


class ItemType(_ClosedEnum):
    """Kinds of goods accepted by a reception."""

    ELECTRONICS = "электроника"
    CLOTHES = "одежда"
    SHOES = "обувь"

    @classmethod
    def field_name(cls) -> str:
        return "item_type"


class ReceptionStatus(_ClosedEnum):
    """
    Lifecycle status of a reception.

    Contract: OPEN -> CLOSED.  CLOSED is terminal; a closed reception is
    never reopened and never receives items.
    """

    OPEN = "in_progress"
    CLOSED = "close"

    @classmethod
    def field_name(cls) -> str:
        return "status"


class Role(_ClosedEnum):
    """Caller role supplied by the access-control collaborator."""

    EMPLOYEE = "employee"
    MODERATOR = "moderator"
