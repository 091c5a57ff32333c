"""
Identity -- Injectable id generation.

Receptions and items always receive ids from the provider handed to the
business layer; sites take a caller-supplied id when one is given (replay of a
registration) and fall back to the provider otherwise.
"""

from abc import ABC, abstractmethod
from uuid import UUID, uuid4


class IdProvider(ABC):
    """Source of new unique identifiers."""

    @abstractmethod
    def new_id(self) -> UUID:
        ...


class RandomIdProvider(IdProvider):
    """Production provider backed by uuid4."""

    def new_id(self) -> UUID:
        return uuid4()


class SequentialIdProvider(IdProvider):
    """
    Test provider yielding predictable, ordered UUIDs.

    ids are ``00000000-0000-0000-0000-<n>`` with n counting up from ``start``.
    """

    def __init__(self, start: int = 1):
        self._next = start

    def new_id(self) -> UUID:
        value = UUID(int=self._next)
        self._next += 1
        return value
