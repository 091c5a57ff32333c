"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    write service in the kernel.  Concrete services receive a SQLAlchemy
    ``Session`` and use ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back themselves.  The caller (ReceptionDesk or
    a test harness) owns commit/rollback, so a row lock taken by a service is
    held until the caller ends the transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from pickup_kernel.db.base import Base
from pickup_kernel.domain.clock import Clock, SystemClock
from pickup_kernel.domain.identity import IdProvider, RandomIdProvider

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide list/read-model queries -- those belong in
          ``pickup_kernel/selectors/``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        id_provider: IdProvider | None = None,
    ):
        self.session = session
        self._clock = clock or SystemClock()
        self._ids = id_provider or RandomIdProvider()
