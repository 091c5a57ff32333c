"""
Module: pickup_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.  Selectors
    are the query side of the kernel: structured read access to sites,
    receptions and items without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/ DTOs.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses or computed
      results, never ORM model instances.
    - No locks: selectors never issue SELECT ... FOR UPDATE.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from pickup_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.

    Non-goals:
        - BaseSelector does NOT define any query methods.
    """

    def __init__(self, session: Session):
        self.session = session
