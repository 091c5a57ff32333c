"""
Typed Exception Hierarchy for the Pickup Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (HTTP handlers, gRPC servicers, batch jobs) must map every failure to
a response without parsing message strings.  Each exception therefore has:

  1. A TYPED class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. A KIND attribute (ErrorKind) so transports can match exhaustively
  4. Structured DATA as attributes (site_id, reception_id, ...)

Example - WRONG way to handle errors:
    try:
        desk.add_item(role, site_id, "обувь")
    except Exception as e:
        if "no opened reception" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        desk.add_item(role, site_id, "обувь")
    except PickupKernelError as e:
        return response(status=e.kind.http_status, code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PickupKernelError (base)
    |
    +-- SiteError
    |   +-- SiteAlreadyExistsError
    |
    +-- ReceptionError
    |   +-- ReceptionConflictError
    |   +-- NoOpenReceptionError
    |
    +-- ItemError
    |   +-- NoItemsError
    |
    +-- QueryError
    |   +-- InvalidDateRangeError
    |   +-- InvalidPaginationError
    |
    +-- ValidationError
    |   +-- InvalidValueError
    |
    +-- AccessDeniedError
    |
    +-- StoreUnavailableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                 | Kind              | When Raised
-----------|----------------------|-------------------|-------------------------------
Site       | SITE_ALREADY_EXISTS  | CONFLICT          | Duplicate site id
-----------|----------------------|-------------------|-------------------------------
Reception  | RECEPTION_CONFLICT   | CONFLICT          | Site missing or reception open
           | NO_OPEN_RECEPTION    | NO_OPEN_RECEPTION | Nothing open for the site
-----------|----------------------|-------------------|-------------------------------
Item       | NO_ITEMS             | NO_ITEMS          | Open reception has no items
-----------|----------------------|-------------------|-------------------------------
Query      | INVALID_DATE_RANGE   | INVALID_RANGE     | start is after end
           | INVALID_PAGINATION   | INVALID_RANGE     | page/limit out of bounds
           |                      |                   | (strict pagination only)
-----------|----------------------|-------------------|-------------------------------
Validation | INVALID_VALUE        | VALIDATION        | Unknown city/type/role string
-----------|----------------------|-------------------|-------------------------------
Access     | ACCESS_DENIED        | FORBIDDEN         | Role not allowed for action
-----------|----------------------|-------------------|-------------------------------
Store      | STORE_UNAVAILABLE    | TRANSIENT         | Connectivity, lock timeout,
           |                      |                   | commit failure

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY BOTH code AND kind?
   ``code`` names the exact failure; ``kind`` groups failures by how a caller
   should respond.  Several codes share a kind (SITE_ALREADY_EXISTS and
   RECEPTION_CONFLICT are both CONFLICT).

2. WHY IS StoreUnavailableError PART OF THE HIERARCHY?
   The business layer translates SQLAlchemy failures into it so callers only
   ever catch PickupKernelError.  The original exception is chained via
   ``raise ... from``.

3. NO RETRIES.
   The kernel never retries.  ``ErrorKind.is_client_fault`` lets the caller
   decide whether a retry makes sense.

===============================================================================
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Coarse classification of kernel failures."""

    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    NO_OPEN_RECEPTION = "no_open_reception"
    NO_ITEMS = "no_items"
    INVALID_RANGE = "invalid_range"
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    TRANSIENT = "transient"

    @property
    def is_client_fault(self) -> bool:
        """True for errors the caller caused; False for infrastructure faults."""
        return self is not ErrorKind.TRANSIENT

    @property
    def http_status(self) -> int:
        """Suggested HTTP status for transport collaborators."""
        return _HTTP_STATUS[self]


_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NO_OPEN_RECEPTION: 400,
    ErrorKind.NO_ITEMS: 400,
    ErrorKind.INVALID_RANGE: 400,
    ErrorKind.VALIDATION: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.TRANSIENT: 500,
}


class PickupKernelError(Exception):
    """
    Base exception for all pickup kernel errors.

    All subclasses must define ``code`` and ``kind`` class attributes.
    """

    code: str = "PICKUP_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.TRANSIENT


# Site-related exceptions


class SiteError(PickupKernelError):
    """Base exception for site errors."""

    code: str = "SITE_ERROR"
    kind: ErrorKind = ErrorKind.CONFLICT


class SiteAlreadyExistsError(SiteError):
    """A site with the given id is already registered."""

    code: str = "SITE_ALREADY_EXISTS"
    kind: ErrorKind = ErrorKind.CONFLICT

    def __init__(self, site_id: str):
        self.site_id = site_id
        super().__init__(f"Site already exists: {site_id}")


# Reception-related exceptions


class ReceptionError(PickupKernelError):
    """Base exception for reception lifecycle errors."""

    code: str = "RECEPTION_ERROR"
    kind: ErrorKind = ErrorKind.CONFLICT


class ReceptionConflictError(ReceptionError):
    """
    A reception cannot be opened for the site.

    Raised when the site does not exist or when it already has an open
    reception.  ``reason`` tells the two apart for logs.
    """

    code: str = "RECEPTION_CONFLICT"
    kind: ErrorKind = ErrorKind.CONFLICT

    SITE_NOT_FOUND = "site_not_found"
    ALREADY_OPEN = "already_open"

    def __init__(self, site_id: str, reason: str, open_reception_id: str | None = None):
        self.site_id = site_id
        self.reason = reason
        self.open_reception_id = open_reception_id
        super().__init__(
            f"Either site {site_id} not found or previous reception still open "
            f"({reason})"
        )


class NoOpenReceptionError(ReceptionError):
    """The site has no reception in progress."""

    code: str = "NO_OPEN_RECEPTION"
    kind: ErrorKind = ErrorKind.NO_OPEN_RECEPTION

    def __init__(self, site_id: str):
        self.site_id = site_id
        super().__init__(f"No opened reception for site {site_id} was found")


# Item-related exceptions


class ItemError(PickupKernelError):
    """Base exception for item ledger errors."""

    code: str = "ITEM_ERROR"
    kind: ErrorKind = ErrorKind.NO_ITEMS


class NoItemsError(ItemError):
    """The open reception has no items to remove."""

    code: str = "NO_ITEMS"
    kind: ErrorKind = ErrorKind.NO_ITEMS

    def __init__(self, site_id: str, reception_id: str):
        self.site_id = site_id
        self.reception_id = reception_id
        super().__init__(f"No items in reception {reception_id} of site {site_id}")


# Query-related exceptions


class QueryError(PickupKernelError):
    """Base exception for read-side query errors."""

    code: str = "QUERY_ERROR"
    kind: ErrorKind = ErrorKind.INVALID_RANGE


class InvalidDateRangeError(QueryError):
    """Reception date filter has start after end."""

    code: str = "INVALID_DATE_RANGE"
    kind: ErrorKind = ErrorKind.INVALID_RANGE

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: start {start} is after end {end}")


class InvalidPaginationError(QueryError):
    """Page or limit outside accepted bounds (strict pagination only)."""

    code: str = "INVALID_PAGINATION"
    kind: ErrorKind = ErrorKind.INVALID_RANGE

    def __init__(self, field: str, value: int, minimum: int, maximum: int | None = None):
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        bound = f">= {minimum}" if maximum is None else f"in [{minimum}, {maximum}]"
        super().__init__(f"Invalid {field}: {value} (must be {bound})")


# Boundary validation


class ValidationError(PickupKernelError):
    """Base exception for malformed caller input."""

    code: str = "VALIDATION_ERROR"
    kind: ErrorKind = ErrorKind.VALIDATION


class InvalidValueError(ValidationError):
    """A string did not match any member of a closed enumeration."""

    code: str = "INVALID_VALUE"
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, field: str, value: object, allowed: tuple[str, ...]):
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid {field}: {value!r} (allowed: {', '.join(allowed)})"
        )


# Access control


class AccessDeniedError(PickupKernelError):
    """The caller's role may not perform the requested action."""

    code: str = "ACCESS_DENIED"
    kind: ErrorKind = ErrorKind.FORBIDDEN

    def __init__(self, role: str, action: str):
        self.role = role
        self.action = action
        super().__init__(f"Access denied: role {role} may not {action}")


# Infrastructure


class StoreUnavailableError(PickupKernelError):
    """
    The backing store failed: connectivity, lock wait timeout, or commit.

    The underlying SQLAlchemy exception is chained as ``__cause__``.
    """

    code: str = "STORE_UNAVAILABLE"
    kind: ErrorKind = ErrorKind.TRANSIENT

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: store unavailable: {detail}")
