from __future__ import annotations


class ErpError(Exception):
    """Base class for legacy ERP connector failures."""


class ErpConnectionError(ErpError, ConnectionError):
    """The legacy database session could not be established or was lost."""


class QueryError(ErpError):
    """A query variant failed structurally (unknown column/table, malformed result).

    Raised and caught inside the fallback chain; callers only see it through
    the attempt log of a chain outcome.
    """

    def __init__(self, variant: str, message: str):
        super().__init__(f"{variant}: {message}")
        self.variant = variant
        self.message = message


class MappingError(ErpError):
    """A legacy row could not be decoded.

    Mappers apply documented defaults instead of raising this; it is kept for
    callers that validate rows strictly.
    """


class SyncError(ErpError):
    """The extract/upsert cycle failed; recorded in the sync audit log."""


# Oracle: ORA-00904 invalid identifier, ORA-00942 table or view does not exist,
# ORA-00932 inconsistent datatypes, ORA-01722 invalid number. SQLite/MSSQL wording
# is matched for local fixtures and replicas.
_STRUCTURAL_MARKERS = (
    "ora-00904",
    "ora-00942",
    "ora-00932",
    "ora-01722",
    "invalid identifier",
    "does not exist",
    "no such column",
    "no such table",
    "invalid column name",
    "invalid object name",
)


def is_structural_error(exc: BaseException) -> bool:
    """True when the driver error describes a schema mismatch rather than a connectivity fault."""
    if isinstance(exc, QueryError):
        return True
    text = str(getattr(exc, "orig", None) or exc).lower()
    return any(marker in text for marker in _STRUCTURAL_MARKERS)


__all__ = [
    "ErpError",
    "ErpConnectionError",
    "QueryError",
    "MappingError",
    "SyncError",
    "is_structural_error",
]
