"""Tagged query results.

``Ok`` carries live records, ``Degraded`` carries substitute records plus the
reason live data was unavailable, and ``Empty`` carries no records. An
``Empty`` result with ``failed=True`` means every query shape failed; with
``failed=False`` the legacy system simply had nothing to return.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterator, TypeVar

from .paging import PageInfo

T = TypeVar("T")


class ResultKind(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    EMPTY = "empty"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    kind: ResultKind
    records: tuple[T, ...] = ()
    reason: str | None = None
    variant: str | None = None
    failed: bool = False
    page: PageInfo | None = None
    attempted: tuple[str, ...] = field(default=())

    @classmethod
    def ok(cls, records, *, variant=None, page=None, attempted=()) -> "QueryResult[T]":
        records = tuple(records)
        if not records:
            return cls.empty(variant=variant, page=page, attempted=attempted)
        return cls(ResultKind.OK, records, variant=variant, page=page, attempted=tuple(attempted))

    @classmethod
    def degraded(cls, records, reason: str, *, attempted=()) -> "QueryResult[T]":
        return cls(ResultKind.DEGRADED, tuple(records), reason=reason, failed=True, attempted=tuple(attempted))

    @classmethod
    def empty(cls, reason: str | None = None, *, failed: bool = False, variant=None, page=None, attempted=()) -> "QueryResult[T]":
        return cls(ResultKind.EMPTY, (), reason=reason, variant=variant, failed=failed, page=page, attempted=tuple(attempted))

    @property
    def is_ok(self) -> bool:
        return self.kind is ResultKind.OK

    @property
    def is_degraded(self) -> bool:
        return self.kind is ResultKind.DEGRADED

    @property
    def is_empty(self) -> bool:
        return self.kind is ResultKind.EMPTY

    @property
    def is_live(self) -> bool:
        """Records (possibly none) came from the legacy system, not a substitute."""
        return not self.failed

    def __iter__(self) -> Iterator[T]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def as_list(self) -> list[T]:
        return list(self.records)

    def summary(self) -> dict:
        return {
            "kind": self.kind.value,
            "count": len(self.records),
            "reason": self.reason,
            "variant": self.variant,
            "failed": self.failed,
            "attempted": list(self.attempted),
            "page": self.page.as_dict() if self.page else None,
        }


__all__ = ["QueryResult", "ResultKind"]
