from __future__ import annotations

import math
from dataclasses import dataclass

# Dialects that understand `OFFSET n ROWS FETCH NEXT m ROWS ONLY`.
OFFSET_FETCH_DIALECTS = frozenset({"oracle", "mssql", "postgresql"})


@dataclass(frozen=True, slots=True)
class PageBounds:
    page: int
    page_size: int
    offset: int
    limit: int

    def params(self) -> dict[str, int]:
        return {"page_offset": self.offset, "page_limit": self.limit}

    def paging_clause(self, dialect: str) -> str:
        """Trailing clause for an ORDER BY'd query."""
        if dialect in OFFSET_FETCH_DIALECTS:
            return "OFFSET :page_offset ROWS FETCH NEXT :page_limit ROWS ONLY"
        return "LIMIT :page_limit OFFSET :page_offset"


@dataclass(frozen=True, slots=True)
class RowCap:
    """Single-page cap; Oracle applies it as a ROWNUM predicate."""

    limit: int

    def params(self) -> dict[str, int]:
        return {"row_cap": self.limit}

    def where_predicate(self, dialect: str) -> str | None:
        if dialect == "oracle":
            return "ROWNUM <= :row_cap"
        return None

    def tail_clause(self, dialect: str) -> str:
        if dialect == "oracle":
            return ""
        if dialect in OFFSET_FETCH_DIALECTS:
            return "OFFSET 0 ROWS FETCH NEXT :row_cap ROWS ONLY"
        return "LIMIT :row_cap"


@dataclass(frozen=True, slots=True)
class PageInfo:
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def as_dict(self) -> dict:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
        }


def page_bounds(page, page_size) -> PageBounds:
    """Translate a 1-based page number and page size into offset/limit."""
    try:
        page_num = int(page)
    except (TypeError, ValueError):
        page_num = 1
    try:
        size = int(page_size)
    except (TypeError, ValueError):
        size = 1
    page_num = max(page_num, 1)
    size = max(size, 1)
    return PageBounds(page=page_num, page_size=size, offset=(page_num - 1) * size, limit=size)


def slice_page(items: list, bounds: PageBounds) -> list:
    """Same bounds applied to an already materialised list."""
    return items[bounds.offset:bounds.offset + bounds.limit]


__all__ = [
    "PageBounds",
    "PageInfo",
    "RowCap",
    "page_bounds",
    "slice_page",
]
