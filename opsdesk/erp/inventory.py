"""In-memory views over the full inventory extraction.

The legacy aggregate query is slow, so screens read one cached extraction and
filter, page and summarise it locally.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from .codec import decode_text
from .paging import PageInfo, page_bounds, slice_page
from .records import InventoryLevel, StockStatus
from .results import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 300
ALL = "all"


def _wanted(value) -> str | None:
    text = decode_text(value)
    if not text or text.lower() == ALL:
        return None
    return text


@dataclass(frozen=True)
class InventoryFilter:
    search: str | None = None
    status: str | None = None
    business_unit: str | None = None
    gl_class: str | None = None

    @classmethod
    def from_mapping(cls, data) -> "InventoryFilter":
        data = data or {}
        return cls(
            search=_wanted(data.get("search")),
            status=_wanted(data.get("status")),
            business_unit=_wanted(data.get("business_unit") or data.get("businessUnit")),
            gl_class=_wanted(data.get("gl_class") or data.get("glClass")),
        )

    def matches(self, item: InventoryLevel) -> bool:
        search = _wanted(self.search)
        if search:
            needle = search.lower()
            haystack = (item.item_number, item.description, item.buyer)
            if not any(needle in (field or "").lower() for field in haystack):
                return False
        status = _wanted(self.status)
        if status and item.stock_status.value != status.upper():
            return False
        business_unit = _wanted(self.business_unit)
        if business_unit and item.business_unit.strip() != business_unit:
            return False
        gl_class = _wanted(self.gl_class)
        if gl_class and item.gl_class.strip() != gl_class:
            return False
        return True


def apply_filters(items: Iterable[InventoryLevel], filters: InventoryFilter | None) -> list[InventoryLevel]:
    if filters is None:
        return list(items)
    return [item for item in items if filters.matches(item)]


def paginate(items: Sequence[InventoryLevel], page=1, page_size=50) -> tuple[list[InventoryLevel], PageInfo]:
    bounds = page_bounds(page, page_size)
    return slice_page(list(items), bounds), PageInfo(bounds.page, bounds.page_size, len(items))


def summarize(items: Sequence[InventoryLevel]) -> dict:
    counts = {status: 0 for status in StockStatus}
    total_value = 0
    for item in items:
        counts[item.stock_status] += 1
        # weighted by safety stock (1 when unset), as the planners' dashboard expects
        total_value += item.available_stock * (item.safety_stock or 1)
    return {
        "total_items": len(items),
        "in_stock": counts[StockStatus.OK],
        "low_stock": counts[StockStatus.LOW],
        "out_of_stock": counts[StockStatus.OUT],
        "total_value": total_value,
    }


class InventoryCache:
    """Holds the last successful full extraction for ``ttl_seconds``.

    Failed extractions are never cached; the caller gets the failed result and
    the next read tries again.
    """

    def __init__(self, loader: Callable[[], QueryResult[InventoryLevel]], *, ttl_seconds: int = DEFAULT_CACHE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._items: tuple[InventoryLevel, ...] = ()
        self._loaded_at: float | None = None
        self._cached_at: datetime | None = None

    @classmethod
    def for_connector(cls, connector, **kwargs) -> "InventoryCache":
        return cls(connector.get_all_inventory_items, **kwargs)

    @property
    def age_seconds(self) -> float | None:
        if self._loaded_at is None:
            return None
        return self._clock() - self._loaded_at

    def is_fresh(self) -> bool:
        age = self.age_seconds
        return age is not None and age < self.ttl_seconds

    def invalidate(self) -> None:
        with self._lock:
            self._items = ()
            self._loaded_at = None
            self._cached_at = None

    def get(self) -> QueryResult[InventoryLevel]:
        with self._lock:
            if self.is_fresh():
                logger.debug("Inventory cache hit (%d items)", len(self._items))
                return QueryResult.ok(self._items, variant="cache")

            logger.info("Inventory cache expired or empty, reloading")
            result = self._loader()
            if result.failed:
                logger.warning("Inventory reload failed, cache left empty: %s", result.reason)
                return result
            self._items = tuple(result.records)
            self._loaded_at = self._clock()
            self._cached_at = datetime.now(timezone.utc)
            return result

    def query(self, filters: InventoryFilter | None = None, page=1, page_size=50) -> dict:
        """Filtered page plus summary and cache metadata, in one payload."""
        result = self.get()
        filtered = apply_filters(result.records, filters)
        page_items, page_info = paginate(filtered, page, page_size)
        return {
            "success": not result.failed,
            "error": result.reason if result.failed else None,
            "inventory_levels": page_items,
            "pagination": page_info.as_dict(),
            "summary": summarize(filtered),
            "cache_info": {
                "cached_at": self._cached_at.isoformat() if self._cached_at else None,
                "cache_age_seconds": self.age_seconds,
                "total_cached_items": len(self._items),
            },
        }


def get_inventory_cache(app=None) -> InventoryCache:
    """The app's shared cache over ``get_all_inventory_items``."""
    from flask import current_app

    from .connector import get_connector

    app = app or current_app._get_current_object()
    cache = app.extensions.get("inventory_cache")
    if cache is None:
        ttl = int(app.config.get("INVENTORY_CACHE_SECONDS", DEFAULT_CACHE_SECONDS))
        cache = InventoryCache.for_connector(get_connector(app), ttl_seconds=ttl)
        app.extensions["inventory_cache"] = cache
    return cache


__all__ = [
    "InventoryCache",
    "InventoryFilter",
    "apply_filters",
    "get_inventory_cache",
    "paginate",
    "summarize",
]
