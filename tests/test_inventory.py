from __future__ import annotations

from decimal import Decimal

import pytest

from opsdesk.erp.inventory import InventoryCache, InventoryFilter, apply_filters, paginate, summarize
from opsdesk.erp.records import InventoryLevel, StockStatus, derive_stock_status
from opsdesk.erp.results import QueryResult


def _level(item_number, on_hand, hard=0, soft=0, **attrs) -> InventoryLevel:
    defaults = dict(
        description=f"Item {item_number}",
        item_type="P",
        primary_uom="EA",
        purchasing_uom="EA",
        safety_stock=0,
        min_order_qty=0,
        max_order_qty=0,
        lot_size=0,
        cost_center="",
        planner="",
        buyer="BUYER1",
        gl_class="IN10",
        business_unit="M30",
        in_transit=Decimal(0),
        backorder=Decimal(0),
    )
    defaults.update(attrs)
    return InventoryLevel.from_totals(
        on_hand=Decimal(on_hand),
        on_order=Decimal(0),
        hard_committed=Decimal(hard),
        soft_committed=Decimal(soft),
        item_number=item_number,
        **defaults,
    )


ITEMS = [
    _level("ITEM001", 500, hard=100, soft=50),
    _level("ITEM002", 9, gl_class="IN20", business_unit="M40", buyer="BUYER2"),
    _level("BOLT-10", 10, description="Hex bolt"),
    _level("NUT-05", 3, hard=3, safety_stock=4),
]


@pytest.mark.parametrize(
    "available, expected",
    [(0, StockStatus.OUT), (-4, StockStatus.OUT), (1, StockStatus.LOW), (9, StockStatus.LOW), (10, StockStatus.OK)],
)
def test_stock_status_boundaries(available, expected):
    assert derive_stock_status(available) is expected


def test_from_totals_derives_available_and_net():
    level = InventoryLevel.from_totals(
        on_hand=Decimal(100),
        on_order=Decimal(30),
        hard_committed=Decimal(20),
        soft_committed=Decimal(5),
        **{k: v for k, v in _level("X", 0).as_dict().items()
           if k not in {"on_hand", "on_order", "committed", "hard_committed", "soft_committed",
                        "available_stock", "net_stock", "stock_status"}},
    )
    assert level.committed == 25
    assert level.available_stock == 75
    assert level.net_stock == 105
    assert level.stock_status is StockStatus.OK


def test_filters_search_status_unit_and_gl_class():
    assert [i.item_number for i in apply_filters(ITEMS, InventoryFilter(search="bolt"))] == ["BOLT-10"]
    assert [i.item_number for i in apply_filters(ITEMS, InventoryFilter(search="buyer2"))] == ["ITEM002"]
    assert [i.item_number for i in apply_filters(ITEMS, InventoryFilter(status="low"))] == ["ITEM002"]
    assert [i.item_number for i in apply_filters(ITEMS, InventoryFilter(business_unit="M40"))] == ["ITEM002"]
    assert len(apply_filters(ITEMS, InventoryFilter(gl_class="IN10"))) == 3
    assert len(apply_filters(ITEMS, InventoryFilter(status="all", gl_class="all"))) == 4


def test_filter_from_mapping_accepts_camel_case_keys():
    filters = InventoryFilter.from_mapping({"businessUnit": "M40", "glClass": "all", "search": ""})
    assert filters == InventoryFilter(business_unit="M40")


def test_paginate_and_summary():
    page_items, info = paginate(ITEMS, page=2, page_size=3)
    assert [i.item_number for i in page_items] == ["NUT-05"]
    assert info.total_pages == 2

    summary = summarize(ITEMS)
    assert summary["total_items"] == 4
    assert summary["in_stock"] == 2
    assert summary["low_stock"] == 1
    assert summary["out_of_stock"] == 1
    # available x safety stock (1 when unset)
    assert summary["total_value"] == Decimal(350 + 9 + 10 + 0)


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_reuses_extraction_until_ttl_expires():
    calls = []
    clock = _Clock()

    def loader():
        calls.append(clock.now)
        return QueryResult.ok(ITEMS, variant="full")

    cache = InventoryCache(loader, ttl_seconds=300, clock=clock)
    assert len(cache.get()) == 4
    clock.now += 299
    assert cache.get().variant == "cache"
    assert len(calls) == 1

    clock.now += 2
    cache.get()
    assert len(calls) == 2

    cache.invalidate()
    cache.get()
    assert len(calls) == 3


def test_cache_does_not_keep_failed_extractions():
    results = [QueryResult.empty("ORA-12541: no listener", failed=True), QueryResult.ok(ITEMS)]
    cache = InventoryCache(lambda: results.pop(0), clock=_Clock())

    first = cache.get()
    assert first.failed
    assert not cache.is_fresh()

    assert len(cache.get()) == 4
    assert cache.is_fresh()


def test_cache_query_payload(connector):
    cache = InventoryCache.for_connector(connector, ttl_seconds=60)

    payload = cache.query(InventoryFilter(status="OUT"), page=1, page_size=10)

    assert payload["success"]
    assert [i.item_number for i in payload["inventory_levels"]] == ["ITEM003"]
    assert payload["pagination"]["total_count"] == 1
    assert payload["summary"]["out_of_stock"] == 1
    assert payload["cache_info"]["total_cached_items"] == 3
