"""Representative item-master records served when the legacy system is unreachable.

Only item master has substitutes; other domains come back empty on failure.
"""

from __future__ import annotations

from .records import ItemMaster


def _mock_item(item_number: str, description: str, *, lead_time=14, safety_stock=100, min_order_qty=50,
               max_order_qty=1000, lot_size=100, cost_center="CC001", planner="PLANNER1", buyer="BUYER1") -> ItemMaster:
    return ItemMaster(
        item_number=item_number,
        long_item_number=item_number,
        description=description,
        item_type="P",
        unit_of_measure="EA",
        purchasing_uom="EA",
        gl_class="",
        lead_time=lead_time,
        safety_stock=safety_stock,
        min_order_qty=min_order_qty,
        max_order_qty=max_order_qty,
        lot_size=lot_size,
        cost_center=cost_center,
        planner=planner,
        buyer=buyer,
    )


MOCK_ITEMS: tuple[ItemMaster, ...] = (
    _mock_item("ITEM001", "Raw Material A"),
    _mock_item(
        "ITEM002",
        "Component B",
        lead_time=21,
        safety_stock=200,
        min_order_qty=100,
        max_order_qty=2000,
        lot_size=200,
        cost_center="CC002",
        planner="PLANNER2",
        buyer="BUYER2",
    ),
)


def mock_item_master(item_number: str | None = None) -> list[ItemMaster]:
    """One mock for a requested item number, otherwise the built-in set."""
    if item_number:
        return [_mock_item(item_number, f"Item {item_number}")]
    return list(MOCK_ITEMS)


__all__ = ["MOCK_ITEMS", "mock_item_master"]
