from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

Row = dict[str, object]


def _out_of_stock(row: Row) -> bool:
    status = row.get("stock_status")
    return str(getattr(status, "value", status) or "").upper() == "OUT"


INVENTORY_EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("Item Number", "item_number"),
    ("Item Description", "description"),
    ("Business Unit", "business_unit"),
    ("GL Class", "gl_class"),
    ("Primary UOM", "primary_uom"),
    ("Purchasing UOM", "purchasing_uom"),
    ("Total Qty On Hand", "on_hand"),
    ("Available Stock", "available_stock"),
    ("Total Qty On Order", "on_order"),
    ("Total Hard Commit", "hard_committed"),
    ("Total Soft Commit", "soft_committed"),
    ("Total In Transit", "in_transit"),
    ("Total Backorder", "backorder"),
    ("Net Stock", "net_stock"),
    ("Stock Status", "stock_status"),
    ("Safety Stock", "safety_stock"),
    ("Min Order Qty", "min_order_qty"),
    ("Lot Size", "lot_size"),
    ("Buyer", "buyer"),
    ("Product Group", "cost_center"),
    ("Dispatch Group", "planner"),
]

INVENTORY_COMPACT_COLUMNS: list[tuple[str, str]] = [
    ("Item Number", "item_number"),
    ("Item Description", "description"),
    ("Business Unit", "business_unit"),
    ("Total Qty On Hand", "on_hand"),
    ("Available Stock", "available_stock"),
    ("Stock Status", "stock_status"),
]

# Raw legacy quantities; rendered through codec.format_quantity or scaled /100.
QUANTITY_FIELDS = frozenset({
    "on_hand",
    "available_stock",
    "on_order",
    "hard_committed",
    "soft_committed",
    "in_transit",
    "backorder",
    "net_stock",
})


@dataclass(frozen=True)
class ExportTableConfig:
    sheet_name: str
    columns: Sequence[tuple[str, str]]
    highlight_row_predicate: Callable[[Row], bool] | None = None
    column_modes: Mapping[str, Sequence[tuple[str, str]]] = field(default_factory=dict)

    def columns_for(self, mode: str | None) -> list[tuple[str, str]]:
        mode = (mode or "all").strip().lower()
        return list(self.column_modes.get(mode, self.columns))


TABLE_CONFIGS: dict[str, ExportTableConfig] = {
    "inventory": ExportTableConfig(
        sheet_name="Inventory Levels",
        columns=INVENTORY_EXPORT_COLUMNS,
        highlight_row_predicate=_out_of_stock,
        column_modes={"compact": INVENTORY_COMPACT_COLUMNS},
    ),
}

EXPORT_FORMATS = frozenset({"csv", "xlsx"})


__all__ = [
    "EXPORT_FORMATS",
    "ExportTableConfig",
    "INVENTORY_COMPACT_COLUMNS",
    "INVENTORY_EXPORT_COLUMNS",
    "QUANTITY_FIELDS",
    "TABLE_CONFIGS",
]
