from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from ..erp.codec import QUANTITY_SCALE, decode_decimal, format_quantity
from ..erp.records import InventoryLevel
from .modes import EXPORT_FORMATS, QUANTITY_FIELDS, TABLE_CONFIGS
from .workbook import render_csv, render_workbook, workbook_bytes

Row = dict[str, object]
PipelineStep = Callable[[list[Row]], list[Row]]

CSV_MIMETYPE = "text/csv"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def apply_pipeline(rows: list[Row], steps: Iterable[PipelineStep]) -> list[Row]:
    current = rows
    for step in steps:
        current = step(current)
    return current


def parse_column_selection(param: str | None) -> list[str]:
    if not param:
        return []
    seen: set[str] = set()
    results: list[str] = []
    for part in param.split(","):
        field = part.strip()
        if not field or field in seen:
            continue
        seen.add(field)
        results.append(field)
    return results


def filter_export_columns(
    column_defs: Sequence[tuple[str, str]],
    requested_fields: Sequence[str],
) -> list[tuple[str, str]]:
    if not requested_fields:
        return []
    lookup = {field_name: (header, field_name) for header, field_name in column_defs}
    filtered: list[tuple[str, str]] = []
    for field in requested_fields:
        column = lookup.get(field)
        if column and column not in filtered:
            filtered.append(column)
    return filtered


def inventory_rows(items: Iterable[InventoryLevel]) -> list[Row]:
    return [item.as_dict() for item in items]


def display_quantities(rows: list[Row]) -> list[Row]:
    """Quantities as display text (/100, whole numbers for count units)."""
    out: list[Row] = []
    for row in rows:
        row = dict(row)
        uom = row.get("primary_uom")
        for field in QUANTITY_FIELDS:
            if field in row:
                row[field] = format_quantity(row[field], uom)
        out.append(row)
    return out


def scale_quantities(rows: list[Row]) -> list[Row]:
    """Quantities as numbers in display units, for spreadsheet arithmetic."""
    out: list[Row] = []
    for row in rows:
        row = dict(row)
        for field in QUANTITY_FIELDS:
            if field in row:
                row[field] = decode_decimal(row[field]) / Decimal(QUANTITY_SCALE)
        out.append(row)
    return out


def export_inventory(
    items: Iterable[InventoryLevel],
    fmt: str = "csv",
    *,
    column_mode: str | None = None,
    columns: str | None = None,
    include_headers: bool = True,
    today: date | None = None,
) -> tuple[bytes, str, str]:
    """Render inventory levels; returns (payload, filename, mimetype)."""
    fmt = (fmt or "csv").strip().lower()
    if fmt == "excel":
        fmt = "xlsx"
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f'Unsupported format {fmt!r}. Use "csv" or "xlsx"')

    config = TABLE_CONFIGS["inventory"]
    column_defs = config.columns_for(column_mode)
    requested = parse_column_selection(columns)
    if requested:
        column_defs = filter_export_columns(column_defs, requested) or column_defs

    stamp = (today or date.today()).isoformat()
    rows = inventory_rows(items)
    if fmt == "csv":
        rows = apply_pipeline(rows, [display_quantities])
        payload = render_csv(rows, column_defs, include_headers=include_headers).encode("utf-8")
        return payload, f"inventory_export_{stamp}.csv", CSV_MIMETYPE

    rows = apply_pipeline(rows, [scale_quantities])
    workbook = render_workbook(
        config.sheet_name,
        rows,
        column_defs,
        highlight_row_predicate=config.highlight_row_predicate,
    )
    return workbook_bytes(workbook), f"inventory_export_{stamp}.xlsx", XLSX_MIMETYPE


__all__ = [
    "CSV_MIMETYPE",
    "XLSX_MIMETYPE",
    "apply_pipeline",
    "display_quantities",
    "export_inventory",
    "filter_export_columns",
    "inventory_rows",
    "parse_column_selection",
    "scale_quantities",
]
