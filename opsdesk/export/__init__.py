"""Export helpers for inventory extractions."""

from .modes import (
    EXPORT_FORMATS,
    INVENTORY_COMPACT_COLUMNS,
    INVENTORY_EXPORT_COLUMNS,
    TABLE_CONFIGS,
)
from .prep import (
    apply_pipeline,
    export_inventory,
    filter_export_columns,
    parse_column_selection,
)
from .workbook import render_csv, render_workbook

__all__ = [
    "EXPORT_FORMATS",
    "INVENTORY_COMPACT_COLUMNS",
    "INVENTORY_EXPORT_COLUMNS",
    "TABLE_CONFIGS",
    "apply_pipeline",
    "export_inventory",
    "filter_export_columns",
    "parse_column_selection",
    "render_csv",
    "render_workbook",
]
