from __future__ import annotations

import csv
import io
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

Row = dict[str, object]
ColumnDef = Sequence[tuple[str, str]]

HIGHLIGHT_COLOR = "F8D7DA"


def _coerce_excel_value(value):
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


def render_workbook(
    sheet_name: str,
    rows: Iterable[Row],
    columns: ColumnDef,
    *,
    header_overrides: dict[str, str] | None = None,
    highlight_row_predicate: Callable[[Row], bool] | None = None,
    highlight_color: str = HIGHLIGHT_COLOR,
) -> Workbook:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name[:31]

    overrides = header_overrides or {}
    worksheet.append([overrides.get(field, header) for header, field in columns])
    for cell in worksheet[1]:
        cell.font = Font(bold=True)

    highlight_fill = None
    if highlight_row_predicate is not None:
        highlight_fill = PatternFill(start_color=highlight_color, end_color=highlight_color, fill_type="solid")

    for row_number, data_row in enumerate(rows, start=2):
        worksheet.append([_coerce_excel_value(data_row.get(field)) for _, field in columns])

        if highlight_fill is not None and highlight_row_predicate(data_row):
            for col_idx in range(1, len(columns) + 1):
                worksheet.cell(row=row_number, column=col_idx).fill = highlight_fill

    worksheet.freeze_panes = "A2"
    if worksheet.max_row and worksheet.max_column:
        worksheet.auto_filter.ref = worksheet.dimensions

    max_row_for_width = min(worksheet.max_row, 200)
    for idx, column_cells in enumerate(worksheet.iter_cols(1, len(columns), 1, max_row_for_width), start=1):
        max_length = max((len(str(cell.value)) for cell in column_cells if cell.value is not None), default=0)
        worksheet.column_dimensions[get_column_letter(idx)].width = min(max_length + 2, 60)

    return workbook


def render_csv(
    rows: Iterable[Row],
    columns: ColumnDef,
    *,
    include_headers: bool = True,
    header_overrides: dict[str, str] | None = None,
) -> str:
    """Comma separated text, every text field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    overrides = header_overrides or {}
    if include_headers:
        writer.writerow([overrides.get(field, header) for header, field in columns])
    for data_row in rows:
        writer.writerow([_coerce_excel_value(data_row.get(field)) for _, field in columns])
    return buffer.getvalue()


def workbook_bytes(workbook: Workbook) -> bytes:
    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


__all__ = ["HIGHLIGHT_COLOR", "render_csv", "render_workbook", "workbook_bytes"]
