"""Flat workbook renderer with merged multi-level category headers.

Layout::

    row 1  spacer, merged across every column
    row 2  level1 label, merged over contiguous identical runs
    row 3  level2 label, merged the same way (independently of row 2)
    row 4  level3 label
    row 5  field names
    row 6+ one row per employee
"""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from payroll_report.core.exceptions import RenderError
from payroll_report.ingest.value_parser import is_text_field
from payroll_report.reporting.categorizer import LabelPath, categorize_fields

logger = logging.getLogger(__name__)

HEADER_ROWS = 5
TEXT_FORMAT = "@"

_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
_CENTER = Alignment(horizontal="center", vertical="center")


def label_runs(labels: Sequence[str]) -> list[tuple[int, int]]:
    """Contiguous runs of identical labels as (start, end) 0-based inclusive."""
    runs: list[tuple[int, int]] = []
    start = 0
    for i in range(1, len(labels) + 1):
        if i == len(labels) or labels[i] != labels[start]:
            runs.append((start, i - 1))
            start = i
    return runs


def clean_text(text: str) -> str:
    """Drop control characters the xlsx format cannot store."""
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def cell_value(field: str, value: Any) -> Any:
    if value is None or value == "":
        return None
    if is_text_field(field):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return clean_text(str(value))
    if isinstance(value, str):
        return clean_text(value)
    return value


def write_cell(ws: Worksheet, row: int, column: int, value: Any) -> Cell:
    """Write ``value``; strings starting with ``=`` stay text, never formulas."""
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        cell.data_type = "s"
    return cell


def column_widths(
    table: Sequence[Sequence[Any]],
    *,
    min_width: int = 10,
    max_width: int = 50,
    sample_rows: int = 100,
) -> list[int]:
    """Width per column from the longest text in the first ``sample_rows`` rows."""
    if not table:
        return []
    widths = [min_width] * len(table[0])
    for row in table[:sample_rows]:
        for col, value in enumerate(row):
            text = "" if value is None else str(value)
            widths[col] = max(widths[col], len(text))
    return [min(w + 2, max_width) for w in widths]


def render_flat(
    rows: Sequence[Mapping[str, Any]],
    fields: Sequence[str],
    *,
    sheet_name: str = "Report",
    max_width: int = 50,
    min_width: int = 10,
    sample_rows: int = 100,
) -> bytes:
    """Render rows into an .xlsx workbook and return its bytes.

    Raises:
        RenderError: when there are no fields or no rows.
    """
    if not fields or not rows:
        raise RenderError("No data or fields provided")

    fields = list(fields)
    categories = categorize_fields(fields)
    paths: list[LabelPath] = [categories[f] for f in fields]

    header_table: list[list[Any]] = [
        [None] * len(fields),
        [p.level1 for p in paths],
        [p.level2 for p in paths],
        [p.level3 for p in paths],
        [clean_text(f) for f in fields],
    ]
    data_table = [[cell_value(f, row.get(f)) for f in fields] for row in rows]

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    for r, values in enumerate(header_table, start=1):
        for c, value in enumerate(values, start=1):
            cell = write_cell(ws, r, c, value)
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
            cell.alignment = _CENTER

    text_columns = {i for i, f in enumerate(fields, start=1) if is_text_field(f)}
    for r, values in enumerate(data_table, start=HEADER_ROWS + 1):
        for c, value in enumerate(values, start=1):
            cell = write_cell(ws, r, c, value)
            if c in text_columns and value is not None:
                cell.number_format = TEXT_FORMAT

    merges = 0
    if len(fields) > 1:
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(fields))
        merges += 1
    for r in (2, 3, 4):
        for start, end in label_runs(header_table[r - 1]):
            if end > start:
                ws.merge_cells(start_row=r, start_column=start + 1, end_row=r, end_column=end + 1)
                merges += 1

    widths = column_widths(
        header_table + data_table,
        min_width=min_width,
        max_width=max_width,
        sample_rows=sample_rows,
    )
    for i, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width

    logger.info(
        "Rendered flat workbook: %d fields, %d rows, %d merged ranges, %d text columns",
        len(fields), len(rows), merges, len(text_columns),
    )
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
