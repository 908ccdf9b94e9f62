"""Cost-center workbook: fixed header block plus COA sections per directorate pair.

Every directorate occupies two columns: employee count and value. A ``-`` in a
cell means the directorate has no employees under that COA code; ``0`` means
the group exists and its measured value is zero. Consumers rely on the
difference, so the two are never collapsed.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from payroll_report.reporting.aggregator import (
    COST_CENTER_COMPONENTS,
    AggregatedReport,
    CoaSection,
)
from payroll_report.reporting.renderer import clean_text, write_cell

logger = logging.getLogger(__name__)

SHEET_NAME = "Cost Center Report"
NOT_APPLICABLE = "-"
NUMBER_FORMAT = "#,##0"

HEADER_BLUE = "C5D9F1"
BAND_GREEN = "A9D08E"
BAND_YELLOW = "FFD966"
COA600_GREY = "D9D9D9"
COA500_BEIGE = "F2DCDB"
GRAND_TOTAL_BLUE = "B4C7E7"

SECTION_COLORS = {"600": COA600_GREY, "500": COA500_BEIGE}

INDONESIAN_MONTHS = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)

FIRST_DATA_COLUMN = 3
_THIN = Side(style="thin", color="000000")
_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def parse_period(period: str) -> tuple[int, int]:
    """Split a ``YYYY-MM`` period into (year, month)."""
    year, month = period.split("-")[:2]
    return int(year), int(month)


def month_name(month: int) -> str:
    return INDONESIAN_MONTHS[month - 1]


def _put(
    ws: Worksheet,
    row: int,
    col: int,
    value: Any,
    color: str,
    *,
    bold: bool = False,
    horizontal: str = "center",
) -> None:
    if isinstance(value, str):
        value = clean_text(value)
    cell = write_cell(ws, row, col, value)
    cell.fill = _fill(color)
    cell.border = _BORDER
    cell.font = Font(name="Calibri", size=11, bold=bold)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        cell.number_format = NUMBER_FORMAT
        cell.alignment = Alignment(horizontal="right", vertical="center")
    else:
        cell.alignment = Alignment(horizontal=horizontal, vertical="center")


def _pair_columns(index: int) -> tuple[int, int]:
    first = FIRST_DATA_COLUMN + index * 2
    return first, first + 1


def _band(index: int) -> str:
    return BAND_GREEN if index % 2 == 0 else BAND_YELLOW


def _write_pair(ws: Worksheet, row: int, index: int, count: Optional[float], value: Optional[float], color: str) -> None:
    count_col, value_col = _pair_columns(index)
    _put(ws, row, count_col, NOT_APPLICABLE if count is None else count, color)
    _put(ws, row, value_col, NOT_APPLICABLE if value is None else value, color)


def _write_header(ws: Worksheet, report: AggregatedReport, year: int, month: int) -> None:
    _put(ws, 1, 1, "Salary Cost", HEADER_BLUE, bold=True)
    _put(ws, 1, 2, str(year), HEADER_BLUE, bold=True)

    _put(ws, 3, 1, "COA", HEADER_BLUE, bold=True)
    _put(ws, 3, 2, "Komponen Gaji", HEADER_BLUE, bold=True)
    _put(ws, 3, 3, month_name(month), HEADER_BLUE, bold=True)

    for index, name in enumerate(report.directorates):
        color = _band(index)
        count_col, value_col = _pair_columns(index)
        _put(ws, 4, count_col, "Cost Center", color, bold=True)
        _put(ws, 4, value_col, None, color, bold=True)
        ws.merge_cells(start_row=4, start_column=count_col, end_row=4, end_column=value_col)
        _put(ws, 5, count_col, "Jumlah Karyawan", color, bold=True)
        _put(ws, 5, value_col, name, color, bold=True)


def _write_grand_total(ws: Worksheet, row: int, report: AggregatedReport) -> None:
    _put(ws, row, 1, None, GRAND_TOTAL_BLUE, bold=True)
    _put(ws, row, 2, "Grand Total", GRAND_TOTAL_BLUE, bold=True, horizontal="left")
    for index, name in enumerate(report.directorates):
        cell = report.grand_total.by_directorate[name]
        _write_pair(ws, row, index, cell.employee_count, cell.value, GRAND_TOTAL_BLUE)


def _write_section(ws: Worksheet, row: int, section: CoaSection, directorates: list[str]) -> int:
    color = SECTION_COLORS.get(section.coa, HEADER_BLUE)

    _put(ws, row, 1, section.coa, color, bold=True)
    _put(ws, row, 2, "Total", color, bold=True, horizontal="left")
    for index, name in enumerate(directorates):
        group = section.find(name)
        if group is None:
            _write_pair(ws, row, index, None, None, color)
        else:
            _write_pair(ws, row, index, group.employee_count, group.total, color)

    for component in COST_CENTER_COMPONENTS:
        row += 1
        _put(ws, row, 1, None, color)
        _put(ws, row, 2, component, color, horizontal="left")
        for index, name in enumerate(directorates):
            group = section.find(name)
            if group is None:
                _write_pair(ws, row, index, None, None, color)
            else:
                _write_pair(ws, row, index, group.employee_count, group.components[component], color)
    return row


def render_cost_center(report: AggregatedReport, period: str) -> bytes:
    """Render an aggregated report for a ``YYYY-MM`` period into .xlsx bytes."""
    year, month = parse_period(period)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    _write_header(ws, report, year, month)
    row = 6
    _write_grand_total(ws, row, report)
    for section in report.sections:
        row = _write_section(ws, row + 1, section, report.directorates)

    ws.column_dimensions["A"].width = 8
    ws.column_dimensions["B"].width = 45
    for index in range(len(report.directorates)):
        count_col, value_col = _pair_columns(index)
        ws.column_dimensions[get_column_letter(count_col)].width = 15
        ws.column_dimensions[get_column_letter(value_col)].width = 20

    logger.info(
        "Rendered cost center workbook: %d directorates, %d rows", len(report.directorates), row
    )
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
