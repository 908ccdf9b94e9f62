"""Header normalization of raw upload bytes into one header row plus body rows.

Payroll exports come in two shapes: a plain single header, or a category row
(SALARY / ALLOWANCE / ...) above the real field-name row. Both are collapsed
into a single list of unique, non-empty column names.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field

from payroll_report.core.exceptions import IngestError, ParseError

logger = logging.getLogger(__name__)

CATEGORY_MARKERS = ("SALARY", "ALLOWANCE", "DEDUCTION", "NEUTRAL", "TOTAL")
FIELD_ROW_MARKERS = ("Name", "Employee")

_BOM = "\ufeff"
_NUMERIC = re.compile(r"^\d+$")


@dataclass
class ParsedTable:
    """Normalized CSV contents."""

    headers: list[str]
    rows: list[dict[str, str]] = field(default_factory=list)
    delimiter: str = ","
    encoding: str = "utf-8"
    double_header: bool = False


def decode_content(raw: bytes) -> tuple[str, str]:
    """Decode upload bytes as UTF-8 (BOM tolerated), falling back to Latin-1."""
    try:
        text, encoding = raw.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        text, encoding = raw.decode("latin-1"), "latin-1"
    if text.startswith(_BOM):
        text = text[1:]
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text, encoding


def detect_delimiter(first_line: str) -> str:
    return "\t" if "\t" in first_line else ","


def is_double_header(row1: list[str], row2: list[str]) -> bool:
    """True when row 1 carries category labels and row 2 the field names."""
    upper = " ".join(row1).upper()
    if not any(marker in upper for marker in CATEGORY_MARKERS):
        return False
    second = " ".join(row2)
    return any(marker in second for marker in FIELD_ROW_MARKERS)


def merge_header_rows(categories: list[str], fields: list[str]) -> list[str]:
    """Combine a category row and a field-name row into one header.

    The field name wins unless it is blank or purely numeric; then the
    category label is used, and ``Column_<i>`` when both are blank.
    """
    merged: list[str] = []
    for i in range(max(len(categories), len(fields))):
        name = fields[i].strip() if i < len(fields) else ""
        category = categories[i].strip() if i < len(categories) else ""
        if name and not _NUMERIC.match(name):
            merged.append(name)
        elif category:
            merged.append(category)
        else:
            merged.append(f"Column_{i}")
    return merged


def _dedupe(headers: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    out: list[str] = []
    for name in headers:
        count = seen.get(name, 0)
        seen[name] = count + 1
        out.append(name if count == 0 else f"{name}_{count}")
    return out


def _read_lines(text: str, delimiter: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    return [line for line in reader if any(cell.strip() for cell in line)]


def normalize(raw: bytes) -> ParsedTable:
    """Decode, split and header-normalize a raw CSV upload.

    Raises:
        IngestError: EMPTY_FILE when the content has no header line.
        ParseError: when a body row's cell count differs from the header.
    """
    text, encoding = decode_content(raw)
    first_line = next((line for line in text.split("\n") if line.strip()), "")
    if not first_line:
        raise IngestError("File is empty", "EMPTY_FILE")

    delimiter = detect_delimiter(first_line)
    lines = _read_lines(text, delimiter)

    double = len(lines) >= 2 and is_double_header(lines[0], lines[1])
    if double:
        headers = merge_header_rows(lines[0], lines[1])
        body = lines[2:]
    else:
        headers = [
            cell.strip() or f"Column_{i}" for i, cell in enumerate(lines[0])
        ]
        body = lines[1:]
    headers = _dedupe(headers)

    rows: list[dict[str, str]] = []
    for index, cells in enumerate(body):
        if len(cells) != len(headers):
            raise ParseError(index, len(headers), len(cells))
        rows.append({name: cell.strip() for name, cell in zip(headers, cells)})

    logger.info(
        "Normalized upload: %d columns, %d rows (double_header=%s, delimiter=%r, encoding=%s)",
        len(headers), len(rows), double, delimiter, encoding,
    )
    return ParsedTable(
        headers=headers,
        rows=rows,
        delimiter=delimiter,
        encoding=encoding,
        double_header=double,
    )
