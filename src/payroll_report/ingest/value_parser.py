"""Cell value parsing with an explicit text-field allowlist."""

from __future__ import annotations

import re
from typing import Any

# Identifier-like columns that must never be coerced to numbers (leading zeros,
# 16-digit KTP numbers and account numbers lose precision as floats).
TEXT_FIELDS: frozenset[str] = frozenset({
    "Jobstatus Code",
    "No KTP",
    "Gov. Tax File No.",
    "Employee No",
    "Cost Center Code",
    "Work Location Code",
    "Tax Location Code",
    "Company Bank Account",
    "Bank Account",
    "Insurance No BPJSKT",
    "Insurance No BPJSKES",
})

_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def is_text_field(name: str) -> bool:
    return name in TEXT_FIELDS


def parse_value(field: str, raw: Any) -> Any:
    """Parse one cell.

    Empty cells pass through unchanged. Text-allowlist fields come back as the
    trimmed string. Anything else is stripped of quotes and thousands
    separators and returned as ``float`` when it looks numeric.
    """
    if raw is None or raw == "":
        return raw
    if not isinstance(raw, str):
        return raw
    if field in TEXT_FIELDS:
        return raw.strip()
    cleaned = raw.replace('"', "").replace(",", "").strip()
    if _NUMBER.match(cleaned):
        return float(cleaned)
    return cleaned


def to_number(value: Any) -> float:
    """Coerce a stored value to a number for summation; anything else is 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if _NUMBER.match(cleaned):
            return float(cleaned)
    return 0.0
