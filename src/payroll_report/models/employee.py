"""Employee record: one row per (upload batch, employee) pair.

Identity and the dedicated metadata columns get their own attributes; every
other source column lands in exactly one of the four bucket maps. Metadata is
mirrored into ``neutral_data`` as well so it stays selectable as a report column.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field


class EmployeeRecord(BaseModel):
    """Single employee payroll row as stored for a batch."""

    # --- Identity ---
    batch_id: str
    employee_no: str
    name: str = ""

    # --- Dedicated metadata ---
    gender: Optional[str] = None
    no_ktp: Optional[str] = None
    tax_file_no: Optional[str] = None
    position: Optional[str] = None
    directorate: Optional[str] = None
    org_unit: Optional[str] = None
    grade: Optional[str] = None
    employment_status: Optional[str] = None
    join_date: Optional[date] = None
    terminate_date: Optional[date] = None
    length_of_service: Optional[str] = None
    tax_status: Optional[str] = None

    # --- Bucketed attribute maps ---
    salary_data: dict[str, Any] = Field(default_factory=dict)
    allowance_data: dict[str, Any] = Field(default_factory=dict)
    deduction_data: dict[str, Any] = Field(default_factory=dict)
    neutral_data: dict[str, Any] = Field(default_factory=dict)

    model_config = {"str_strip_whitespace": True, "frozen": True}

    def merged(self) -> dict[str, Any]:
        """Flatten the four maps into one field -> value mapping.

        On a name clash the first map in salary, allowance, deduction, neutral
        order wins.
        """
        out: dict[str, Any] = {}
        for section in (self.salary_data, self.allowance_data, self.deduction_data, self.neutral_data):
            for key, value in section.items():
                out.setdefault(key, value)
        return out
