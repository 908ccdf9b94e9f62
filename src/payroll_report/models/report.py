"""Report definition and rendered output models."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from payroll_report.models.component import Bucket

ALL_FIELDS = "ALL"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReportType(StrEnum):
    DETAIL = "DETAIL"
    BRANCH_FILTERED = "BRANCH_FILTERED"
    COST_CENTER_AGGREGATE = "COST_CENTER_AGGREGATE"
    HEADCOUNT = "HEADCOUNT"


class ReportRequest(BaseModel):
    """Report creation request as received from a caller."""

    upload_id: str
    name: str
    description: str = ""
    report_type: ReportType = ReportType.DETAIL
    selected_fields: list[str] = Field(default_factory=lambda: [ALL_FIELDS])

    model_config = {"str_strip_whitespace": True}

    @field_validator("selected_fields")
    @classmethod
    def _dedupe(cls, fields: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for name in fields:
            if name:
                seen.setdefault(name, None)
        return list(seen)


class ReportDefinition(BaseModel):
    """Stored report intent. Rendering re-derives from employee records."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    upload_id: str
    owner: str
    name: str
    description: str = ""
    type: ReportType = ReportType.DETAIL
    selected_fields: list[str] = Field(default_factory=lambda: [ALL_FIELDS])
    total_records: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    @property
    def uses_all_fields(self) -> bool:
        return ALL_FIELDS in self.selected_fields


class AvailableField(BaseModel):
    code: str
    name: str
    type: Bucket


class AvailableFields(BaseModel):
    """Selectable report columns of one upload, grouped by bucket."""

    salary: list[AvailableField] = Field(default_factory=list)
    allowance: list[AvailableField] = Field(default_factory=list)
    deduction: list[AvailableField] = Field(default_factory=list)
    neutral: list[AvailableField] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.salary) + len(self.allowance) + len(self.deduction) + len(self.neutral)


class RenderedReport(BaseModel):
    """Workbook bytes ready for download."""

    content: bytes
    filename: str
    content_type: str = XLSX_CONTENT_TYPE


def report_filename(name: str) -> str:
    """Replace every non-alphanumeric character of a report name with ``_``."""
    stem = re.sub(r"[^A-Za-z0-9]", "_", name) or "report"
    return f"{stem}.xlsx"
