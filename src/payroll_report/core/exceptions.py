"""Payroll report exception hierarchy."""

from __future__ import annotations

from typing import Any


class PayrollReportError(Exception):
    """Base exception for all payroll report errors."""


class IngestError(PayrollReportError):
    """Fatal upload rejection. Raised before any employee row is persisted."""

    def __init__(self, message: str, code: str, details: Any = None) -> None:
        self.code = code
        self.details = details
        super().__init__(message)


class ParseError(IngestError):
    """A body row does not have the same number of cells as the header."""

    def __init__(self, row: int, expected: int, actual: int) -> None:
        self.row = row
        self.expected = expected
        self.actual = actual
        kind = "Too many fields" if actual > expected else "Too few fields"
        reason = f"{kind}: expected {expected} fields but parsed {actual}"
        super().__init__(
            "CSV parsing failed",
            "PARSE_ERROR",
            {"row": row, "expected": expected, "actual": actual, "message": reason},
        )
        self.reason = reason

    def __str__(self) -> str:
        return f"CSV parsing failed at row {self.row}: {self.reason}"


class MissingColumnsError(IngestError):
    """Required identity columns were not found in the header."""

    def __init__(self, required: list[str], found: list[str], missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required columns: {', '.join(missing)}",
            "MISSING_COLUMNS",
            {"required": required, "found": found[:20], "missing": missing},
        )


class DuplicateInFileError(IngestError):
    """The same employee number appears more than once inside one file."""

    def __init__(self, duplicates: list[str], total: int) -> None:
        self.duplicates = duplicates
        self.total = total
        super().__init__(
            f"Found {total} duplicate employee numbers in file",
            "DUPLICATE_IN_FILE",
            {"duplicates": duplicates, "total": total},
        )


class RowError(PayrollReportError):
    """A single row could not be turned into an employee record."""

    def __init__(self, row: int, message: str) -> None:
        self.row = row
        super().__init__(f"Row {row}: {message}")


class RegistryError(PayrollReportError):
    """The component registry violates its invariants."""


class NotFoundError(PayrollReportError):
    """A requested entity does not exist for this owner."""


class BatchNotFoundError(NotFoundError):
    """Upload batch not found."""

    def __init__(self, batch_id: str) -> None:
        self.batch_id = batch_id
        super().__init__(f"Upload not found: {batch_id}")


class ReportNotFoundError(NotFoundError):
    """Report definition not found."""

    def __init__(self, report_id: str) -> None:
        self.report_id = report_id
        super().__init__(f"Report not found: {report_id}")


class RenderError(PayrollReportError):
    """Workbook rendering failed."""


class EmptyReportError(PayrollReportError):
    """A report selects no employee rows, so there is nothing to render."""

    code = "EMPTY_REPORT"

    def __init__(self, report_id: str, report_type: str) -> None:
        self.report_id = report_id
        self.report_type = report_type
        super().__init__(f"Report {report_id} ({report_type}) has no matching employee rows")


class StorageError(PayrollReportError):
    """Persistence backend operation failed."""


class CacheError(PayrollReportError):
    """Redis cache operation failed."""
