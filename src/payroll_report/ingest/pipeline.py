"""Ingestion service: validate an upload, then persist its employees in chunks.

Two phases:

``submit`` runs synchronously on the request path. It performs every fatal
structural check (period, parse, required columns, in-file duplicates), creates
the PROCESSING batch, archives the raw bytes and works out which employees were
already uploaded for the same period. Nothing is persisted for a rejected file.

``run`` classifies and stores the rows chunk by chunk, advancing progress after
each chunk, and closes the batch as COMPLETED or FAILED.
"""

from __future__ import annotations

import logging
import re
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from payroll_report.core.config import IngestConfig
from payroll_report.core.exceptions import (
    BatchNotFoundError,
    DuplicateInFileError,
    IngestError,
    MissingColumnsError,
    RowError,
)
from payroll_report.core.protocols import (
    IBatchStore,
    IComponentRegistry,
    IEmployeeStore,
    IFileStore,
)
from payroll_report.ingest.classifier import partition_row
from payroll_report.ingest.header_normalizer import normalize
from payroll_report.models.batch import BatchStatus, IngestResult, IngestSummary, UploadBatch
from payroll_report.models.component import RegistrySnapshot
from payroll_report.models.employee import EmployeeRecord

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
DATE_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%Y/%m/%d",
)

# Source column -> EmployeeRecord attribute for the dedicated metadata.
METADATA_COLUMNS = {
    "Gender": "gender",
    "No KTP": "no_ktp",
    "Gov. Tax File No.": "tax_file_no",
    "Position": "position",
    "Directorate": "directorate",
    "Org Unit": "org_unit",
    "Grade": "grade",
    "Employment Status": "employment_status",
    "Length of Service": "length_of_service",
    "Tax Status": "tax_status",
}
DATE_COLUMNS = {"Join Date": "join_date", "Terminate Date": "terminate_date"}


@dataclass
class IngestJob:
    """Everything ``run`` needs, captured once by ``submit``."""

    batch: UploadBatch
    rows: list[dict[str, str]]
    registry: RegistrySnapshot
    name_column: str
    employee_no_column: str
    existing: frozenset[str] = frozenset()
    duplicate_count: int = 0
    warning: Optional[str] = None

    @property
    def result(self) -> IngestResult:
        return IngestResult(
            batch=self.batch,
            duplicate_count=self.duplicate_count,
            warning=self.warning,
        )


@dataclass
class _ChunkOutcome:
    records: list[EmployeeRecord] = field(default_factory=list)
    skipped_empty: int = 0
    skipped_duplicates: int = 0
    errors: list[RowError] = field(default_factory=list)


def validate_period(period: Optional[str]) -> str:
    if not period:
        raise IngestError("Period is required", "MISSING_PERIOD")
    period = period.strip()
    if not PERIOD_PATTERN.match(period):
        raise IngestError(
            f"Period must be formatted YYYY-MM, got {period!r}",
            "INVALID_PERIOD",
            {"period": period},
        )
    return period


def resolve_column(headers: list[str], wanted: str) -> Optional[str]:
    """Exact header match first, else the first header containing ``wanted``."""
    if wanted in headers:
        return wanted
    return next((h for h in headers if wanted in h), None)


def parse_date(raw: Any) -> Optional[date]:
    """Parse a date cell. Empty cells are ``None``; unknown formats raise ValueError."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError(f"Unrecognised date {text!r}") from None


def find_duplicates(values: list[str]) -> list[str]:
    counts = Counter(v for v in values if v)
    return [value for value, n in counts.items() if n > 1]


class IngestionService:
    """Upload validation and chunked employee persistence."""

    def __init__(
        self,
        employees: IEmployeeStore,
        batches: IBatchStore,
        registry: IComponentRegistry,
        files: Optional[IFileStore] = None,
        config: Optional[IngestConfig] = None,
    ) -> None:
        self._employees = employees
        self._batches = batches
        self._registry = registry
        self._files = files
        self._config = config or IngestConfig()

    # ------------------------------------------------------------------
    # Phase 1: synchronous validation
    # ------------------------------------------------------------------

    def submit(
        self,
        content: Optional[bytes],
        *,
        period: Optional[str],
        owner: str,
        filename: str = "upload.csv",
    ) -> IngestJob:
        """Validate an upload and create its PROCESSING batch.

        Raises:
            IngestError: any fatal structural problem. No batch or employee
                row exists when this is raised.
        """
        if not content:
            raise IngestError("File is required", "MISSING_FILE")
        period = validate_period(period)

        table = normalize(content)
        if not table.rows:
            raise IngestError("CSV file is empty", "EMPTY_FILE")

        required = list(self._config.required_columns)
        missing = [col for col in required if resolve_column(table.headers, col) is None]
        if missing:
            raise MissingColumnsError(required, table.headers, missing)

        name_col = resolve_column(table.headers, "Name") or "Name"
        emp_col = resolve_column(table.headers, "Employee No") or "Employee No"

        employee_numbers = [row.get(emp_col, "") for row in table.rows]
        duplicates = find_duplicates(employee_numbers)
        if duplicates:
            raise DuplicateInFileError(
                duplicates[: self._config.duplicate_sample_size], len(duplicates)
            )

        registry = RegistrySnapshot(self._registry.list_active())

        existing = self._existing_employees(period, owner)
        duplicate_count = sum(1 for no in set(employee_numbers) if no and no in existing)
        warning = None
        if duplicate_count:
            warning = (
                f"{duplicate_count} employees already uploaded for period {period} "
                "will be skipped"
            )

        batch = UploadBatch(
            owner=owner,
            period=period,
            original_name=filename,
            file_size=len(content),
            row_count=len(table.rows),
        )
        batch.raw_path = self._archive(batch, content)
        batch = self._batches.create(batch)

        logger.info(
            "Upload accepted: batch=%s period=%s rows=%d columns=%d duplicates=%d",
            batch.id, period, len(table.rows), len(table.headers), duplicate_count,
        )
        return IngestJob(
            batch=batch,
            rows=table.rows,
            registry=registry,
            name_column=name_col,
            employee_no_column=emp_col,
            existing=frozenset(existing),
            duplicate_count=duplicate_count,
            warning=warning,
        )

    def _existing_employees(self, period: str, owner: str) -> set[str]:
        batch_ids = [
            b.id for b in self._batches.list_by_period(period, owner)
            if b.status != BatchStatus.FAILED
        ]
        if not batch_ids:
            return set()
        return self._employees.employee_numbers(batch_ids)

    def _archive(self, batch: UploadBatch, content: bytes) -> Optional[str]:
        if self._files is None or not self._config.archive_raw_files:
            return None
        return self._files.archive_upload(batch, content)

    # ------------------------------------------------------------------
    # Batch queries
    # ------------------------------------------------------------------

    def get_batch(self, batch_id: str, owner: str) -> UploadBatch:
        batch = self._batches.get(batch_id)
        if batch is None or batch.owner != owner:
            raise BatchNotFoundError(batch_id)
        return batch

    def list_batches(self, owner: str) -> list[UploadBatch]:
        return sorted(self._batches.list_by_owner(owner), key=lambda b: b.uploaded_at, reverse=True)

    def delete_batch(self, batch_id: str, owner: str) -> int:
        """Delete a batch together with its employee rows."""
        self.get_batch(batch_id, owner)
        removed = self._employees.delete_by_batch(batch_id)
        self._batches.delete(batch_id)
        logger.info("Deleted batch %s and %d employee rows", batch_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Phase 2: chunked processing
    # ------------------------------------------------------------------

    def run(self, job: IngestJob) -> IngestSummary:
        """Classify and persist every row of a submitted job.

        Per-row failures are logged and skipped. Any other failure marks the
        batch FAILED and is re-raised.
        """
        batch_id = job.batch.id
        total = len(job.rows)
        chunk_size = max(1, self._config.chunk_size)
        summary = IngestSummary(batch_id=batch_id)
        errors: list[RowError] = []
        start = time.monotonic()
        logger.info("Processing batch %s: %d rows in chunks of %d", batch_id, total, chunk_size)

        try:
            for offset in range(0, total, chunk_size):
                chunk = job.rows[offset: offset + chunk_size]
                outcome = self._build_chunk(job, chunk, offset)
                stored = self._employees.put_many(outcome.records) if outcome.records else 0

                summary.processed += stored
                summary.skipped_empty += outcome.skipped_empty
                summary.skipped_duplicates += (
                    outcome.skipped_duplicates + len(outcome.records) - stored
                )
                errors.extend(outcome.errors)

                done = min(offset + len(chunk), total)
                progress = int(done * 100 / total) if total else 100
                self._batches.update_progress(batch_id, progress)
                logger.debug("Batch %s progress %d%% (%d/%d)", batch_id, progress, done, total)
        except Exception as exc:
            logger.exception("Processing failed for batch %s", batch_id)
            self._batches.mark_failed(batch_id, str(exc))
            raise

        summary.failed = len(errors)
        summary.duration_ms = int((time.monotonic() - start) * 1000)
        self._batches.mark_completed(batch_id, summary.processed, self._status_message(job, errors))

        logger.info(
            "Batch %s completed: processed=%d empty=%d duplicates=%d failed=%d in %dms",
            batch_id, summary.processed, summary.skipped_empty,
            summary.skipped_duplicates, summary.failed, summary.duration_ms,
        )
        for err in errors[:10]:
            logger.warning("Batch %s: %s", batch_id, err)
        if len(errors) > 10:
            logger.warning("Batch %s: ... and %d more errors", batch_id, len(errors) - 10)
        return summary

    def ingest(
        self,
        content: Optional[bytes],
        *,
        period: Optional[str],
        owner: str,
        filename: str = "upload.csv",
    ) -> IngestResult:
        """Submit and process an upload in one call."""
        job = self.submit(content, period=period, owner=owner, filename=filename)
        self.run(job)
        batch = self._batches.get(job.batch.id) or job.batch
        return IngestResult(batch=batch, duplicate_count=job.duplicate_count, warning=job.warning)

    @staticmethod
    def _status_message(job: IngestJob, errors: list[RowError]) -> Optional[str]:
        parts = []
        if errors:
            parts.append(f"Completed with {len(errors)} errors")
        if job.warning:
            parts.append(job.warning)
        return "; ".join(parts) or None

    def _build_chunk(self, job: IngestJob, chunk: list[dict[str, str]], offset: int) -> _ChunkOutcome:
        outcome = _ChunkOutcome()
        for i, row in enumerate(chunk):
            row_number = offset + i + 1
            name = row.get(job.name_column, "")
            employee_no = row.get(job.employee_no_column, "")
            if not name and not employee_no:
                outcome.skipped_empty += 1
                continue
            if employee_no in job.existing:
                outcome.skipped_duplicates += 1
                continue
            try:
                outcome.records.append(self.build_record(job, row, row_number))
            except RowError as err:
                outcome.errors.append(err)
        return outcome

    @staticmethod
    def build_record(job: IngestJob, row: dict[str, str], row_number: int = 0) -> EmployeeRecord:
        """Turn one normalized row into an EmployeeRecord."""
        buckets = partition_row(row, job.registry)
        attrs: dict[str, Any] = {
            column_attr: (row.get(column) or None)
            for column, column_attr in METADATA_COLUMNS.items()
        }
        for column, column_attr in DATE_COLUMNS.items():
            try:
                attrs[column_attr] = parse_date(row.get(column))
            except ValueError as exc:
                raise RowError(row_number, f"{column}: {exc}") from exc

        return EmployeeRecord(
            batch_id=job.batch.id,
            employee_no=str(row.get(job.employee_no_column, "")),
            name=str(row.get(job.name_column, "")),
            salary_data=buckets.salary,
            allowance_data=buckets.allowance,
            deduction_data=buckets.deduction,
            neutral_data=buckets.neutral,
            **attrs,
        )
