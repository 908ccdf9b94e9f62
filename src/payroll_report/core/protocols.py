"""Protocol interfaces for the payroll reporting seams.

Services depend on these Protocols only. Memory, DynamoDB, Redis and S3
implementations satisfy them structurally and are swapped by configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from payroll_report.models.batch import UploadBatch
    from payroll_report.models.component import ComponentEntry
    from payroll_report.models.employee import EmployeeRecord
    from payroll_report.models.report import ReportDefinition


# ---------------------------------------------------------------------------
# Component Registry
# ---------------------------------------------------------------------------

@runtime_checkable
class IComponentRegistry(Protocol):
    """Master list of known payroll components."""

    def list_active(self) -> list[ComponentEntry]: ...

    def list_all(self) -> list[ComponentEntry]: ...

    def upsert(self, entry: ComponentEntry) -> None: ...


# ---------------------------------------------------------------------------
# Employee Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IEmployeeStore(Protocol):
    """Employee rows keyed by (batch_id, employee_no); first write wins."""

    def put(self, record: EmployeeRecord) -> bool: ...

    def put_many(self, records: Sequence[EmployeeRecord]) -> int: ...

    def list_by_batch(self, batch_id: str) -> list[EmployeeRecord]: ...

    def count_by_batch(self, batch_id: str) -> int: ...

    def employee_numbers(self, batch_ids: Iterable[str]) -> set[str]: ...

    def delete_by_batch(self, batch_id: str) -> int: ...


# ---------------------------------------------------------------------------
# Batch Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IBatchStore(Protocol):
    """Upload batch lifecycle state."""

    def create(self, batch: UploadBatch) -> UploadBatch: ...

    def get(self, batch_id: str) -> Optional[UploadBatch]: ...

    def update_progress(self, batch_id: str, progress: int) -> None: ...

    def mark_completed(self, batch_id: str, row_count: int, warning: Optional[str] = None) -> None: ...

    def mark_failed(self, batch_id: str, error: str) -> None: ...

    def list_by_period(self, period: str, owner: str) -> list[UploadBatch]: ...

    def list_by_owner(self, owner: str) -> list[UploadBatch]: ...

    def delete(self, batch_id: str) -> None: ...


# ---------------------------------------------------------------------------
# Report Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IReportStore(Protocol):
    """Saved report definitions."""

    def create(self, report: ReportDefinition) -> ReportDefinition: ...

    def get(self, report_id: str) -> Optional[ReportDefinition]: ...

    def list_by_owner(self, owner: str) -> list[ReportDefinition]: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """Archive for the raw bytes of accepted uploads."""

    def archive_upload(self, batch: UploadBatch, content: bytes) -> str: ...
