"""Dict-backed stores for tests and the ``memory`` storage mode.

Ingestion writes from a background task while API handlers read, so every
store guards its dicts with a lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from typing import Optional

from payroll_report.models.batch import BatchStatus, UploadBatch
from payroll_report.models.component import ComponentEntry
from payroll_report.models.employee import EmployeeRecord
from payroll_report.models.report import ReportDefinition


class MemoryComponentRegistry:
    """Dict-backed IComponentRegistry keyed by component code."""

    def __init__(self, entries: Iterable[ComponentEntry] = ()) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, ComponentEntry] = {e.code: e for e in entries}

    def list_active(self) -> list[ComponentEntry]:
        with self._lock:
            return [e for e in self._entries.values() if e.active]

    def list_all(self) -> list[ComponentEntry]:
        with self._lock:
            return list(self._entries.values())

    def upsert(self, entry: ComponentEntry) -> None:
        with self._lock:
            self._entries[entry.code] = entry


class MemoryEmployeeStore:
    """Dict-backed IEmployeeStore; the first write for a key wins."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, dict[str, EmployeeRecord]] = {}

    def put(self, record: EmployeeRecord) -> bool:
        with self._lock:
            batch = self._rows.setdefault(record.batch_id, {})
            if record.employee_no in batch:
                return False
            batch[record.employee_no] = record
            return True

    def put_many(self, records: Sequence[EmployeeRecord]) -> int:
        return sum(1 for record in records if self.put(record))

    def list_by_batch(self, batch_id: str) -> list[EmployeeRecord]:
        with self._lock:
            return list(self._rows.get(batch_id, {}).values())

    def count_by_batch(self, batch_id: str) -> int:
        with self._lock:
            return len(self._rows.get(batch_id, {}))

    def employee_numbers(self, batch_ids: Iterable[str]) -> set[str]:
        with self._lock:
            numbers: set[str] = set()
            for batch_id in batch_ids:
                numbers.update(self._rows.get(batch_id, {}))
            return numbers

    def delete_by_batch(self, batch_id: str) -> int:
        with self._lock:
            return len(self._rows.pop(batch_id, {}))


class MemoryBatchStore:
    """Dict-backed IBatchStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches: dict[str, UploadBatch] = {}

    def create(self, batch: UploadBatch) -> UploadBatch:
        with self._lock:
            self._batches[batch.id] = batch.model_copy()
            return batch

    def get(self, batch_id: str) -> Optional[UploadBatch]:
        with self._lock:
            batch = self._batches.get(batch_id)
            return batch.model_copy() if batch else None

    def _update(self, batch_id: str, **changes) -> None:
        batch = self._batches.get(batch_id)
        if batch is not None:
            self._batches[batch_id] = batch.model_copy(update=changes)

    def update_progress(self, batch_id: str, progress: int) -> None:
        with self._lock:
            batch = self._batches.get(batch_id)
            if batch is not None and progress > batch.progress:
                self._update(batch_id, progress=min(progress, 100))

    def mark_completed(self, batch_id: str, row_count: int, warning: Optional[str] = None) -> None:
        with self._lock:
            self._update(
                batch_id,
                status=BatchStatus.COMPLETED,
                progress=100,
                row_count=row_count,
                error_message=warning,
            )

    def mark_failed(self, batch_id: str, error: str) -> None:
        with self._lock:
            self._update(batch_id, status=BatchStatus.FAILED, error_message=error)

    def list_by_period(self, period: str, owner: str) -> list[UploadBatch]:
        with self._lock:
            return [
                b.model_copy() for b in self._batches.values()
                if b.period == period and b.owner == owner
            ]

    def list_by_owner(self, owner: str) -> list[UploadBatch]:
        with self._lock:
            return [b.model_copy() for b in self._batches.values() if b.owner == owner]

    def delete(self, batch_id: str) -> None:
        with self._lock:
            self._batches.pop(batch_id, None)


class MemoryReportStore:
    """Dict-backed IReportStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reports: dict[str, ReportDefinition] = {}

    def create(self, report: ReportDefinition) -> ReportDefinition:
        with self._lock:
            self._reports[report.id] = report
            return report

    def get(self, report_id: str) -> Optional[ReportDefinition]:
        with self._lock:
            return self._reports.get(report_id)

    def list_by_owner(self, owner: str) -> list[ReportDefinition]:
        with self._lock:
            return [r for r in self._reports.values() if r.owner == owner]


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class MemoryFileStore:
    """Dict-backed IFileStore; archived uploads are kept in ``objects`` by key."""

    def __init__(self, prefix: str = "uploads") -> None:
        self._prefix = prefix
        self.objects: dict[str, bytes] = {}

    def archive_upload(self, batch: UploadBatch, content: bytes) -> str:
        key = batch.archive_key(self._prefix)
        self.objects[key] = content
        return key
