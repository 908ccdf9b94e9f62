"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from payroll_report.persistence.memory_backend import (
    MemoryBatchStore,
    MemoryCacheBackend,
    MemoryComponentRegistry,
    MemoryEmployeeStore,
    MemoryFileStore,
    MemoryReportStore,
)

__all__ = [
    "MemoryBatchStore",
    "MemoryCacheBackend",
    "MemoryComponentRegistry",
    "MemoryEmployeeStore",
    "MemoryFileStore",
    "MemoryReportStore",
]
