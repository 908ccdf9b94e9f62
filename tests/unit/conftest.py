"""Shared fixtures: memory-backed stores and services over a small payroll file."""

from __future__ import annotations

import pytest

from payroll_report.core.config import IngestConfig
from payroll_report.ingest.pipeline import IngestionService
from payroll_report.models.component import Bucket, ComponentEntry
from payroll_report.reporting.service import ReportService
from tests.fakes import (
    MemoryBatchStore,
    MemoryComponentRegistry,
    MemoryEmployeeStore,
    MemoryFileStore,
    MemoryReportStore,
)
from tests.sample_data import OWNER, PAYROLL_CSV, PERIOD


@pytest.fixture
def registry():
    return MemoryComponentRegistry([
        ComponentEntry(code="NEU004", name="Working Days", type=Bucket.NEUTRAL),
        ComponentEntry(code="ALW003", name="Uang Makan", type=Bucket.ALLOWANCE),
        ComponentEntry(code="DED008", name="Potongan Seragam", type=Bucket.DEDUCTION, active=False),
    ])


@pytest.fixture
def employees():
    return MemoryEmployeeStore()


@pytest.fixture
def batches():
    return MemoryBatchStore()


@pytest.fixture
def reports():
    return MemoryReportStore()


@pytest.fixture
def files():
    return MemoryFileStore()


@pytest.fixture
def ingestion(employees, batches, registry, files):
    return IngestionService(
        employees=employees,
        batches=batches,
        registry=registry,
        files=files,
        config=IngestConfig(chunk_size=2),
    )


@pytest.fixture
def report_service(employees, batches, reports, registry):
    return ReportService(employees=employees, batches=batches, reports=reports, registry=registry)


@pytest.fixture
def completed_batch(ingestion):
    return ingestion.ingest(PAYROLL_CSV, period=PERIOD, owner=OWNER, filename="march.csv").batch
