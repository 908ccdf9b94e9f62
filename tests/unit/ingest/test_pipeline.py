"""Tests for IngestionService: upload validation and chunked processing."""

from __future__ import annotations

from datetime import date

import pytest

from payroll_report.core.config import IngestConfig
from payroll_report.core.exceptions import BatchNotFoundError, IngestError
from payroll_report.ingest.pipeline import (
    IngestJob,
    IngestionService,
    find_duplicates,
    parse_date,
    resolve_column,
    validate_period,
)
from payroll_report.models.batch import BatchStatus, UploadBatch
from payroll_report.models.component import RegistrySnapshot
from tests.fakes import MemoryBatchStore, MemoryEmployeeStore
from tests.sample_data import OWNER, PAYROLL_CSV, PERIOD


def _csv(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


# ---------- helpers ----------

class TestHelpers:
    def test_validate_period(self):
        assert validate_period(" 2024-03 ") == "2024-03"

    @pytest.mark.parametrize("period,code", [
        (None, "MISSING_PERIOD"),
        ("", "MISSING_PERIOD"),
        ("2024-13", "INVALID_PERIOD"),
        ("03-2024", "INVALID_PERIOD"),
        ("2024-3", "INVALID_PERIOD"),
    ])
    def test_invalid_period(self, period, code):
        with pytest.raises(IngestError) as exc_info:
            validate_period(period)
        assert exc_info.value.code == code

    def test_resolve_column_prefers_exact(self):
        assert resolve_column(["Employee No.", "Employee No"], "Employee No") == "Employee No"
        assert resolve_column(["Employee No."], "Employee No") == "Employee No."
        assert resolve_column(["Nama"], "Name") is None

    @pytest.mark.parametrize("raw,expected", [
        ("2019-04-01", date(2019, 4, 1)),
        ("15/08/2021", date(2021, 8, 15)),
        ("01 Jan 2020", date(2020, 1, 1)),
        ("", None),
        (None, None),
    ])
    def test_parse_date(self, raw, expected):
        assert parse_date(raw) == expected

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("not-a-date")

    def test_find_duplicates_ignores_blanks(self):
        assert find_duplicates(["A", "B", "A", "", ""]) == ["A"]


# ---------- submit: fatal validation ----------

class TestSubmitValidation:
    @pytest.mark.parametrize("content", [b"", None])
    def test_missing_file(self, ingestion, content):
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(content, period=PERIOD, owner=OWNER)
        assert exc_info.value.code == "MISSING_FILE"

    def test_missing_period(self, ingestion):
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(PAYROLL_CSV, period=None, owner=OWNER)
        assert exc_info.value.code == "MISSING_PERIOD"

    def test_header_only_file_is_empty(self, ingestion):
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(_csv("Name,Employee No"), period=PERIOD, owner=OWNER)
        assert exc_info.value.code == "EMPTY_FILE"

    def test_missing_columns(self, ingestion):
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(_csv("Name,Basic Salary", "Budi,100"), period=PERIOD, owner=OWNER)
        err = exc_info.value
        assert err.code == "MISSING_COLUMNS"
        assert err.details["missing"] == ["Employee No"]
        assert err.details["found"] == ["Name", "Basic Salary"]

    def test_parse_error(self, ingestion):
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(_csv("Name,Employee No", "Budi,E1,extra"), period=PERIOD, owner=OWNER)
        assert exc_info.value.code == "PARSE_ERROR"

    def test_duplicates_in_file(self, ingestion):
        content = _csv("Name,Employee No", "Budi,E1", "Siti,E2", "Budi Again,E1")
        with pytest.raises(IngestError) as exc_info:
            ingestion.submit(content, period=PERIOD, owner=OWNER)
        err = exc_info.value
        assert err.code == "DUPLICATE_IN_FILE"
        assert err.details == {"duplicates": ["E1"], "total": 1}

    def test_duplicate_sample_is_capped(self, employees, batches, registry):
        service = IngestionService(employees, batches, registry, config=IngestConfig(duplicate_sample_size=2))
        lines = ["Name,Employee No"] + [f"P{i},E{i % 4}" for i in range(8)]
        with pytest.raises(IngestError) as exc_info:
            service.submit(_csv(*lines), period=PERIOD, owner=OWNER)
        assert len(exc_info.value.details["duplicates"]) == 2
        assert exc_info.value.details["total"] == 4

    def test_rejection_persists_nothing(self, ingestion, batches, files):
        with pytest.raises(IngestError):
            ingestion.submit(_csv("Name,Employee No", "A,E1", "B,E1"), period=PERIOD, owner=OWNER)
        assert batches.list_by_owner(OWNER) == []
        assert files.objects == {}


# ---------- submit: accepted uploads ----------

class TestSubmit:
    def test_creates_processing_batch(self, ingestion, batches):
        job = ingestion.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER, filename="march.csv")
        stored = batches.get(job.batch.id)
        assert stored.status == BatchStatus.PROCESSING
        assert stored.progress == 0
        assert stored.row_count == 3
        assert stored.file_size == len(PAYROLL_CSV)
        assert stored.original_name == "march.csv"
        assert job.warning is None

    def test_archives_raw_file(self, ingestion, files):
        job = ingestion.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER, filename="march 2024.csv")
        assert job.batch.raw_path == f"uploads/{OWNER}/{PERIOD}/{job.batch.id}-march_2024.csv"
        assert files.objects == {job.batch.raw_path: PAYROLL_CSV}

    def test_registry_snapshot_taken_at_submit(self, ingestion, registry):
        job = ingestion.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        assert "Working Days" in job.registry
        assert "Potongan Seragam" not in job.registry


# ---------- run ----------

class TestRun:
    def test_completes_batch(self, ingestion, batches, employees):
        job = ingestion.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        summary = ingestion.run(job)
        assert summary.processed == 3
        assert summary.failed == 0
        batch = batches.get(job.batch.id)
        assert batch.status == BatchStatus.COMPLETED
        assert batch.progress == 100
        assert batch.row_count == 3
        assert batch.error_message is None
        assert employees.count_by_batch(job.batch.id) == 3

    def test_records_are_bucketed(self, completed_batch, employees):
        records = {r.employee_no: r for r in employees.list_by_batch(completed_batch.id)}
        budi = records["00101"]
        assert budi.name == "Budi Santoso"
        assert budi.directorate == "Finance"
        assert budi.grade == "Manager"
        assert budi.join_date == date(2019, 4, 1)
        assert budi.salary_data == {"Basic Salary": 5000000.0}
        assert budi.allowance_data == {"Uang Makan": 300000.0}
        assert budi.deduction_data == {"Pot. Kasbon": 100000.0}
        assert budi.neutral_data["Working Days"] == 22.0
        assert budi.neutral_data["Employee No"] == "00101"
        assert "No" not in budi.merged()
        assert records["00102"].join_date == date(2021, 8, 15)
        assert records["00103"].join_date is None

    def test_empty_identity_rows_are_skipped(self, ingestion, employees):
        content = _csv("No,Name,Employee No,Basic Salary", "1,Budi,E1,100", "2,,,200")
        job = ingestion.submit(content, period=PERIOD, owner=OWNER)
        summary = ingestion.run(job)
        assert summary.processed == 1
        assert summary.skipped_empty == 1

    def test_row_errors_do_not_fail_batch(self, ingestion, batches):
        content = _csv("Name,Employee No,Join Date", "Budi,E1,2020-01-01", "Siti,E2,sometime", "Andi,E3,")
        job = ingestion.submit(content, period=PERIOD, owner=OWNER)
        summary = ingestion.run(job)
        assert summary.processed == 2
        assert summary.failed == 1
        batch = batches.get(job.batch.id)
        assert batch.status == BatchStatus.COMPLETED
        assert batch.error_message == "Completed with 1 errors"

    def test_progress_advances_per_chunk(self, employees, registry):
        seen: list[int] = []

        class RecordingBatchStore:
            def __init__(self, inner):
                self._inner = inner

            def __getattr__(self, name):
                return getattr(self._inner, name)

            def update_progress(self, batch_id, progress):
                seen.append(progress)
                self._inner.update_progress(batch_id, progress)

        store = RecordingBatchStore(MemoryBatchStore())
        service = IngestionService(employees, store, registry, config=IngestConfig(chunk_size=2))
        service.ingest(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        assert seen == [66, 100]

    def test_storage_failure_marks_batch_failed(self, batches, registry):
        class BrokenEmployeeStore(MemoryEmployeeStore):
            def put_many(self, records):
                raise RuntimeError("disk full")

        service = IngestionService(BrokenEmployeeStore(), batches, registry)
        job = service.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        with pytest.raises(RuntimeError):
            service.run(job)
        batch = batches.get(job.batch.id)
        assert batch.status == BatchStatus.FAILED
        assert batch.error_message == "disk full"


# ---------- cross-upload duplicates ----------

class TestPeriodDuplicates:
    def test_second_upload_for_period_skips_existing(self, ingestion, completed_batch, batches, employees):
        result = ingestion.ingest(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        assert result.duplicate_count == 3
        assert result.warning == "3 employees already uploaded for period 2024-03 will be skipped"
        assert result.batch.status == BatchStatus.COMPLETED
        assert result.batch.row_count == 0
        assert result.batch.error_message == result.warning
        assert employees.count_by_batch(result.batch.id) == 0

    def test_partial_overlap(self, ingestion, completed_batch, employees):
        content = _csv("Name,Employee No", "Budi Santoso,00101", "Dewi,00199")
        result = ingestion.ingest(content, period=PERIOD, owner=OWNER)
        assert result.duplicate_count == 1
        assert [r.employee_no for r in employees.list_by_batch(result.batch.id)] == ["00199"]

    def test_other_period_is_independent(self, ingestion, completed_batch):
        result = ingestion.ingest(PAYROLL_CSV, period="2024-04", owner=OWNER)
        assert result.duplicate_count == 0
        assert result.warning is None

    def test_other_owner_is_independent(self, ingestion, completed_batch):
        result = ingestion.ingest(PAYROLL_CSV, period=PERIOD, owner="user-2")
        assert result.duplicate_count == 0

    def test_failed_batches_are_ignored(self, ingestion, completed_batch, batches):
        batches.mark_failed(completed_batch.id, "operator abort")
        result = ingestion.ingest(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        assert result.duplicate_count == 0


# ---------- batch queries ----------

class TestBatchQueries:
    def test_get_batch_scoped_to_owner(self, ingestion, completed_batch):
        assert ingestion.get_batch(completed_batch.id, OWNER).id == completed_batch.id
        with pytest.raises(BatchNotFoundError):
            ingestion.get_batch(completed_batch.id, "someone-else")
        with pytest.raises(BatchNotFoundError):
            ingestion.get_batch("missing", OWNER)

    def test_list_batches_newest_first(self, ingestion, completed_batch):
        ingestion.ingest(PAYROLL_CSV, period="2024-04", owner=OWNER)
        listed = ingestion.list_batches(OWNER)
        assert len(listed) == 2
        assert listed[0].uploaded_at >= listed[1].uploaded_at

    def test_delete_batch_removes_employees(self, ingestion, completed_batch, batches, employees):
        assert ingestion.delete_batch(completed_batch.id, OWNER) == 3
        assert batches.get(completed_batch.id) is None
        assert employees.count_by_batch(completed_batch.id) == 0


def test_build_record_maps_metadata():
    job = IngestJob(
        batch=UploadBatch(owner=OWNER, period=PERIOD),
        rows=[],
        registry=RegistrySnapshot(),
        name_column="Name",
        employee_no_column="Employee No",
    )
    row = {"Name": "Budi", "Employee No": "E1", "Gender": "M", "Tax Status": "K/1", "Position": ""}
    record = IngestionService.build_record(job, row, 1)
    assert record.batch_id == job.batch.id
    assert record.gender == "M"
    assert record.tax_status == "K/1"
    assert record.position is None
