"""Tests for the component registry, employee record and report models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from payroll_report.core.exceptions import RegistryError
from payroll_report.models.batch import BatchStatus, UploadBatch
from payroll_report.models.component import Bucket, ComponentEntry, RegistrySnapshot
from payroll_report.models.employee import EmployeeRecord
from payroll_report.models.report import ReportRequest, report_filename


class TestRegistrySnapshot:
    def test_maps_active_names_to_buckets(self):
        snapshot = RegistrySnapshot([
            ComponentEntry(code="SAL001", name="Basic Salary", type="SALARY"),
            ComponentEntry(code="ALW012", name="Tunjangan Komunikasi", type="ALLOWANCE", active=False),
        ])
        assert dict(snapshot) == {"Basic Salary": Bucket.SALARY}
        assert snapshot.code_for("Basic Salary") == "SAL001"
        assert snapshot.code_for("Tunjangan Komunikasi") is None

    def test_duplicate_active_name_rejected(self):
        with pytest.raises(RegistryError):
            RegistrySnapshot([
                ComponentEntry(code="A1", name="Insentif", type="ALLOWANCE"),
                ComponentEntry(code="A2", name="Insentif", type="SALARY"),
            ])

    def test_inactive_duplicate_is_allowed(self):
        snapshot = RegistrySnapshot([
            ComponentEntry(code="A1", name="Insentif", type="ALLOWANCE"),
            ComponentEntry(code="A2", name="Insentif", type="SALARY", active=False),
        ])
        assert snapshot["Insentif"] == Bucket.ALLOWANCE

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ComponentEntry(code="X", name="X", type="BONUS")


class TestEmployeeRecord:
    def test_merged_prefers_earlier_bucket(self):
        record = EmployeeRecord(
            batch_id="b1",
            employee_no="E1",
            salary_data={"Basic Salary": 100.0},
            allowance_data={"Basic Salary": 999.0, "Uang Makan": 10.0},
            neutral_data={"Name": "Budi"},
        )
        assert record.merged() == {"Basic Salary": 100.0, "Uang Makan": 10.0, "Name": "Budi"}

    def test_is_frozen(self):
        record = EmployeeRecord(batch_id="b1", employee_no="E1")
        with pytest.raises(ValidationError):
            record.name = "changed"


class TestUploadBatch:
    def test_defaults(self):
        batch = UploadBatch(owner="u", period="2024-03")
        assert batch.status == BatchStatus.PROCESSING
        assert batch.progress == 0
        assert len(batch.id) == 32


class TestReportModels:
    def test_request_dedupes_fields(self):
        request = ReportRequest(upload_id="b1", name=" Payroll ", selected_fields=["A", "B", "A", ""])
        assert request.selected_fields == ["A", "B"]
        assert request.name == "Payroll"

    @pytest.mark.parametrize("name,filename", [
        ("March Payroll", "March_Payroll.xlsx"),
        ("Gaji 03/2024 (final)", "Gaji_03_2024__final_.xlsx"),
        ("", "report.xlsx"),
    ])
    def test_report_filename(self, name, filename):
        assert report_filename(name) == filename
