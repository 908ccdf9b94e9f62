"""Tests for ReportService definitions and rendering over memory stores."""

from __future__ import annotations

import io

import pytest
from openpyxl import load_workbook

from payroll_report.core.exceptions import BatchNotFoundError, EmptyReportError, ReportNotFoundError
from payroll_report.models.report import XLSX_CONTENT_TYPE, ReportRequest, ReportType
from payroll_report.reporting.fields import HEADCOUNT_FIELDS, OUTPUT_FIELDS
from tests.sample_data import OWNER, PAYROLL_CSV, PERIOD


def _sheet(rendered):
    return load_workbook(io.BytesIO(rendered.content)).active


def _request(batch, report_type=ReportType.DETAIL, fields=None, name="March Payroll"):
    return ReportRequest(
        upload_id=batch.id,
        name=name,
        report_type=report_type,
        selected_fields=fields if fields is not None else ["ALL"],
    )


class TestDefinitions:
    def test_create_report(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch), OWNER)
        assert report.upload_id == completed_batch.id
        assert report.owner == OWNER
        assert report.total_records == 3
        assert report.uses_all_fields

    def test_empty_selection_means_all(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch, fields=[]), OWNER)
        assert report.selected_fields == ["ALL"]

    def test_requires_completed_batch(self, report_service, ingestion):
        job = ingestion.submit(PAYROLL_CSV, period=PERIOD, owner=OWNER)
        with pytest.raises(BatchNotFoundError):
            report_service.create_report(_request(job.batch), OWNER)

    def test_requires_owned_batch(self, report_service, completed_batch):
        with pytest.raises(BatchNotFoundError):
            report_service.create_report(_request(completed_batch), "user-2")

    def test_get_report_scoped_to_owner(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch), OWNER)
        assert report_service.get_report(report.id, OWNER) == report
        with pytest.raises(ReportNotFoundError):
            report_service.get_report(report.id, "user-2")

    def test_list_reports(self, report_service, completed_batch):
        report_service.create_report(_request(completed_batch, name="A"), OWNER)
        report_service.create_report(_request(completed_batch, name="B"), OWNER)
        assert {r.name for r in report_service.list_reports(OWNER)} == {"A", "B"}
        assert report_service.list_reports("user-2") == []


class TestBuildRows:
    def test_rows_are_numbered_and_derived(self, report_service, completed_batch):
        rows = {r["Employee No"]: r for r in report_service.build_rows(completed_batch.id)}
        assert sorted(r["No"] for r in rows.values()) == [1, 2, 3]
        assert rows["00101"]["Coa"] == "600"
        assert rows["00102"]["Coa"] == "500"
        assert rows["00101"]["Level"] == 8
        assert rows["00101"]["Total Basic Salary"] == 5000000.0
        assert rows["00101"]["Total Deduction"] == 100000.0

    def test_resolve_fields_maps_codes(self, report_service):
        assert report_service.resolve_fields(["Basic Salary", "ALW003", "Uang Makan"]) == [
            "Basic Salary", "Uang Makan",
        ]


class TestRender:
    def test_selected_fields(self, report_service, completed_batch):
        report = report_service.create_report(
            _request(completed_batch, fields=["Name", "Employee No", "Total Basic Salary"]), OWNER,
        )
        rendered = report_service.render(report.id, OWNER)
        assert rendered.filename == "March_Payroll.xlsx"
        assert rendered.content_type == XLSX_CONTENT_TYPE
        ws = _sheet(rendered)
        assert [ws.cell(row=5, column=c).value for c in range(1, 4)] == [
            "Name", "Employee No", "Total Basic Salary",
        ]
        assert ws.max_row == 8
        assert {ws.cell(row=r, column=2).value for r in range(6, 9)} == {"00101", "00102", "00103"}

    def test_all_fields(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch), OWNER)
        ws = _sheet(report_service.render(report.id, OWNER))
        assert ws.max_column == len(OUTPUT_FIELDS)

    def test_branch_report_keeps_coa_500(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch, ReportType.BRANCH_FILTERED), OWNER)
        ws = _sheet(report_service.render(report.id, OWNER))
        assert ws.max_row == 7

    def test_headcount_report(self, report_service, completed_batch):
        report = report_service.create_report(
            _request(completed_batch, ReportType.HEADCOUNT, fields=["Basic Salary"]), OWNER,
        )
        ws = _sheet(report_service.render(report.id, OWNER))
        assert [ws.cell(row=5, column=c).value for c in range(1, len(HEADCOUNT_FIELDS) + 1)] == list(HEADCOUNT_FIELDS)

    def test_cost_center_report(self, report_service, completed_batch):
        report = report_service.create_report(
            _request(completed_batch, ReportType.COST_CENTER_AGGREGATE), OWNER,
        )
        ws = _sheet(report_service.render(report.id, OWNER))
        assert ws.title == "Cost Center Report"
        assert ws["C3"].value == "Maret"
        assert ws["D5"].value == "Finance"
        assert ws["F5"].value == "Operations"

    def test_renders_are_repeatable(self, report_service, completed_batch):
        report = report_service.create_report(_request(completed_batch, fields=["Name"]), OWNER)
        first = _sheet(report_service.render(report.id, OWNER))
        second = _sheet(report_service.render(report.id, OWNER))
        assert [c.value for c in first["A"]] == [c.value for c in second["A"]]

    def test_branch_report_without_branch_rows(self, report_service, ingestion):
        content = b"Name,Employee No,Cost Center\nBudi,E1,Kantor Pusat\n"
        batch = ingestion.ingest(content, period=PERIOD, owner=OWNER).batch
        report = report_service.create_report(_request(batch, ReportType.BRANCH_FILTERED), OWNER)
        with pytest.raises(EmptyReportError) as exc_info:
            report_service.render(report.id, OWNER)
        assert exc_info.value.code == "EMPTY_REPORT"
        assert exc_info.value.report_id == report.id


class TestFieldDiscovery:
    def test_available_fields(self, report_service, completed_batch):
        fields = report_service.available_fields(completed_batch.id, OWNER)
        assert [(f.code, f.name) for f in fields.salary] == [("Basic Salary", "Basic Salary")]
        assert [(f.code, f.name) for f in fields.allowance] == [("ALW003", "Uang Makan")]
        assert ("NEU004", "Working Days") in [(f.code, f.name) for f in fields.neutral]
        assert fields.total == len(fields.salary) + len(fields.allowance) + len(fields.deduction) + len(fields.neutral)

    def test_available_fields_scoped_to_owner(self, report_service, completed_batch):
        with pytest.raises(BatchNotFoundError):
            report_service.available_fields(completed_batch.id, "user-2")

    def test_list_components_hides_inactive(self, report_service):
        assert [c.code for c in report_service.list_components()] == ["ALW003", "NEU004"]
