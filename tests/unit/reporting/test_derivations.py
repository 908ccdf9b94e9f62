"""Tests for derived fields and calculated totals."""

from __future__ import annotations

import pytest

from payroll_report.reporting.derivations import (
    COA_BRANCH,
    COA_HEAD_OFFICE,
    TOTAL_COMPONENTS,
    calculate_total,
    derive_and_total,
    derive_coa,
    derive_cost_center_by_function,
    derive_level,
)


class TestCostCenterByFunction:
    def test_eight_digit_prefix(self):
        assert derive_cost_center_by_function("12345678_OPS", "JK01") == "12345678"

    def test_branch_code_uses_cost_center_letters(self):
        assert derive_cost_center_by_function("CAB_SURABAYA", "sb-102") == "SB"

    def test_branch_code_without_letter_prefix(self):
        assert derive_cost_center_by_function("CAB_X", "1020") == "1020"

    def test_falls_back_to_jobstatus(self):
        assert derive_cost_center_by_function("HO_FIN", "X") == "HO_FIN"

    def test_falls_back_to_cost_center(self):
        assert derive_cost_center_by_function(None, "CC9") == "CC9"

    def test_both_empty(self):
        assert derive_cost_center_by_function("", None) == ""

    def test_numeric_jobstatus(self):
        assert derive_cost_center_by_function(12345678.0, "") == "12345678"


@pytest.mark.parametrize("cost_center,coa", [
    ("Kantor Pusat Jakarta", COA_HEAD_OFFICE),
    ("KANTOR PUSAT", COA_HEAD_OFFICE),
    ("Cabang Bandung", COA_BRANCH),
    ("", COA_BRANCH),
    (None, COA_BRANCH),
])
def test_derive_coa(cost_center, coa):
    assert derive_coa(cost_center) == coa


@pytest.mark.parametrize("grade,level", [
    ("Manager", 8),
    ("senior manager pjs", 9),
    ("Senior Staff", 3),
    ("Senior Staff Finance", 3),
    ("Junior Manager", 7),
    ("Non-Staff", 0),
    ("Intern", ""),
    ("", ""),
])
def test_derive_level(grade, level):
    assert derive_level(grade) == level


def test_calculate_total_treats_text_and_missing_as_zero():
    row = {"Uang Makan": 100000.0, "Additional Uang Makan": "n/a"}
    assert calculate_total(row, TOTAL_COMPONENTS["Total Uang Makan"]) == 100000.0


class TestDeriveAndTotal:
    @pytest.fixture
    def row(self):
        return {
            "Name": "Budi",
            "Cost Center": "Kantor Pusat",
            "Org Unit": "Finance",
            "Tax Location": "Jakarta Selatan",
            "Account Name": "Budi Santoso",
            "Grade": "Supervisor",
            "Jobstatus Code": "87654321_FIN",
            "Basic Salary": 5000000.0,
            "Rapel Salary": 250000.0,
            "Pot. Kasbon": 100000.0,
            "BPJS JHT": 50000.0,
            "Total Basic Salary": 1.0,
        }

    def test_fills_derived_fields(self, row):
        out = derive_and_total(row)
        assert out["Coa"] == COA_HEAD_OFFICE
        assert out["Department"] == "Finance"
        assert out["Tax Location Code"] == "Jakarta Selatan"
        assert out["Tax Location Name"] == "Jakarta Selatan"
        assert out["Bank Account"] == "Budi Santoso"
        assert out["Level"] == 4
        assert out["Cost Center By Function"] == "87654321"

    def test_totals_overwrite_source_columns(self, row):
        out = derive_and_total(row)
        assert out["Total Basic Salary"] == 5250000.0
        assert out["Total Deduction"] == 150000.0
        assert out["Total THR"] == 0.0

    def test_every_total_is_present(self, row):
        out = derive_and_total(row)
        assert set(TOTAL_COMPONENTS) <= set(out)

    def test_does_not_mutate_input(self, row):
        before = dict(row)
        derive_and_total(row)
        assert row == before

    def test_idempotent(self, row):
        once = derive_and_total(row)
        assert derive_and_total(once) == once
