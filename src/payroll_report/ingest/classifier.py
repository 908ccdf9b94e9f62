"""Field classification: assigns every source column to one payroll bucket.

The registry snapshot is authoritative. Columns it does not know fall through
an ordered keyword rule set (SALARY, then ALLOWANCE, then DEDUCTION); the first
matching bucket wins and anything left over is NEUTRAL. Rule order matters:
"Rapel Salary" contains both "rapel" and "salary" and must land in SALARY.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from payroll_report.ingest.value_parser import parse_value
from payroll_report.models.component import Bucket

# Columns stored on their own record attribute; mirrored into neutral_data.
DEDICATED_FIELDS: frozenset[str] = frozenset({
    "No", "Name", "Employee No", "Gender", "No KTP", "Gov. Tax File No.",
    "Position", "Directorate", "Org Unit", "Grade", "Employment Status",
    "Join Date", "Terminate Date", "Length of Service", "Tax Status",
})

SKIP_FIELDS: frozenset[str] = frozenset({"No"})
PLACEHOLDER_PREFIX = "Column_"

# --- SALARY ---
SALARY_NAMES: frozenset[str] = frozenset({
    "Basic Salary",
    "Basic Salary Tambahan",
    "Rapel Salary",
    "Additional Salary",
})
SALARY_KEYWORDS = ("salary", "gaji")

# --- ALLOWANCE ---
ALLOWANCE_NAMES: frozenset[str] = frozenset({
    "Tunjangan Jabatan",
    "Tunjangan Jabatan PJS",
    "Tunjangan Jabatan Gross",
    "Uang Makan",
    "Uang Transport",
    "Tunjangan Transport Commercial",
    "Lemburan",
    "Additional Lemburan",
    "Insentif",
    "Additional Insentif",
    "Additional Uang Pisah",
    "Sisa Cuti Dibayarkan",
    "Additional Reward",
    "Additional Tunjangan Relokasi",
    "Additional Refund Loan",
    "Target Paket",
    "Insentif Per Paket",
    "Tunjangan Operasional",
    "Insentif Mitra",
    "Additional Insentif Mitra",
    "Target Paket OS",
    "Bonus Per Paket OS",
    "Insentif OS",
    "Insentif Mitra Sorter",
    "Additional Insentif Sorter Mitra",
    "Claim Rawat Jalan",
    "Claim Frame",
    "Santunan Maternity Normal",
    "Santunan Maternity Caesar",
    "Target Paket Mitra",
    "Insentif Per Paket Mitra",
    "Rapel Bonus Paket Mitra",
    "Rapel Insentif Mitra",
    "Claim Rawat Inap",
    "Additional Bonus KPI",
    "Additional Target Paket",
    "Additional Target Paket Mitra",
    "Tunjangan Pph 21 OS",
    "Additional Insentif Mitra Lain",
    "Additional Komisi Karyawan",
    "Insentif Pembawaan Mitra 10 Kg",
})
ALLOWANCE_KEYWORDS = (
    "tunjangan", "allowance", "insentif", "bonus", "uang",
    "claim", "santunan", "rapel", "reward", "lemburan",
)

# --- DEDUCTION ---
DEDUCTION_NAMES: frozenset[str] = frozenset({
    "Tax Allowance",
    "Tax Borne",
    "Tax Penalty Borne",
    "BPJS JHT",
    "BPJS Kesehatan",
    "BPJS Pensiun",
    "Pot. Kasbon",
    "Potongan Hutang Cuti",
    "Pot. Lain",
    "Pot. Barang Hilang",
    "Pot. Own Risk",
    "Pot. Audit",
    "Potongan Pph 21 OS",
    "Total Deduction",
    "Tax",
    "Tax Penalty",
})
DEDUCTION_KEYWORDS = ("potongan", "pot.", "deduction", "potbrg", "potlain", "potownrisk")
TAX_EXCLUSIONS = ("tax status", "tax location")


class FieldBuckets(NamedTuple):
    """Parsed cell values of one row split by bucket."""

    salary: dict[str, Any]
    allowance: dict[str, Any]
    deduction: dict[str, Any]
    neutral: dict[str, Any]


def _is_salary(name: str, lower: str) -> bool:
    return name in SALARY_NAMES or any(k in lower for k in SALARY_KEYWORDS)


def _is_allowance(name: str, lower: str) -> bool:
    if name in ALLOWANCE_NAMES:
        return True
    if name.startswith("BPJS") and "Pemberi Kerja" in name:
        return True
    return any(k in lower for k in ALLOWANCE_KEYWORDS)


def _is_deduction(name: str, lower: str) -> bool:
    if name in DEDUCTION_NAMES:
        return True
    if name.startswith("BPJS") and ("Gross" in name or "Kemitraan" in name):
        return True
    if any(k in lower for k in DEDUCTION_KEYWORDS):
        return True
    return "tax" in lower and not any(x in lower for x in TAX_EXCLUSIONS)


def classify(field: str, registry: Mapping[str, Bucket]) -> Bucket:
    """Return the bucket for a column name. Pure and total."""
    declared = registry.get(field)
    if declared is not None:
        return Bucket(declared)

    lower = field.lower()
    if _is_salary(field, lower):
        return Bucket.SALARY
    if _is_allowance(field, lower):
        return Bucket.ALLOWANCE
    if _is_deduction(field, lower):
        return Bucket.DEDUCTION
    return Bucket.NEUTRAL


def is_skipped(field: str) -> bool:
    return not field or field in SKIP_FIELDS or field.startswith(PLACEHOLDER_PREFIX)


def partition_row(row: Mapping[str, Any], registry: Mapping[str, Bucket]) -> FieldBuckets:
    """Parse and bucket every cell of one row.

    Dedicated metadata columns go to the neutral map without consulting the
    registry. The row-number column and ``Column_<i>`` placeholders are dropped.
    """
    buckets = FieldBuckets({}, {}, {}, {})
    targets = {
        Bucket.SALARY: buckets.salary,
        Bucket.ALLOWANCE: buckets.allowance,
        Bucket.DEDUCTION: buckets.deduction,
        Bucket.NEUTRAL: buckets.neutral,
    }
    for key, raw in row.items():
        if is_skipped(key):
            continue
        value = parse_value(key, raw)
        if key in DEDICATED_FIELDS:
            buckets.neutral[key] = value
            continue
        targets[classify(key, registry)][key] = value
    return buckets
