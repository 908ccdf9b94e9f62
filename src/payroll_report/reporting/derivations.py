"""Derived attributes and calculated totals applied to a merged employee row.

All functions are pure. ``derive_and_total`` never mutates its input and is
idempotent: applying it to its own output yields the same mapping.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from payroll_report.ingest.value_parser import to_number

_EIGHT_DIGITS = re.compile(r"^(\d{8})")
_TWO_LETTERS = re.compile(r"^[A-Za-z]{2}")

HEAD_OFFICE_MARKER = "kantor pusat"
COA_HEAD_OFFICE = "600"
COA_BRANCH = "500"

GRADE_LEVELS: dict[str, int] = {
    "ceo": 13,
    "chief": 12,
    "direktur": 12,
    "vice president": 11,
    "general manager": 10,
    "general manager pjs": 9,
    "senior manager": 9,
    "senior manager pjs": 9,
    "manager": 8,
    "manager pjs": 7,
    "junior manager": 7,
    "junior manager pjs": 7,
    "assistant manager": 6,
    "assistant manager pjs": 6,
    "senior supervisor": 5,
    "senior supervisor pjs": 5,
    "supervisor": 4,
    "supervisor pjs": 4,
    "senior staff": 3,
    "senior staff pjs": 3,
    "staff": 2,
    "junior staff": 1,
    "non-staff": 0,
}
# Longest title first so "senior manager pjs" is tried before "manager".
_GRADES_BY_LENGTH = sorted(GRADE_LEVELS, key=len, reverse=True)

# Member columns of every calculated total, in source-sheet order. Spellings
# follow the payroll export, including its typos.
TOTAL_COMPONENTS: dict[str, tuple[str, ...]] = {
    "Total Basic Salary": (
        "Basic Salary",
        "Basic Salary Tambahan",
        "Additional Salary",
        "Additional Salary Gross",
        "Rapel Salary",
        "Rapel Salary Gross",
    ),
    "Total Uang Makan": (
        "Uang Makan",
        "Additional Uang Makan",
    ),
    "Total Uang Transport": (
        "Uang Transport",
        "Additional Uang Transport",
        "Rapel Uang Transport",
        "Tunjangan Transport Commercial",
        "Additional Tunjangan Transport Commercial",
    ),
    "Total Tunjangan Jabatan": (
        "Tunjangan Jabatan",
        "Additional Tunjangan Jabatan",
        "Rapel Tunjangan Jabatan",
        "Tunjangan Jabatan Gross",
        "Additional Tunjangan Jabatan Gross",
        "Rapel Tunjangan Jabatan Gross",
        "Tunjangan Jabatan PJS",
    ),
    "Total Insentif Inhouse": (
        "Insentif",
        "Insentif Gross",
        "Rapel Insentif",
        "Additional Insentif",
        "Additional Tunjangan Relokasi",
        "Additional Refund Loan",
        "Tunjangan Tempat Tinggal",
        "Reward",
        "Additional Reward",
    ),
    "Total Sisa Cuti": (
        "Sisa Cuti Dibayarkan",
        "Additional Sisa Cuti Dibayarkan",
        "Sisa Cuti Dibayarkan Gross",
        "Additional Sisa Cuti Dibayarkan Gross",
    ),
    "Total Uang Pisah": (
        "Tunjangan Uang Pisah",
        "Uang Pisah Gross",
        "Additional Uang Pisah",
    ),
    "Total Tunjangan Operasional": (
        "Tunjangan Operasional",
        "Additional Tunjangan Operational",
        "Rapel Tunjangan Operational",
    ),
    "Total Komisi Karyawan": (
        "Komisi Karyawan",
        "Additional Komisi Karyawan",
    ),
    "Total Insentif Mitra": (
        "Insentif Per Paket Mitra",
        "Insentif Perbantuan",
        "Additional Insentif Perbantuan",
        "Insentif Volta",
        "Target Paket",
        "Additional Target Paket",
        "Rapel Target Paket",
        "Additional Insentif Kerajinan Mitra",
        "Additional Insentif Sorter MItra",
        "Insentif Hari Minggu",
        "Rapel Insentif Hari Minggu",
        "Insentif Hari Minggu Mitra",
        "Insentif Kehadiran",
        "Insentif Kerajinan Mitra",
        "Insentif Mitra",
        "Additional Insentif Mitra",
        "Rapel Insentif Mitra",
        "Insentif Mitra Lain",
        "Additional Insentif Mitra Lain",
        "Rapel Insentif Mitra Lain",
        "Insentif Mitra Sorter",
        "Rapel Insentif Mitra Sorter",
        "Insentif Pembawaan Mitra 10 Kg",
        "Additional Insentif Per Paket Mitra",
        "Insentif Perbantuan Mitra",
        "Insentif Produktifitas Mitra",
        "Rapel Insentif Produktifitas Mitra",
        "Target Paket Mitra",
        "Additional Target Paket Mitra",
        "Rapel Target Paket Mitra",
    ),
    "Total Bonus Inhouse": (
        "Bonus",
        "Additional Bonus Carrot And Stick",
        "Additional Bonus CPP",
        "Additional Bonus Paket",
        "Rapel Bonus Paket",
        "Bonus First & Last",
        "Bonus KPI",
        "Additional Bonus KPI",
        "Bonus COD",
        "Rapel Bonus COD",
    ),
    "Total Bonus Mitra": (
        "Bonus COD Mitra",
        "Additional Bonus COD Mitra",
        "Rapel Bonus COD Mitra",
        "Rapel Bonus Paket Mitra",
        "Rapel Bonus Per Paket",
        "Rapel Bonus Per Paket Mitra",
        "Bonus Mitra",
        "Additional Bonus Mitra",
        "Bonus Paket Coordinator",
        "Bonus Per Coli Mitra",
        "Bonus Volta",
    ),
    "Total Lembur": (
        "Lembur - Line Haul",
        "Lembur Harian",
        "Lemburan",
        "Additional Lemburan",
    ),
    "Total Perjalanan Dinas": (
        "Uang Makan Perdin",
        "Uang Saku Perdin",
    ),
    "Total Biaya Pengobatan Karyawan": (
        "Claim Frame",
        "Claim Lensa",
        "Claim Rawat Inap",
        "Additional Claim Rawat Inap",
        "Claim Rawat Jalan",
        "Additional Claim Rawat Jalan",
        "Santunan Maternity Caesar",
        "Santunan Maternity Miscarriage",
        "Santunan Maternity Normal",
        "Additional Maternity",
    ),
    "Total THR": (
        "THR",
        "Additional THR",
        "Rapel THR",
    ),
    "Total BPJS TK": (
        "BPJS JKK (Pemberi Kerja)",
        "BPJS JKK (Pemberi Kerja) Gross",
        "BPJS JKM (Pemberi Kerja)",
        "BPJS JKM (Pemberi Kerja) Gross",
        "BPJS JHT (Pemberi Kerja)",
        "BPJS JHT (Pemberi Kerja) Gross",
        "BPJS Pensiun (Pemberi Kerja)",
        "BPJS Pensiun (Pemberi Kerja) Gross",
    ),
    "Total BPJS Kes": (
        "BPJS Kesehatan (Pemberi Kerja)",
        "BPJS Kesehatan (Pemberi Kerja) Gross",
    ),
    "Total Deduction": (
        "Deduction Bensin Harian",
        "Deduction Makan Harian",
        "Deduction Pulsa Harian",
        "Tunjangan Operational Dibayar Kas",
        "Uang Jalan - Line Haul (D)",
        "Deduction Komisi Karyawan",
        "Reward (D)",
        "Lembur - Line Haul (D)",
        "Lembur Harian (D)",
        "Uang Makan Perdin (D)",
        "Uang Saku Perdin (D)",
        "Potongan Hutang Cuti",
        "Pot. Own Risk",
        "Pot. Audit",
        "Pot. Barang Hilang",
        "Pot. Denda",
        "Pot. Handphone",
        "Pot. Kasbon",
        "Pot. Kasbon Harian",
        "Pot. Kerusakan Volta",
        "Pot. Lain",
        "Pot. Lain Gross",
        "Pot. Volta SEI",
        "Pot. Volta T-FAS",
        "Potongan COD",
        "Potongan Uang Penalti",
        "Deposit Atribut",
        "BPJS JKK (Kemitraan)",
        "BPJS JKM (Kemitraan)",
        "BPJS JHT",
        "BPJS JHT Gross",
        "BPJS Pensiun",
        "BPJS Pensiun Gross",
        "BPJS Kesehatan",
        "BPJS Kesehatan Gross",
    ),
}

DERIVED_FIELDS = (
    "Cost Center By Function",
    "Coa",
    "Department",
    "Tax Location Code",
    "Tax Location Name",
    "Bank Account",
    "Level",
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def derive_cost_center_by_function(jobstatus_code: Any, cost_center_code: Any) -> str:
    jobstatus = _text(jobstatus_code)
    cost_center = _text(cost_center_code)
    if not jobstatus and not cost_center:
        return ""

    match = _EIGHT_DIGITS.match(jobstatus)
    if match:
        return match.group(1)

    if jobstatus.upper().startswith("CAB_"):
        if _TWO_LETTERS.match(cost_center):
            return cost_center[:2].upper()
        return cost_center

    return jobstatus or cost_center


def derive_coa(cost_center: Any) -> str:
    """"600" for head-office cost centers, "500" for everything else."""
    if HEAD_OFFICE_MARKER in _text(cost_center).lower():
        return COA_HEAD_OFFICE
    return COA_BRANCH


def derive_level(grade: Any) -> int | str:
    """Map a grade title to its numeric level, or ``""`` when unknown."""
    text = _text(grade).lower()
    if not text:
        return ""
    if text in GRADE_LEVELS:
        return GRADE_LEVELS[text]
    for title in _GRADES_BY_LENGTH:
        if title in text:
            return GRADE_LEVELS[title]
    return ""


def calculate_total(row: Mapping[str, Any], members: tuple[str, ...]) -> float:
    return sum(to_number(row.get(name)) for name in members)


def derive_and_total(row: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``row`` with derived fields and totals filled in.

    Derived and total keys overwrite same-named source columns.
    """
    out = dict(row)
    out["Cost Center By Function"] = derive_cost_center_by_function(
        row.get("Jobstatus Code"), row.get("Cost Center Code")
    )
    out["Coa"] = derive_coa(row.get("Cost Center"))
    out["Department"] = _text(row.get("Org Unit"))
    tax_location = _text(row.get("Tax Location"))
    out["Tax Location Code"] = tax_location
    out["Tax Location Name"] = tax_location
    out["Bank Account"] = _text(row.get("Account Name"))
    out["Level"] = derive_level(row.get("Grade"))

    for total, members in TOTAL_COMPONENTS.items():
        out[total] = calculate_total(row, members)
    return out
