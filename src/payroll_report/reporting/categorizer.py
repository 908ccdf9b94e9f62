"""Presentation categorizer: three-level header labels for report columns.

Each column gets a (level1, level2, level3) label path used for the merged
header rows of the flat workbook. Rules are evaluated in order over the
lower-cased column name and the first hit wins, so ordering is significant:
"uang makan perdin" must hit Tunjangan before Perjalanan Dinas is considered.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import NamedTuple


class LabelPath(NamedTuple):
    level1: str
    level2: str
    level3: str


def _path(level1: str, level2: str) -> LabelPath:
    return LabelPath(level1, level2, level2)


BASIC_INFO = LabelPath("Basic Info", "Basic Info", "Basic Info")
NETRAL = LabelPath("Netral", "Netral", "Netral")

BASIC_INFO_FIELDS: frozenset[str] = frozenset({
    "no", "name", "employee no", "no ktp", "gov. tax file no.",
    "position", "department", "directorate", "directorate 2", "tax location code",
    "cost center by function", "jobstatus code", "jobstatus name",
    "work location code", "work location", "cost center code", "tax location name",
    "cost center", "coa", "level", "grade", "gender", "employment status",
    "join date", "terminate date", "length of service", "tax status",
    "company bank account", "company account name", "company bank name",
    "bank account", "account name", "bank name", "birth date",
    "insurance no bpjskt", "insurance no bpjskes",
})

Rule = tuple[Callable[[str], bool], LabelPath]


def _has(*needles: str) -> Callable[[str], bool]:
    return lambda f: any(n in f for n in needles)


def _has_without(needles: tuple[str, ...], excluded: str) -> Callable[[str], bool]:
    return lambda f: any(n in f for n in needles) and excluded not in f


RULES: tuple[Rule, ...] = (
    # --- Allowance ---
    (_has("basic salary", "rapel salary", "additional salary"), _path("Allowance", "Salary")),
    (_has("uang makan", "uang transport", "transport commercial"), _path("Allowance", "Tunjangan")),
    (_has("tunjangan jabatan"), _path("Allowance", "Tunjangan")),
    (
        _has("sisa cuti dibayarkan", "uang pisah", "tunjangan relokasi", "refund loan"),
        _path("Allowance", "Tunjangan Tidak Tetap"),
    ),
    (_has("tunjangan operasional", "netral operasional", "komisi karyawan"), _path("Allowance", "Tunjangan")),
    (
        _has(
            "tunjangan pendidikan", "tunjangan bensin harian", "tunjangan makan harian",
            "tunjangan operasional harian", "tunjangan pulsa harian", "tunjangan volta",
        ),
        _path("Allowance", "Tunjangan"),
    ),
    (_has("insentif", "target paket"), _path("Allowance", "Insentif")),
    (lambda f: "bpjs" in f and "pemberi kerja" in f, _path("Allowance", "BPJS")),
    (_has("bonus"), _path("Allowance", "Bonus")),
    (_has_without(("reward",), "(d)"), _path("Allowance", "Reward")),
    (_has_without(("lembur", "lemburan"), "(d)"), _path("Allowance", "Lembur")),
    (
        _has_without(("uang makan perdin", "uang saku perdin", "perjalanan dinas"), "(d)"),
        _path("Allowance", "Perjalanan Dinas"),
    ),
    (_has("claim", "santunan", "maternity"), _path("Allowance", "Klaim Pengobatan")),
    (_has("bhr mitra", "pengembalian potongan volta"), _path("Allowance", "Loan")),
    (_has_without(("thr",), "dasar"), _path("Allowance", "THR")),
    (
        _has("uang jalan", "uang kerajinan", "service motor", "severence", "loyalty fee"),
        _path("Allowance", "Tunjangan"),
    ),
    # --- Deduction ---
    (
        _has(
            "deduction bensin", "deduction makan", "deduction pulsa",
            "deduction komisi", "operasional dibayar kas",
        ),
        _path("Deduction", "Tunjangan"),
    ),
    (lambda f: "reward (d)" in f or ("lembur" in f and "(d)" in f), _path("Deduction", "Reward")),
    (
        lambda f: "uang makan perdin (d)" in f or "uang saku perdin (d)" in f
        or ("uang jalan" in f and "(d)" in f),
        _path("Deduction", "Perjalanan Dinas"),
    ),
    (_has("potongan hutang cuti", "potongan cuti"), _path("Deduction", "Cuti")),
    (_has("own risk", "potownrisk"), _path("Deduction", "Own Risk")),
    (
        _has(
            "pot. kasbon", "pot. audit", "pot. barang hilang", "pot. denda",
            "pot. handphone", "pot. kerusakan volta", "pot. lain", "pot. volta",
            "potongan cod", "potongan uang penalti", "deposit atribut",
            "kasbon (saldo", "potaudit", "potbrghilang", "potdenda", "pothp",
            "potkerusakanvolta", "potlain", "potvolta",
        ),
        _path("Deduction", "Loan"),
    ),
    (
        lambda f: "bpjs" in f
        and ("kemitraan" in f or "gross" in f or "pemberi kerja" not in f),
        _path("Deduction", "BPJS"),
    ),
    # --- THP Balance ---
    (lambda f: f in ("thp balancing", "total deduction"), _path("THP Balance", "THP Balance")),
    # --- Netral ---
    (_has("basic salary full", "prorate base", "basic jabatan"), _path("Netral", "Salary")),
    (
        lambda f: "tunjangan jabatan full" in f
        or ("tunjangan operasional" in f and "basic" in f)
        or "netral tunjangan" in f,
        _path("Netral", "Tunjangan"),
    ),
    (_has("hari kerja", "hk payment"), _path("Netral", "Hari Kerja")),
    (
        _has("nilai insentif kelipatan", "pencapaian target", "target paket bulanan", "neutral check get"),
        _path("Netral", "Insentif"),
    ),
    (_has("bonus kelipatan", "bonus per coli", "bonus utama", "zero bonus"), _path("Netral", "Bonus")),
    (_has("ovt hari raya", "ovt off value", "ovt weekday"), _path("Netral", "Lembur")),
    (lambda f: "potongan" in f and "salary deduction only" in f, _path("Netral", "Loan")),
    (_has("neutral jurnal", "jurnal balance"), _path("Netral", "Jurnal")),
    (
        _has("dasar perhitungan thr", "total bulan prorate thr", "dasar tunjangan jabatan thr"),
        _path("Netral", "THR"),
    ),
    (_has("dasar bpjs"), _path("Netral", "BPJS")),
    (
        _has(
            "periode dirumahkan", "flag per paket", "is freelance",
            "persentase dirumahkan", "persentase gaji sakit", "pjs flag",
        ),
        _path("Netral", "Flagging"),
    ),
    (_has("office cost center"), _path("Netral", "Cost Center")),
    (
        _has("total hari pembagi", "total pembawaan paket", "prorate active employee", "jumlah sisa cuti"),
        _path("Netral", "Hari Kerja"),
    ),
    # --- Keyword fallbacks ---
    (_has("tunjangan", "allowance"), _path("Allowance", "Tunjangan")),
    (_has("potongan", "deduction"), _path("Deduction", "Loan")),
)


def categorize(field: str) -> LabelPath:
    """Label path for one column name. Total: unknown names are Netral."""
    lower = field.lower()
    if lower in BASIC_INFO_FIELDS:
        return BASIC_INFO
    for matches, path in RULES:
        if matches(lower):
            return path
    return NETRAL


def categorize_fields(names: Iterable[str]) -> dict[str, LabelPath]:
    return {name: categorize(name) for name in names}
