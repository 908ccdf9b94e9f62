"""Cost-center aggregation of COA x directorate sums over a fixed component list."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from payroll_report.ingest.value_parser import to_number
from payroll_report.reporting.derivations import COA_BRANCH, COA_HEAD_OFFICE, derive_coa

logger = logging.getLogger(__name__)

# Row labels of the aggregate report, in display order. Several labels do not
# match a calculated total exactly and are looked up case-insensitively.
COST_CENTER_COMPONENTS: tuple[str, ...] = (
    "Total Basic Salary",
    "Total Tunjangan Jabatan",
    "Uang Makan",
    "Total Uang Transport",
    "Lemburan",
    "Total Uang pisah",
    "Total Insentif",
    "Tunjangan Volta",
    "Insentif Volta",
    "Total Bonus paket",
    "Tunjangan Operasional Dibayar Payroll",
    "Total BPJS TK",
    "Total BPJS Kes",
    "THR",
    "BHR Mitra",
)

UNKNOWN_DIRECTORATE = "Unknown"
COA_LABELS = {COA_HEAD_OFFICE: "Kantor Pusat", COA_BRANCH: "Cabang"}


@dataclass
class DirectorateGroup:
    """Employees of one directorate under one COA code."""

    name: str
    employee_count: int = 0
    components: dict[str, float] = field(
        default_factory=lambda: {c: 0.0 for c in COST_CENTER_COMPONENTS}
    )

    @property
    def total(self) -> float:
        return sum(self.components.values())


@dataclass
class CoaSection:
    coa: str
    label: str
    directorates: list[DirectorateGroup] = field(default_factory=list)

    @property
    def total_employees(self) -> int:
        return sum(d.employee_count for d in self.directorates)

    def find(self, name: str) -> Optional[DirectorateGroup]:
        return next((d for d in self.directorates if d.name == name), None)


@dataclass
class GrandTotalCell:
    employee_count: int = 0
    value: float = 0.0


@dataclass
class GrandTotal:
    """Totals over groups with a non-zero component sum."""

    employee_count: int = 0
    components: dict[str, float] = field(
        default_factory=lambda: {c: 0.0 for c in COST_CENTER_COMPONENTS}
    )
    by_directorate: dict[str, GrandTotalCell] = field(default_factory=dict)


@dataclass
class AggregatedReport:
    coa600: CoaSection
    coa500: CoaSection
    directorates: list[str]
    grand_total: GrandTotal

    @property
    def sections(self) -> tuple[CoaSection, CoaSection]:
        return (self.coa600, self.coa500)


def component_value(row: Mapping[str, Any], component: str, lowered: Mapping[str, str]) -> float:
    """Exact key first, then a case-insensitive match; missing counts 0."""
    if component in row:
        return to_number(row[component])
    key = lowered.get(component.lower())
    return to_number(row[key]) if key is not None else 0.0


def _directorate(row: Mapping[str, Any]) -> str:
    value = row.get("Directorate")
    text = str(value).strip() if value is not None else ""
    return text or UNKNOWN_DIRECTORATE


def aggregate(rows: Iterable[Mapping[str, Any]]) -> AggregatedReport:
    """Group derived employee rows by COA code then directorate.

    Rows are expected to have passed through ``derive_and_total``; a missing
    ``Coa`` is derived from ``Cost Center``.
    """
    groups: dict[str, dict[str, DirectorateGroup]] = {COA_HEAD_OFFICE: {}, COA_BRANCH: {}}
    count = 0
    for row in rows:
        count += 1
        coa = str(row.get("Coa") or derive_coa(row.get("Cost Center")))
        if coa not in groups:
            coa = derive_coa(row.get("Cost Center"))
        name = _directorate(row)
        group = groups[coa].setdefault(name, DirectorateGroup(name))
        group.employee_count += 1

        lowered: dict[str, str] = {}
        for key in row:
            lowered.setdefault(str(key).lower(), key)
        for component in COST_CENTER_COMPONENTS:
            group.components[component] += component_value(row, component, lowered)

    sections = {
        coa: CoaSection(coa, COA_LABELS[coa], sorted(by_name.values(), key=lambda g: g.name))
        for coa, by_name in groups.items()
    }
    directorates = sorted(set(groups[COA_HEAD_OFFICE]) | set(groups[COA_BRANCH]))
    report = AggregatedReport(
        coa600=sections[COA_HEAD_OFFICE],
        coa500=sections[COA_BRANCH],
        directorates=directorates,
        grand_total=_grand_total(sections.values(), directorates),
    )
    logger.info(
        "Aggregated %d employees: COA 600 %d employees in %d directorates, "
        "COA 500 %d employees in %d directorates",
        count,
        report.coa600.total_employees, len(report.coa600.directorates),
        report.coa500.total_employees, len(report.coa500.directorates),
    )
    return report


def _grand_total(sections: Iterable[CoaSection], directorates: list[str]) -> GrandTotal:
    grand = GrandTotal(by_directorate={name: GrandTotalCell() for name in directorates})
    for section in sections:
        for group in section.directorates:
            total = group.total
            if total == 0:
                continue
            cell = grand.by_directorate[group.name]
            cell.employee_count += group.employee_count
            cell.value += total
            grand.employee_count += group.employee_count
            for component, value in group.components.items():
                grand.components[component] += value
    return grand
