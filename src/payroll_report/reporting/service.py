"""Report definitions and on-demand workbook rendering.

Definitions store intent only. Every download re-reads the employee rows,
re-derives totals and renders a fresh workbook, so repeated downloads of the
same definition produce the same content.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from payroll_report.core.config import RenderConfig
from payroll_report.core.exceptions import (
    BatchNotFoundError,
    EmptyReportError,
    ReportNotFoundError,
)
from payroll_report.core.protocols import (
    IBatchStore,
    IComponentRegistry,
    IEmployeeStore,
    IReportStore,
)
from payroll_report.models.batch import BatchStatus, UploadBatch
from payroll_report.models.component import Bucket, ComponentEntry, RegistrySnapshot
from payroll_report.models.report import (
    ALL_FIELDS,
    AvailableField,
    AvailableFields,
    RenderedReport,
    ReportDefinition,
    ReportRequest,
    ReportType,
    report_filename,
)
from payroll_report.reporting.aggregator import aggregate
from payroll_report.reporting.cost_center_renderer import render_cost_center
from payroll_report.reporting.derivations import COA_BRANCH, derive_and_total
from payroll_report.reporting.fields import HEADCOUNT_FIELDS, OUTPUT_FIELDS, is_output_field
from payroll_report.reporting.renderer import render_flat

logger = logging.getLogger(__name__)


class ReportService:
    """Create, list and render payroll reports."""

    def __init__(
        self,
        employees: IEmployeeStore,
        batches: IBatchStore,
        reports: IReportStore,
        registry: IComponentRegistry,
        config: Optional[RenderConfig] = None,
    ) -> None:
        self._employees = employees
        self._batches = batches
        self._reports = reports
        self._registry = registry
        self._config = config or RenderConfig()

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def create_report(self, request: ReportRequest, owner: str) -> ReportDefinition:
        """Persist a report definition for a completed upload of this owner."""
        batch = self._completed_batch(request.upload_id, owner)
        report = ReportDefinition(
            upload_id=batch.id,
            owner=owner,
            name=request.name,
            description=request.description,
            type=request.report_type,
            selected_fields=request.selected_fields or [ALL_FIELDS],
            total_records=self._employees.count_by_batch(batch.id),
        )
        report = self._reports.create(report)
        logger.info(
            "Created %s report %s for batch %s (%d records)",
            report.type, report.id, batch.id, report.total_records,
        )
        return report

    def get_report(self, report_id: str, owner: str) -> ReportDefinition:
        report = self._reports.get(report_id)
        if report is None or report.owner != owner:
            raise ReportNotFoundError(report_id)
        return report

    def list_reports(self, owner: str) -> list[ReportDefinition]:
        return sorted(self._reports.list_by_owner(owner), key=lambda r: r.created_at, reverse=True)

    def _completed_batch(self, batch_id: str, owner: str) -> UploadBatch:
        batch = self._batches.get(batch_id)
        if batch is None or batch.owner != owner or batch.status != BatchStatus.COMPLETED:
            raise BatchNotFoundError(batch_id)
        return batch

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build_rows(self, batch_id: str) -> list[dict[str, Any]]:
        """Merged, derived rows for every employee of a batch, numbered from 1."""
        rows = []
        for index, record in enumerate(self._employees.list_by_batch(batch_id), start=1):
            row = derive_and_total(record.merged())
            row["No"] = index
            rows.append(row)
        return rows

    def resolve_fields(self, selected: list[str]) -> list[str]:
        """Selected names in order without repeats; registry codes map to names."""
        by_code = {c.code: c.name for c in self._registry.list_active()}
        out: dict[str, None] = {}
        for entry in selected:
            if not is_output_field(entry) and entry in by_code:
                entry = by_code[entry]
            out.setdefault(entry, None)
        return list(out)

    def render(self, report_id: str, owner: str) -> RenderedReport:
        report = self.get_report(report_id, owner)
        batch = self._batches.get(report.upload_id)
        if batch is None:
            raise BatchNotFoundError(report.upload_id)

        rows = self.build_rows(batch.id)
        filename = report_filename(report.name)

        if report.type == ReportType.COST_CENTER_AGGREGATE:
            content = render_cost_center(aggregate(rows), batch.period)
        else:
            fields = self._fields_for(report)
            if report.type == ReportType.BRANCH_FILTERED:
                rows = [row for row in rows if row.get("Coa") == COA_BRANCH]
            if not rows:
                raise EmptyReportError(report.id, report.type)
            content = render_flat(
                rows,
                fields,
                sheet_name=self._config.sheet_name,
                max_width=self._config.max_column_width,
                min_width=self._config.min_column_width,
                sample_rows=self._config.width_sample_rows,
            )

        logger.info("Rendered report %s (%s) as %s: %d bytes", report.id, report.type, filename, len(content))
        return RenderedReport(content=content, filename=filename)

    def _fields_for(self, report: ReportDefinition) -> list[str]:
        if report.type == ReportType.HEADCOUNT:
            return list(HEADCOUNT_FIELDS)
        if report.uses_all_fields:
            return list(OUTPUT_FIELDS)
        return self.resolve_fields(report.selected_fields)

    # ------------------------------------------------------------------
    # Field discovery
    # ------------------------------------------------------------------

    def available_fields(self, upload_id: str, owner: str) -> AvailableFields:
        """Columns of an upload grouped by bucket, sampled from its first employee."""
        batch = self._batches.get(upload_id)
        if batch is None or batch.owner != owner:
            raise BatchNotFoundError(upload_id)

        records = self._employees.list_by_batch(upload_id)
        if not records:
            return AvailableFields()
        sample = records[0]
        registry = RegistrySnapshot(self._registry.list_active())

        def describe(section: dict[str, Any], bucket: Bucket) -> list[AvailableField]:
            return [AvailableField(code=registry.code_for(name) or name, name=name, type=bucket) for name in section]

        return AvailableFields(
            salary=describe(sample.salary_data, Bucket.SALARY),
            allowance=describe(sample.allowance_data, Bucket.ALLOWANCE),
            deduction=describe(sample.deduction_data, Bucket.DEDUCTION),
            neutral=describe(sample.neutral_data, Bucket.NEUTRAL),
        )

    def list_components(self) -> list[ComponentEntry]:
        return sorted(self._registry.list_active(), key=lambda c: (c.type, c.code))
