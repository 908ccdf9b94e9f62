"""Component registry listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from payroll_report.api.deps import get_owner, get_reports
from payroll_report.reporting.service import ReportService

router = APIRouter(tags=["components"])


@router.get("")
def list_components(
    owner: str = Depends(get_owner),
    service: ReportService = Depends(get_reports),
) -> list[dict]:
    return [c.model_dump(mode="json") for c in service.list_components()]
