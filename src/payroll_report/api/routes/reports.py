"""Report definition and download endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from payroll_report.api.deps import get_owner, get_reports
from payroll_report.models.report import ReportRequest
from payroll_report.reporting.service import ReportService

router = APIRouter(tags=["reports"])


@router.post("", status_code=201)
def create_report(
    body: ReportRequest,
    owner: str = Depends(get_owner),
    service: ReportService = Depends(get_reports),
) -> dict:
    return service.create_report(body, owner).model_dump(mode="json")


@router.get("")
def list_reports(
    owner: str = Depends(get_owner),
    service: ReportService = Depends(get_reports),
) -> list[dict]:
    return [r.model_dump(mode="json") for r in service.list_reports(owner)]


@router.get("/{report_id}")
def get_report(
    report_id: str,
    owner: str = Depends(get_owner),
    service: ReportService = Depends(get_reports),
) -> dict:
    return service.get_report(report_id, owner).model_dump(mode="json")


@router.get("/{report_id}/download")
def download_report(
    report_id: str,
    owner: str = Depends(get_owner),
    service: ReportService = Depends(get_reports),
) -> Response:
    rendered = service.render(report_id, owner)
    return Response(
        content=rendered.content,
        media_type=rendered.content_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
