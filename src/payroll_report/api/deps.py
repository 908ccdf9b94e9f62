"""Request dependencies shared by the routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, Request

from payroll_report.ingest.pipeline import IngestionService
from payroll_report.reporting.service import ReportService


def get_owner(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity; authentication itself happens in front of this service."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion


def get_reports(request: Request) -> ReportService:
    return request.app.state.reports
