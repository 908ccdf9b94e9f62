"""Upload endpoints: submit a CSV, poll its progress, inspect its columns."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool

from payroll_report.api.deps import get_ingestion, get_owner, get_reports
from payroll_report.ingest.pipeline import IngestionService, IngestJob
from payroll_report.reporting.service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


def _process(service: IngestionService, job: IngestJob) -> None:
    try:
        service.run(job)
    except Exception:
        # run() has already marked the batch FAILED; the status endpoint reports it.
        logger.warning("Background processing of batch %s ended in FAILED state", job.batch.id)


@router.post("", status_code=202)
async def upload(
    request: Request,
    background_tasks: BackgroundTasks,
    period: Optional[str] = Query(default=None),
    filename: str = Query(default="upload.csv"),
    owner: str = Depends(get_owner),
    service: IngestionService = Depends(get_ingestion),
) -> dict:
    """Accept a raw CSV body; rows are processed after the response is sent."""
    content = await request.body()
    job = await run_in_threadpool(
        service.submit, content, period=period, owner=owner, filename=filename,
    )
    background_tasks.add_task(_process, service, job)
    result = job.result
    return {
        "uploadId": result.batch.id,
        "status": result.batch.status,
        "rowCount": result.batch.row_count,
        "duplicateCount": result.duplicate_count,
        "warning": result.warning,
    }


@router.get("")
def list_uploads(
    owner: str = Depends(get_owner),
    service: IngestionService = Depends(get_ingestion),
) -> list[dict]:
    return [b.model_dump(mode="json") for b in service.list_batches(owner)]


@router.get("/{upload_id}/status")
def upload_status(
    upload_id: str,
    owner: str = Depends(get_owner),
    service: IngestionService = Depends(get_ingestion),
) -> dict:
    batch = service.get_batch(upload_id, owner)
    return {
        "id": batch.id,
        "status": batch.status,
        "progress": batch.progress,
        "rowCount": batch.row_count,
        "errorMessage": batch.error_message,
    }


@router.get("/{upload_id}/fields")
def upload_fields(
    upload_id: str,
    owner: str = Depends(get_owner),
    reports: ReportService = Depends(get_reports),
) -> dict:
    fields = reports.available_fields(upload_id, owner)
    return {**fields.model_dump(mode="json"), "total": fields.total}


@router.delete("/{upload_id}")
def delete_upload(
    upload_id: str,
    owner: str = Depends(get_owner),
    service: IngestionService = Depends(get_ingestion),
) -> dict:
    removed = service.delete_batch(upload_id, owner)
    return {"deleted": upload_id, "employees": removed}
