"""FastAPI application with lifespan, router mounting and error mapping."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from payroll_report.api.routes import components, health, reports, uploads
from payroll_report.core.config import AppSettings
from payroll_report.core.exceptions import (
    EmptyReportError,
    IngestError,
    NotFoundError,
    PayrollReportError,
)
from payroll_report.core.logging import configure_logging
from payroll_report.ingest.pipeline import IngestionService
from payroll_report.persistence import Persistence, create_persistence
from payroll_report.reporting.service import ReportService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings: AppSettings = app.state.settings
    configure_logging(settings.log_level)

    persistence: Optional[Persistence] = getattr(app.state, "persistence", None)
    if persistence is None:
        persistence = create_persistence(settings)
        app.state.persistence = persistence

    app.state.ingestion = IngestionService(
        employees=persistence.employees,
        batches=persistence.batches,
        registry=persistence.registry,
        files=persistence.files,
        config=settings.ingest,
    )
    app.state.reports = ReportService(
        employees=persistence.employees,
        batches=persistence.batches,
        reports=persistence.reports,
        registry=persistence.registry,
        config=settings.render,
    )
    logger.info(
        "Payroll report API started (environment=%s, storage=%s)",
        settings.environment, settings.storage_backend,
    )
    yield


async def _ingest_error(request: Request, exc: IngestError) -> JSONResponse:
    logger.warning("Upload rejected [%s]: %s", exc.code, exc)
    return JSONResponse(
        status_code=400,
        content={"error": str(exc), "code": exc.code, "details": exc.details},
    )


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": str(exc), "code": "NOT_FOUND", "details": None},
    )


async def _internal_error(request: Request, exc: PayrollReportError) -> JSONResponse:
    logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": str(exc), "code": type(exc).__name__, "details": None},
    )


async def _empty_report(request: Request, exc: EmptyReportError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": str(exc), "code": exc.code, "details": {"reportType": exc.report_type}},
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": str(exc), "code": "INTERNAL_ERROR", "details": {"type": type(exc).__name__}},
    )


def create_app(
    settings: AppSettings | None = None,
    persistence: Persistence | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Report Engine",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or AppSettings()
    app.state.persistence = persistence

    app.add_exception_handler(IngestError, _ingest_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(EmptyReportError, _empty_report)
    app.add_exception_handler(PayrollReportError, _internal_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health.router)
    app.include_router(uploads.router, prefix="/uploads")
    app.include_router(reports.router, prefix="/reports")
    app.include_router(components.router, prefix="/components")
    return app
