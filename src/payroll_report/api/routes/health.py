"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(request: Request):
    persistence = request.app.state.persistence
    ping = getattr(persistence.cache, "ping", None)
    if ping is not None and not ping():
        return JSONResponse(status_code=503, content={"status": "unavailable", "cache": "down"})
    return {"status": "ready", "storage": request.app.state.settings.storage_backend}
