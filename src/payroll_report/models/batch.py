"""Upload batch lifecycle models."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class BatchStatus(StrEnum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UploadBatch(BaseModel):
    """One ingested source file scoped to a reporting period."""

    id: str = Field(default_factory=_new_id)
    owner: str
    period: str  # "YYYY-MM"
    original_name: str = ""
    file_size: int = 0
    row_count: int = 0
    status: BatchStatus = BatchStatus.PROCESSING
    progress: int = 0
    error_message: Optional[str] = None
    raw_path: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=_now)

    def archive_key(self, prefix: str) -> str:
        """Object key of the raw upload: ``<prefix>/<owner>/<period>/<id>-<file name>``."""
        name = re.sub(r"[^a-zA-Z0-9.-]", "_", self.original_name) or "upload.csv"
        return f"{prefix}/{self.owner}/{self.period}/{self.id}-{name}"


class IngestResult(BaseModel):
    """Synchronous answer to an upload request."""

    batch: UploadBatch
    duplicate_count: int = 0
    warning: Optional[str] = None


class IngestSummary(BaseModel):
    """Outcome of processing every chunk of a batch."""

    batch_id: str
    processed: int = 0
    skipped_empty: int = 0
    skipped_duplicates: int = 0
    failed: int = 0
    duration_ms: int = 0
