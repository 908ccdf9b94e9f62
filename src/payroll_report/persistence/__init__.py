"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from payroll_report.core.config import AppSettings
from payroll_report.core.protocols import (
    IBatchStore,
    ICacheBackend,
    IComponentRegistry,
    IEmployeeStore,
    IFileStore,
    IReportStore,
)
from payroll_report.models.component import ComponentEntry
from payroll_report.persistence.registry_csv import load_components

logger = logging.getLogger(__name__)


def seed_entries(path: Optional[Path]) -> list[ComponentEntry]:
    """Registry entries from ``path``; empty when no file is configured or found."""
    if path is None:
        return []
    if not path.is_file():
        logger.warning("Component registry CSV %s not found, starting with an empty registry", path)
        return []
    return load_components(path)


@dataclass
class Persistence:
    """Wired set of stores used by the services."""

    registry: IComponentRegistry
    employees: IEmployeeStore
    batches: IBatchStore
    reports: IReportStore
    cache: Optional[ICacheBackend] = None
    files: Optional[IFileStore] = None


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings.

    ``memory`` keeps everything in process. ``dynamodb`` uses DynamoDB tables,
    a Redis cache in front of the component registry and S3 for raw uploads.
    """
    if settings is None:
        settings = AppSettings()

    if settings.storage_backend == "memory":
        from payroll_report.persistence.memory_backend import (
            MemoryBatchStore,
            MemoryCacheBackend,
            MemoryComponentRegistry,
            MemoryEmployeeStore,
            MemoryFileStore,
            MemoryReportStore,
        )

        return Persistence(
            registry=MemoryComponentRegistry(seed_entries(settings.components_csv)),
            employees=MemoryEmployeeStore(),
            batches=MemoryBatchStore(),
            reports=MemoryReportStore(),
            cache=MemoryCacheBackend(),
            files=MemoryFileStore(prefix=settings.s3.prefix),
        )

    from payroll_report.persistence.dynamodb_backend import (
        DynamoDBBatchStore,
        DynamoDBComponentRegistry,
        DynamoDBEmployeeStore,
        DynamoDBReportStore,
    )
    from payroll_report.persistence.redis_backend import RedisCacheBackend
    from payroll_report.persistence.s3_backend import S3FileStore

    cache = RedisCacheBackend(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        namespace=settings.redis.namespace,
    )
    ddb = {
        "table_suffix": settings.dynamodb.table_suffix,
        "region": settings.dynamodb.region,
        "endpoint_url": settings.dynamodb.endpoint_url,
    }
    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        prefix=settings.s3.prefix,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return Persistence(
        registry=DynamoDBComponentRegistry(
            **ddb, cache=cache, cache_ttl=settings.redis.registry_ttl,
        ),
        employees=DynamoDBEmployeeStore(**ddb),
        batches=DynamoDBBatchStore(**ddb),
        reports=DynamoDBReportStore(**ddb),
        cache=cache,
        files=file_store,
    )
