"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class IngestConfig(BaseSettings):
    """Upload ingestion configuration."""

    model_config = {"env_prefix": "PAYROLL_INGEST_"}

    chunk_size: int = 100
    required_columns: list[str] = ["Name", "Employee No"]
    duplicate_sample_size: int = 10
    archive_raw_files: bool = True


class RenderConfig(BaseSettings):
    """Spreadsheet rendering configuration."""

    model_config = {"env_prefix": "PAYROLL_RENDER_"}

    max_column_width: int = 50
    min_column_width: int = 10
    width_sample_rows: int = 100
    sheet_name: str = "Report"


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "PAYROLL_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "ap-southeast-3"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "PAYROLL_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    namespace: str = "payroll"
    registry_ttl: int = 300


class S3Config(BaseSettings):
    """S3 raw upload archive configuration."""

    model_config = {"env_prefix": "PAYROLL_S3_"}

    bucket: str = "payroll-raw-uploads"
    prefix: str = "uploads"
    region: str = "ap-southeast-3"
    endpoint_url: str | None = None  # LocalStack override


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PAYROLL_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    storage_backend: Literal["memory", "dynamodb"] = "memory"
    # Seeds the in-process registry in ``memory`` mode; resolved against the working directory.
    components_csv: Optional[Path] = Path("config/components.csv")

    ingest: IngestConfig = IngestConfig()
    render: RenderConfig = RenderConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
