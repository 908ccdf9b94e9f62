"""Integration tests for the DynamoDB and S3 backends against LocalStack."""

from __future__ import annotations

import pytest

from payroll_report.ingest.pipeline import IngestionService
from payroll_report.models.batch import BatchStatus
from payroll_report.persistence.dynamodb_backend import (
    DynamoDBBatchStore,
    DynamoDBComponentRegistry,
    DynamoDBEmployeeStore,
)
from payroll_report.persistence.s3_backend import S3FileStore
from tests.integration.conftest import BUCKET, LOCALSTACK_URL, REGION, skip_no_localstack
from tests.sample_data import PAYROLL_CSV

OWNER = "inttest-user"


@skip_no_localstack
class TestDynamoDBIntegration:
    @pytest.fixture
    def ddb_kwargs(self, seeded_tables):
        return {"table_suffix": seeded_tables, "region": REGION, "endpoint_url": LOCALSTACK_URL}

    @pytest.fixture
    def service(self, ddb_kwargs, localstack_s3):
        return IngestionService(
            employees=DynamoDBEmployeeStore(**ddb_kwargs),
            batches=DynamoDBBatchStore(**ddb_kwargs),
            registry=DynamoDBComponentRegistry(**ddb_kwargs),
            files=S3FileStore(bucket=BUCKET, region=REGION, endpoint_url=LOCALSTACK_URL),
        )

    def test_registry_from_seed(self, ddb_kwargs):
        registry = DynamoDBComponentRegistry(**ddb_kwargs)
        codes = {e.code for e in registry.list_active()}
        assert "SAL001" in codes
        assert "ALW012" not in codes

    def test_ingest_round_trip(self, service, ddb_kwargs):
        result = service.ingest(PAYROLL_CSV, period="2023-01", owner=OWNER, filename="jan.csv")
        try:
            assert result.batch.status == BatchStatus.COMPLETED
            employees = DynamoDBEmployeeStore(**ddb_kwargs)
            assert employees.count_by_batch(result.batch.id) == 3
            assert result.batch.raw_path is not None
        finally:
            service.delete_batch(result.batch.id, OWNER)
