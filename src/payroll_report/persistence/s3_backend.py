"""S3 archive of raw upload files, implementing IFileStore."""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ClientError

from payroll_report.core.exceptions import StorageError
from payroll_report.models.batch import UploadBatch

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"


class S3FileStore:
    """Keeps each accepted upload as one object under ``<prefix>/<owner>/<period>/``.

    The object carries the batch id, owner and period as metadata so an
    archived file can be traced back to its batch without the batch table.
    """

    def __init__(self, bucket: str, prefix: str = "uploads", region: str = "ap-southeast-3",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        self._prefix = prefix.rstrip("/")
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def archive_upload(self, batch: UploadBatch, content: bytes) -> str:
        key = batch.archive_key(self._prefix)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=CSV_CONTENT_TYPE,
                Metadata={"batch-id": batch.id, "owner": batch.owner, "period": batch.period},
            )
        except ClientError as exc:
            raise StorageError(
                f"Archiving upload {batch.id} to s3://{self._bucket}/{key} failed: {exc}"
            ) from exc
        logger.debug("Archived batch %s (%d bytes) to s3://%s/%s", batch.id, len(content), self._bucket, key)
        return key
