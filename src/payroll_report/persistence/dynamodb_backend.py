"""DynamoDB backends for components, employees, batches and report definitions.

Table layout (every table has string PK / SK keys and an optional suffix):

    payroll-components  PK=COMPONENT#<code>   SK=META
    payroll-employees   PK=BATCH#<batch_id>   SK=EMP#<employee_no>
    payroll-batches     PK=BATCH#<batch_id>   SK=STATE
    payroll-reports     PK=REPORT#<id>        SK=DEFINITION
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from payroll_report.core.exceptions import StorageError
from payroll_report.models.batch import BatchStatus, UploadBatch
from payroll_report.models.component import ComponentEntry
from payroll_report.models.employee import EmployeeRecord
from payroll_report.models.report import ReportDefinition

logger = logging.getLogger(__name__)

COMPONENTS_TABLE = "payroll-components"
EMPLOYEES_TABLE = "payroll-employees"
BATCHES_TABLE = "payroll-batches"
REPORTS_TABLE = "payroll-reports"

REGISTRY_CACHE_KEY = "components:active"

_KEY_FIELDS = ("PK", "SK")

# DynamoDB caps a TransactWriteItems call at 100 operations.
TRANSACTION_LIMIT = 100
_TRANSACTION_ATTEMPTS = 3
_serializer = TypeSerializer()


def _encode(value: Any) -> Any:
    """Convert floats to Decimal (recursively) so boto3 accepts the item."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    """Convert Decimal values in a DynamoDB item back to int/float."""
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    if isinstance(value, dict):
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


def _strip_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in _decode(item).items() if k not in _KEY_FIELDS}


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class _DynamoTables:
    """Shared boto3 resource and table-name handling."""

    def __init__(self, table_suffix: str = "", region: str = "ap-southeast-3",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    def _query_all(self, base: str, **kwargs: Any) -> list[dict[str, Any]]:
        tbl = self._table(base)
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = tbl.query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    return items
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StorageError(f"DynamoDB query on {base!r} failed: {exc}") from exc

    def _scan_all(self, base: str, **kwargs: Any) -> list[dict[str, Any]]:
        tbl = self._table(base)
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = tbl.scan(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    return items
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StorageError(f"DynamoDB scan on {base!r} failed: {exc}") from exc

    def _get_item(self, base: str, pk: str, sk: str) -> dict[str, Any] | None:
        try:
            resp = self._table(base).get_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise StorageError(f"DynamoDB get on {base!r} failed: {exc}") from exc
        item = resp.get("Item")
        return _strip_keys(item) if item else None

    def _put_item(self, base: str, item: dict[str, Any], **kwargs: Any) -> None:
        try:
            self._table(base).put_item(Item=_encode(item), **kwargs)
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise
            raise StorageError(f"DynamoDB put on {base!r} failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Component registry
# ---------------------------------------------------------------------------

class DynamoDBComponentRegistry(_DynamoTables):
    """IComponentRegistry backed by DynamoDB with an optional Redis cache."""

    def __init__(self, table_suffix: str = "", region: str = "ap-southeast-3",
                 endpoint_url: str | None = None, cache: Any = None,
                 cache_ttl: int = 300) -> None:
        super().__init__(table_suffix, region, endpoint_url)
        self._cache = cache
        self._cache_ttl = cache_ttl

    def list_active(self) -> list[ComponentEntry]:
        if self._cache is not None:
            cached = self._cache.get(REGISTRY_CACHE_KEY)
            if cached is not None:
                return [ComponentEntry.model_validate(e) for e in json.loads(cached)]

        entries = [e for e in self.list_all() if e.active]

        if self._cache is not None:
            payload = json.dumps([e.model_dump(mode="json") for e in entries])
            self._cache.setex(REGISTRY_CACHE_KEY, self._cache_ttl, payload)
        return entries

    def list_all(self) -> list[ComponentEntry]:
        items = self._scan_all(COMPONENTS_TABLE)
        entries = [ComponentEntry.model_validate(_strip_keys(i)) for i in items]
        return sorted(entries, key=lambda e: e.code)

    def upsert(self, entry: ComponentEntry) -> None:
        item = {"PK": f"COMPONENT#{entry.code}", "SK": "META", **entry.model_dump(mode="json")}
        self._put_item(COMPONENTS_TABLE, item)
        if self._cache is not None:
            self._cache.delete(REGISTRY_CACHE_KEY)


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------

class DynamoDBEmployeeStore(_DynamoTables):
    """IEmployeeStore with conditional writes; duplicates are skipped.

    ``put_many`` writes through TransactWriteItems, so a chunk is stored whole
    or not at all. A chunk larger than one transaction is written group by
    group, and the groups already written are deleted again when a later
    group fails.
    """

    @staticmethod
    def _item(record: EmployeeRecord) -> dict[str, Any]:
        return {
            "PK": f"BATCH#{record.batch_id}",
            "SK": f"EMP#{record.employee_no}",
            **record.model_dump(mode="json"),
        }

    def put(self, record: EmployeeRecord) -> bool:
        try:
            self._put_item(
                EMPLOYEES_TABLE, self._item(record), ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                logger.debug("Skipped duplicate employee %s in batch %s",
                             record.employee_no, record.batch_id)
                return False
            raise
        return True

    def put_many(self, records: Sequence[EmployeeRecord]) -> int:
        written: list[dict[str, Any]] = []
        try:
            for start in range(0, len(records), TRANSACTION_LIMIT):
                group = [self._item(r) for r in records[start: start + TRANSACTION_LIMIT]]
                written.extend(self._transact_put(group))
        except StorageError:
            self._rollback(written)
            raise
        if len(written) < len(records):
            logger.debug("Skipped %d duplicate employees", len(records) - len(written))
        return len(written)

    def _transact_put(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Write ``items`` in one transaction, dropping keys that already exist.

        Returns the items actually written.
        """
        table_name = f"{EMPLOYEES_TABLE}{self._table_suffix}"
        client = self._ddb.meta.client
        pending = items
        for _ in range(_TRANSACTION_ATTEMPTS):
            if not pending:
                return []
            try:
                client.transact_write_items(TransactItems=[
                    {
                        "Put": {
                            "TableName": table_name,
                            "Item": {k: _serializer.serialize(v) for k, v in _encode(item).items()},
                            "ConditionExpression": "attribute_not_exists(PK)",
                        }
                    }
                    for item in pending
                ])
                return pending
            except ClientError as exc:
                if _error_code(exc) != "TransactionCanceledException":
                    raise StorageError(
                        f"DynamoDB transactional put on {EMPLOYEES_TABLE!r} failed: {exc}"
                    ) from exc
                conflicts = self._conflicts(exc, pending)
                if not conflicts:
                    raise StorageError(
                        f"DynamoDB transaction on {EMPLOYEES_TABLE!r} cancelled: {exc}"
                    ) from exc
                pending = [item for i, item in enumerate(pending) if i not in conflicts]
        raise StorageError(
            f"DynamoDB transaction on {EMPLOYEES_TABLE!r} still conflicting "
            f"after {_TRANSACTION_ATTEMPTS} attempts"
        )

    def _conflicts(self, exc: ClientError, pending: list[dict[str, Any]]) -> set[int]:
        """Positions in ``pending`` whose key already exists."""
        reasons = exc.response.get("CancellationReasons") or []
        if reasons:
            return {i for i, r in enumerate(reasons) if r.get("Code") == "ConditionalCheckFailed"}
        tbl = self._table(EMPLOYEES_TABLE)
        try:
            return {
                i for i, item in enumerate(pending)
                if "Item" in tbl.get_item(Key={"PK": item["PK"], "SK": item["SK"]}, ProjectionExpression="PK")
            }
        except ClientError as lookup_exc:
            raise StorageError(f"DynamoDB conflict lookup failed: {lookup_exc}") from lookup_exc

    def _rollback(self, items: list[dict[str, Any]]) -> None:
        if not items:
            return
        logger.warning("Rolling back %d employee rows of a failed chunk", len(items))
        try:
            with self._table(EMPLOYEES_TABLE).batch_writer() as writer:
                for item in items:
                    writer.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
        except ClientError:
            logger.exception("Rollback of %d employee rows failed", len(items))

    def list_by_batch(self, batch_id: str) -> list[EmployeeRecord]:
        items = self._query_all(
            EMPLOYEES_TABLE, KeyConditionExpression=Key("PK").eq(f"BATCH#{batch_id}"),
        )
        return [EmployeeRecord.model_validate(_strip_keys(i)) for i in items]

    def count_by_batch(self, batch_id: str) -> int:
        tbl = self._table(EMPLOYEES_TABLE)
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": Key("PK").eq(f"BATCH#{batch_id}"),
            "Select": "COUNT",
        }
        total = 0
        try:
            while True:
                resp = tbl.query(**kwargs)
                total += resp.get("Count", 0)
                if "LastEvaluatedKey" not in resp:
                    return total
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StorageError(f"DynamoDB count for batch {batch_id!r} failed: {exc}") from exc

    def employee_numbers(self, batch_ids: Iterable[str]) -> set[str]:
        numbers: set[str] = set()
        for batch_id in batch_ids:
            items = self._query_all(
                EMPLOYEES_TABLE,
                KeyConditionExpression=Key("PK").eq(f"BATCH#{batch_id}"),
                ProjectionExpression="SK",
            )
            numbers.update(i["SK"].removeprefix("EMP#") for i in items)
        return numbers

    def delete_by_batch(self, batch_id: str) -> int:
        items = self._query_all(
            EMPLOYEES_TABLE,
            KeyConditionExpression=Key("PK").eq(f"BATCH#{batch_id}"),
            ProjectionExpression="PK, SK",
        )
        try:
            with self._table(EMPLOYEES_TABLE).batch_writer() as writer:
                for item in items:
                    writer.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
        except ClientError as exc:
            raise StorageError(f"DynamoDB delete for batch {batch_id!r} failed: {exc}") from exc
        return len(items)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

class DynamoDBBatchStore(_DynamoTables):
    """IBatchStore; progress only moves forward via a conditional update."""

    @staticmethod
    def _key(batch_id: str) -> dict[str, str]:
        return {"PK": f"BATCH#{batch_id}", "SK": "STATE"}

    def create(self, batch: UploadBatch) -> UploadBatch:
        self._put_item(BATCHES_TABLE, {**self._key(batch.id), **batch.model_dump(mode="json")})
        return batch

    def get(self, batch_id: str) -> Optional[UploadBatch]:
        item = self._get_item(BATCHES_TABLE, f"BATCH#{batch_id}", "STATE")
        return UploadBatch.model_validate(item) if item else None

    def _update(self, batch_id: str, values: dict[str, Any], **kwargs: Any) -> None:
        names = {f"#{k}": k for k in values}
        expression = "SET " + ", ".join(f"#{k} = :{k}" for k in values)
        try:
            self._table(BATCHES_TABLE).update_item(
                Key=self._key(batch_id),
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues={f":{k}": _encode(v) for k, v in values.items()},
                **kwargs,
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise
            raise StorageError(f"DynamoDB update for batch {batch_id!r} failed: {exc}") from exc

    def update_progress(self, batch_id: str, progress: int) -> None:
        try:
            self._update(
                batch_id,
                {"progress": min(progress, 100)},
                ConditionExpression="attribute_exists(PK) AND #progress < :progress",
            )
        except ClientError as exc:
            if not _is_conditional_failure(exc):
                raise

    def mark_completed(self, batch_id: str, row_count: int, warning: Optional[str] = None) -> None:
        self._update(batch_id, {
            "status": BatchStatus.COMPLETED.value,
            "progress": 100,
            "row_count": row_count,
            "error_message": warning,
        })

    def mark_failed(self, batch_id: str, error: str) -> None:
        self._update(batch_id, {"status": BatchStatus.FAILED.value, "error_message": error})

    def list_by_period(self, period: str, owner: str) -> list[UploadBatch]:
        items = self._scan_all(
            BATCHES_TABLE, FilterExpression=Attr("period").eq(period) & Attr("owner").eq(owner),
        )
        return [UploadBatch.model_validate(_strip_keys(i)) for i in items]

    def list_by_owner(self, owner: str) -> list[UploadBatch]:
        items = self._scan_all(BATCHES_TABLE, FilterExpression=Attr("owner").eq(owner))
        return [UploadBatch.model_validate(_strip_keys(i)) for i in items]

    def delete(self, batch_id: str) -> None:
        try:
            self._table(BATCHES_TABLE).delete_item(Key=self._key(batch_id))
        except ClientError as exc:
            raise StorageError(f"DynamoDB delete for batch {batch_id!r} failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class DynamoDBReportStore(_DynamoTables):
    """IReportStore for saved report definitions."""

    def create(self, report: ReportDefinition) -> ReportDefinition:
        item = {"PK": f"REPORT#{report.id}", "SK": "DEFINITION", **report.model_dump(mode="json")}
        self._put_item(REPORTS_TABLE, item)
        return report

    def get(self, report_id: str) -> Optional[ReportDefinition]:
        item = self._get_item(REPORTS_TABLE, f"REPORT#{report_id}", "DEFINITION")
        return ReportDefinition.model_validate(item) if item else None

    def list_by_owner(self, owner: str) -> list[ReportDefinition]:
        items = self._scan_all(REPORTS_TABLE, FilterExpression=Attr("owner").eq(owner))
        return [ReportDefinition.model_validate(_strip_keys(i)) for i in items]
