"""Create the payroll DynamoDB tables and seed the component registry.

Usage:
    python scripts/seed_components.py --endpoint-url http://localhost:4566
    python scripts/seed_components.py --csv config/components.csv --table-suffix -dev
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

import boto3

from payroll_report.models.component import ComponentEntry
from payroll_report.persistence.dynamodb_backend import (
    BATCHES_TABLE,
    COMPONENTS_TABLE,
    EMPLOYEES_TABLE,
    REPORTS_TABLE,
)
from payroll_report.persistence.registry_csv import load_components

TABLE_NAMES = [COMPONENTS_TABLE, EMPLOYEES_TABLE, BATCHES_TABLE, REPORTS_TABLE]
DEFAULT_CSV = Path(__file__).resolve().parent.parent / "config" / "components.csv"


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create the payroll tables. Skips tables that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for name in TABLE_NAMES:
        table_name = f"{name}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"  Created table {table_name}")


def seed_components(ddb: Any, entries: list[ComponentEntry], suffix: str = "") -> int:
    """Upsert registry entries keyed by code."""
    tbl = ddb.Table(f"{COMPONENTS_TABLE}{suffix}")
    with tbl.batch_writer(overwrite_by_pkeys=["PK", "SK"]) as batch:
        for entry in entries:
            batch.put_item(Item={
                "PK": f"COMPONENT#{entry.code}",
                "SK": "META",
                **entry.model_dump(mode="json"),
            })
    print(f"  Seeded {len(entries)} components "
          f"({sum(1 for e in entries if not e.active)} inactive)")
    return len(entries)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the payroll component registry")
    parser.add_argument("--csv", type=Path, default=DEFAULT_CSV, help="Component registry CSV")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="ap-southeast-3", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print(f"Loading {args.csv}...")
    entries = load_components(args.csv)

    print("Seeding components...")
    seed_components(ddb, entries, suffix=args.table_suffix)

    print("Done!")


if __name__ == "__main__":
    main()
