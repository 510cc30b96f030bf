"""Create the DynamoDB learning-cache table and seed confirmed mappings.

Usage:
    python scripts/seed_learning_cache.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import boto3

TABLE_NAME = "skumapper-field-mapping-cache"
SEED_PATH = Path(__file__).resolve().parent.parent / "config" / "learning_seed.json"


def create_table(ddb: Any, table_name: str = TABLE_NAME, suffix: str = "") -> bool:
    """Create the learning-cache table. Returns False if it already exists."""
    client = ddb.meta.client
    full_name = f"{table_name}{suffix}"
    if full_name in client.list_tables().get("TableNames", []):
        print(f"  Table {full_name} already exists, skipping")
        return False
    client.create_table(
        TableName=full_name,
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
    print(f"  Created table {full_name}")
    return True


def seed_entries(ddb: Any, table_name: str = TABLE_NAME, suffix: str = "",
                 seed_path: Path = SEED_PATH) -> int:
    """Write every seed entry, keyed by its lower-cased source pattern."""
    data = json.loads(seed_path.read_text())
    now = datetime.now(timezone.utc).isoformat()
    tbl = ddb.Table(f"{table_name}{suffix}")
    with tbl.batch_writer() as batch:
        for entry in data["entries"]:
            pattern = entry["sourceFieldPattern"].lower()
            batch.put_item(Item={
                "PK": f"PATTERN#{pattern}",
                "SK": "MAPPING",
                "sourceFieldPattern": pattern,
                "targetField": entry["targetField"],
                "confidence": entry["confidence"],
                "strategy": entry["strategy"],
                "usageCount": entry.get("usageCount", 1),
                "successRate": entry.get("successRate", entry["confidence"]),
                "lastUsedAt": entry.get("lastUsedAt", now),
                "metadata": entry.get("metadata", {}),
            })
    print(f"  Seeded {len(data['entries'])} learning-cache entries")
    return len(data["entries"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the SKU mapper learning cache")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating table...")
    create_table(ddb, suffix=args.table_suffix)

    print("Seeding entries...")
    seed_entries(ddb, suffix=args.table_suffix)

    print("Done!")


if __name__ == "__main__":
    main()
