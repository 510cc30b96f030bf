"""DynamoDB backend implementing ILearningStore with optional Redis caching."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from skumapper.core.exceptions import LearningStoreError
from skumapper.models.learning import LearningCacheEntry
from skumapper.persistence.protocols import ICacheBackend

SORT_KEY = "MAPPING"


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        elif isinstance(v, dict):
            out[k] = _decode_decimals(v)
        elif isinstance(v, list):
            out[k] = [
                _decode_decimals(i) if isinstance(i, dict)
                else (int(i) if isinstance(i, Decimal) and i == int(i) else float(i) if isinstance(i, Decimal) else i)
                for i in v
            ]
        else:
            out[k] = v
    return out


def _encode_floats(obj: Any) -> Any:
    """Convert floats to Decimal for DynamoDB writes."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _encode_floats(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_encode_floats(i) for i in obj]
    return obj


def _pk(pattern: str) -> str:
    return f"PATTERN#{pattern}"


def _to_entry(item: dict[str, Any]) -> LearningCacheEntry:
    item = _decode_decimals(item)
    return LearningCacheEntry(
        source_field_pattern=item["sourceFieldPattern"],
        target_field=item["targetField"],
        confidence=item.get("confidence", 0),
        strategy=item["strategy"],
        usage_count=item.get("usageCount", 0),
        success_rate=item.get("successRate", 0),
        last_used_at=item["lastUsedAt"],
        metadata=item.get("metadata", {}),
    )


class DynamoDBLearningStore:
    """Production ILearningStore backed by DynamoDB + optional Redis cache."""

    CACHE_TTL = 60
    TOP_ENTRIES_KEY = "learning:top:{limit}"

    def __init__(self, table_name: str = "skumapper-field-mapping-cache", table_suffix: str = "",
                 region: str = "us-east-1", endpoint_url: str | None = None,
                 cache: ICacheBackend | None = None, cache_ttl: int | None = None) -> None:
        self._table_name = f"{table_name}{table_suffix}"
        self._cache = cache
        self._cache_ttl = cache_ttl or self.CACHE_TTL
        self._cached_limits: set[int] = set()
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    @property
    def _table(self):
        return self._ddb.Table(self._table_name)

    def _scan_all(self) -> list[LearningCacheEntry]:
        """Scan every entry; the table holds one item per source pattern."""
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {}
        try:
            while True:
                resp = self._table.scan(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise LearningStoreError(f"DynamoDB scan of {self._table_name!r} failed: {exc}") from exc
        return [_to_entry(item) for item in items]

    # ---- ILearningStore methods ----

    def read_top_entries(self, limit: int) -> list[LearningCacheEntry]:
        cache_key = self.TOP_ENTRIES_KEY.format(limit=limit)

        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return [LearningCacheEntry.model_validate(e) for e in json.loads(cached)]

        entries = sorted(self._scan_all(), key=lambda e: e.usage_count, reverse=True)[:limit]

        if self._cache is not None:
            payload = json.dumps([e.model_dump(mode="json") for e in entries])
            self._cache.setex(cache_key, self._cache_ttl, payload)
            self._cached_limits.add(limit)

        return entries

    def read_recent_entries(self, limit: int) -> list[LearningCacheEntry]:
        return sorted(self._scan_all(), key=lambda e: e.last_used_at, reverse=True)[:limit]

    def get_entry(self, pattern: str) -> LearningCacheEntry | None:
        try:
            resp = self._table.get_item(Key={"PK": _pk(pattern), "SK": SORT_KEY})
        except ClientError as exc:
            raise LearningStoreError(f"DynamoDB get for pattern={pattern!r} failed: {exc}") from exc
        item = resp.get("Item")
        return _to_entry(item) if item else None

    def upsert_entry(
        self,
        pattern: str,
        target_field: str,
        confidence: int,
        strategy: str,
        metadata: dict[str, Any] | None = None,
    ) -> LearningCacheEntry:
        key = {"PK": _pk(pattern), "SK": SORT_KEY}
        now = datetime.now(timezone.utc).isoformat()
        try:
            existing = self.get_entry(pattern)
            if existing is None:
                item = {
                    **key,
                    "sourceFieldPattern": pattern,
                    "targetField": target_field,
                    "confidence": confidence,
                    "strategy": str(strategy),
                    "usageCount": 1,
                    "successRate": confidence,
                    "lastUsedAt": now,
                    "metadata": _encode_floats(metadata or {}),
                }
                try:
                    self._table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
                    return _to_entry(item)
                except ClientError as exc:
                    if exc.response["Error"]["Code"] != "ConditionalCheckFailedException":
                        raise
                    # Another session inserted the pattern first; reinforce theirs.
                    existing = self.get_entry(pattern)

            success_rate = min(100, existing.success_rate + 1) if existing else confidence
            resp = self._table.update_item(
                Key=key,
                UpdateExpression="ADD usageCount :one SET successRate = :rate, lastUsedAt = :now",
                ExpressionAttributeValues={":one": 1, ":rate": success_rate, ":now": now},
                ReturnValues="ALL_NEW",
            )
            return _to_entry(resp["Attributes"])
        except ClientError as exc:
            raise LearningStoreError(f"DynamoDB upsert for pattern={pattern!r} failed: {exc}") from exc
        finally:
            self._invalidate()

    def _invalidate(self) -> None:
        if self._cache is None:
            return
        for limit in self._cached_limits:
            self._cache.delete(self.TOP_ENTRIES_KEY.format(limit=limit))
