"""In-memory backends for unit tests and local development: dict-backed fakes."""

from __future__ import annotations

import threading
from typing import Any

from skumapper.models.learning import LearningCacheEntry
from skumapper.models.mapping import StrategyTag


class MemoryLearningStore:
    """Dict-backed ILearningStore."""

    def __init__(self, entries: list[LearningCacheEntry] | None = None) -> None:
        self._entries: dict[str, LearningCacheEntry] = {}
        self._lock = threading.Lock()
        for entry in entries or []:
            self._entries[entry.source_field_pattern] = entry

    def read_top_entries(self, limit: int) -> list[LearningCacheEntry]:
        with self._lock:
            entries = list(self._entries.values())
        entries.sort(key=lambda e: e.usage_count, reverse=True)
        return entries[:limit]

    def read_recent_entries(self, limit: int) -> list[LearningCacheEntry]:
        with self._lock:
            entries = list(self._entries.values())
        entries.sort(key=lambda e: e.last_used_at, reverse=True)
        return entries[:limit]

    def get_entry(self, pattern: str) -> LearningCacheEntry | None:
        return self._entries.get(pattern)

    def upsert_entry(
        self,
        pattern: str,
        target_field: str,
        confidence: int,
        strategy: str,
        metadata: dict[str, Any] | None = None,
    ) -> LearningCacheEntry:
        with self._lock:
            existing = self._entries.get(pattern)
            if existing is not None:
                entry = existing.reinforced()
            else:
                entry = LearningCacheEntry(
                    source_field_pattern=pattern,
                    target_field=target_field,
                    confidence=confidence,
                    strategy=StrategyTag(strategy),
                    usage_count=1,
                    success_rate=confidence,
                    metadata=metadata or {},
                )
            self._entries[pattern] = entry
            return entry


class MemoryCacheBackend:
    """Dict-backed ICacheBackend."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
