"""Writes confirmed high-confidence mappings back to the learning cache."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from skumapper.core.exceptions import CacheError, LearningStoreError
from skumapper.core.protocols import ILearningStore
from skumapper.models.learning import LearningCacheEntry, StrategyStatistics
from skumapper.models.mapping import FieldMapping

logger = logging.getLogger(__name__)


class LearningUpdater:
    def __init__(self, store: ILearningStore, threshold: int = 70) -> None:
        self._store = store
        self._threshold = threshold

    def apply(self, mappings: Sequence[FieldMapping]) -> int:
        """Upsert every mapping at or above the threshold. Returns the number written."""
        written = 0
        for mapping in mappings:
            if mapping.confidence < self._threshold:
                continue
            try:
                self._store.upsert_entry(
                    mapping.source_field.lower(),
                    mapping.target_field,
                    mapping.confidence,
                    mapping.strategy,
                    mapping.metadata.model_dump(mode="json"),
                )
            except (LearningStoreError, CacheError) as exc:
                logger.warning("Failed to update learning cache for %r: %s", mapping.source_field, exc)
                continue
            written += 1
        return written


def strategy_statistics(entries: Iterable[LearningCacheEntry]) -> dict[str, StrategyStatistics]:
    """Per-strategy count, mean confidence and total usage of cached entries."""
    grouped: dict[str, list[LearningCacheEntry]] = defaultdict(list)
    for entry in entries:
        grouped[str(entry.strategy)].append(entry)
    return {
        strategy: StrategyStatistics(
            count=len(group),
            avg_confidence=sum(e.confidence for e in group) / len(group),
            total_usage=sum(e.usage_count for e in group),
        )
        for strategy, group in grouped.items()
    }
