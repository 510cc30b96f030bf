"""Matching against previously confirmed mappings in the learning cache."""

from __future__ import annotations

import asyncio
import logging

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.similarity import data_type_match, scaled_confidence, string_similarity
from skumapper.agents.mapping.strategies.base import BaseStrategy
from skumapper.core.protocols import ILearningStore
from skumapper.models.learning import LearningCacheEntry
from skumapper.models.mapping import FieldMapping, HistoricalMetadata, StrategyTag

logger = logging.getLogger(__name__)

HISTORICAL_CEILING = 65  # past decisions may be stale


class HistoricalStrategy(BaseStrategy):
    tag = StrategyTag.HISTORICAL

    def __init__(self, store: ILearningStore) -> None:
        self._store = store

    async def _load_entries(self, context: MappingContext) -> list[LearningCacheEntry]:
        entries = await asyncio.to_thread(
            self._store.read_top_entries, context.config.historical_entry_limit
        )
        if not context.config.filter_stale_cache_entries:
            return entries
        live = [e for e in entries if e.target_field in context.schema]
        if len(live) < len(entries):
            logger.debug("Ignoring %d cache entries for retired target fields", len(entries) - len(live))
        return live

    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        entries = await self._load_entries(context)
        return await asyncio.to_thread(self._match, context, entries)

    def _match(self, context: MappingContext, entries: list[LearningCacheEntry]) -> list[FieldMapping]:
        threshold = context.config.historical_threshold
        mappings: list[FieldMapping] = []

        for source in context.source_fields:
            name = source.name.lower()
            best: LearningCacheEntry | None = None
            best_score = 0.0
            for entry in entries:
                score = string_similarity(name, entry.source_field_pattern.lower())
                if score > threshold and score > best_score:
                    best, best_score = entry, score

            if best is None:
                continue

            mappings.append(FieldMapping(
                source_field=source.name,
                target_field=best.target_field,
                confidence=scaled_confidence(best_score, HISTORICAL_CEILING),
                strategy=self.tag,
                reasoning=f"Historical pattern match (used {best.usage_count} times)",
                metadata=HistoricalMetadata(
                    historical_usage=best.usage_count,
                    similarity_score=best_score,
                    matched_pattern=best.source_field_pattern,
                    data_type_match=data_type_match(source, context.schema.get(best.target_field)),
                ),
            ))
        return mappings
