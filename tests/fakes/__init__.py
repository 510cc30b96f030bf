"""Shared test doubles: memory backends, canned strategies and builders."""

from __future__ import annotations

import asyncio
import time
from typing import Any

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.cost import CostGovernor
from skumapper.agents.mapping.engine import FieldMappingEngine
from skumapper.agents.mapping.strategies.base import BaseStrategy, ThreadedStrategy
from skumapper.core.config import AppSettings, MappingConfig
from skumapper.model_providers.mock_provider import MockModelProvider
from skumapper.models.mapping import (
    ExactMetadata,
    ExternalMetadata,
    FieldMapping,
    FuzzyMetadata,
    HistoricalMetadata,
    SemanticMetadata,
    SourceField,
    StrategyTag,
)
from skumapper.models.schema import SKU_FIELDS, TargetSchema
from skumapper.persistence.memory_backend import MemoryCacheBackend, MemoryLearningStore

_METADATA = {
    StrategyTag.EXACT: lambda: ExactMetadata(),
    StrategyTag.FUZZY: lambda: FuzzyMetadata(similarity_score=0.8),
    StrategyTag.SEMANTIC: lambda: SemanticMetadata(pattern_match=True, content_match=False),
    StrategyTag.HISTORICAL: lambda: HistoricalMetadata(historical_usage=1, similarity_score=0.9, matched_pattern="x"),
    StrategyTag.EXTERNAL: lambda: ExternalMetadata(raw_confidence=80),
}


def source(name: str, samples: list[Any] | None = None, data_type: str = "string",
           null_percentage: float = 0.0) -> SourceField:
    return SourceField(
        name=name,
        data_type=data_type,
        sample_values=samples or [],
        null_percentage=null_percentage,
    )


def candidate(source_field: str, target_field: str, confidence: int,
              strategy: StrategyTag) -> FieldMapping:
    return FieldMapping(
        source_field=source_field,
        target_field=target_field,
        confidence=confidence,
        strategy=strategy,
        reasoning="test candidate",
        metadata=_METADATA[strategy](),
    )


def make_context(fields: list[SourceField], *, config: MappingConfig | None = None,
                 governor: CostGovernor | None = None, schema: TargetSchema = SKU_FIELDS,
                 sample_data: list[dict[str, Any]] | None = None) -> MappingContext:
    config = config or MappingConfig()
    return MappingContext(
        source_fields=fields,
        schema=schema,
        config=config,
        cost_governor=governor or CostGovernor(config.session_cost_ceiling),
        sample_data=sample_data or [],
    )


def make_engine(store: MemoryLearningStore | None = None, provider: Any = None,
                strategies: list[BaseStrategy] | None = None, **mapping: Any) -> FieldMappingEngine:
    settings = AppSettings(mapping=MappingConfig(**mapping))
    return FieldMappingEngine(
        settings=settings,
        model=provider,
        learning_store=store if store is not None else MemoryLearningStore(),
        strategies=strategies,
    )


class StaticStrategy(BaseStrategy):
    """Returns fixed candidates, optionally after a delay."""

    def __init__(self, tag: StrategyTag, mappings: list[FieldMapping], delay: float = 0.0) -> None:
        self.tag = tag
        self._mappings = mappings
        self._delay = delay

    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        if self._delay:
            await asyncio.sleep(self._delay)
        return list(self._mappings)


class BlockingStrategy(ThreadedStrategy):
    """CPU-style strategy that holds its worker thread for ``seconds``."""

    def __init__(self, tag: StrategyTag, seconds: float) -> None:
        self.tag = tag
        self._seconds = seconds

    def match_fields(self, context: MappingContext) -> list[FieldMapping]:
        time.sleep(self._seconds)
        return []


class FailingStrategy(BaseStrategy):
    def __init__(self, tag: StrategyTag) -> None:
        self.tag = tag

    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        raise RuntimeError("strategy exploded")


__all__ = [
    "BlockingStrategy",
    "FailingStrategy",
    "MemoryCacheBackend",
    "MemoryLearningStore",
    "MockModelProvider",
    "StaticStrategy",
    "candidate",
    "make_context",
    "make_engine",
    "source",
]
