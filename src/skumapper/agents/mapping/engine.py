"""FieldMappingEngine: turns source column descriptors into target field mappings."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter
from collections.abc import Sequence
from typing import Any

from skumapper.agents.base import BaseAgent
from skumapper.agents.mapping.aggregator import Aggregator
from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.cost import CostGovernor
from skumapper.agents.mapping.executor import StrategyExecutor
from skumapper.agents.mapping.learning import LearningUpdater, strategy_statistics
from skumapper.agents.mapping.strategies import BaseStrategy, build_default_strategies
from skumapper.agents.mapping.strategies.base import elapsed_ms
from skumapper.core.config import AppSettings
from skumapper.core.exceptions import MappingSetupError
from skumapper.core.protocols import ILearningStore, IModelProvider
from skumapper.model_providers import create_model_provider
from skumapper.models.learning import StrategyStatistics
from skumapper.models.mapping import ExtractedFields, MappingResult, MappingRunState
from skumapper.models.schema import SKU_FIELDS, TargetSchema
from skumapper.persistence import create_persistence

logger = logging.getLogger(__name__)

STATISTICS_WINDOW = 100


class FieldMappingEngine(BaseAgent):
    """Multi-strategy field mapping with a learning cache and a cost-bounded fallback.

    One instance is built at process start and shared; all per-request state
    (context, cost governor) lives inside ``generate_mappings``.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        model: IModelProvider | None,
        learning_store: ILearningStore,
        schema: TargetSchema = SKU_FIELDS,
        strategies: Sequence[BaseStrategy] | None = None,
    ) -> None:
        super().__init__(settings=settings, model=model, learning_store=learning_store)
        self._config = settings.mapping
        self._schema = schema
        if strategies is None:
            strategies = build_default_strategies(learning_store, model, settings.llm.max_tokens)
        self._executor = StrategyExecutor(strategies, self._config.deadline_seconds)
        self._aggregator = Aggregator(self._config.min_confidence)
        self._learning = LearningUpdater(learning_store, self._config.learning_threshold)

    @property
    def schema(self) -> TargetSchema:
        return self._schema

    def _build_context(self, extracted: ExtractedFields, governor: CostGovernor) -> MappingContext:
        if len(self._schema) == 0:
            raise MappingSetupError("Target schema has no fields")
        duplicates = [n for n, c in Counter(f.name for f in extracted.fields).items() if c > 1]
        if duplicates:
            raise MappingSetupError(f"Duplicate source field names: {', '.join(sorted(duplicates))}")
        return MappingContext(
            source_fields=list(extracted.fields),
            schema=self._schema,
            config=self._config,
            cost_governor=governor,
            sample_data=list(extracted.sample_data),
            file_type=extracted.file_type,
        )

    async def generate_mappings(self, extracted: ExtractedFields | dict[str, Any]) -> MappingResult:
        """Map every source field onto the target schema. Never raises."""
        start = time.perf_counter()
        run_id = uuid.uuid4().hex[:8]
        governor = CostGovernor(self._config.session_cost_ceiling)

        def transition(state: MappingRunState) -> None:
            logger.debug("Mapping run %s -> %s", run_id, state)

        try:
            transition(MappingRunState.IDLE)
            if not isinstance(extracted, ExtractedFields):
                extracted = ExtractedFields.model_validate(extracted)
            context = self._build_context(extracted, governor)

            transition(MappingRunState.DISPATCHING)
            pending = asyncio.ensure_future(self._executor.execute(context))
            transition(MappingRunState.AWAITING_RESULTS)
            results = await pending

            transition(MappingRunState.AGGREGATING)
            aggregated = self._aggregator.aggregate(results, context.source_fields)

            transition(MappingRunState.PERSISTING)
            written = await asyncio.to_thread(self._learning.apply, aggregated.mappings)
            logger.debug("Mapping run %s stored %d learning entries", run_id, written)

            transition(MappingRunState.DONE)
            return MappingResult(
                success=True,
                mappings=aggregated.mappings,
                unmapped_fields=aggregated.unmapped_fields,
                confidence=aggregated.confidence,
                processing_time_ms=elapsed_ms(start),
                strategies_used=[r.strategy for r in results],
                cost=governor.spent,
            )
        except Exception as exc:
            transition(MappingRunState.FAILED)
            logger.exception("Mapping run %s failed", run_id)
            return MappingResult(
                success=False,
                unmapped_fields=_source_names(extracted),
                processing_time_ms=elapsed_ms(start),
                cost=governor.spent,
                error=str(exc) or exc.__class__.__name__,
            )

    async def get_strategy_statistics(self) -> dict[str, StrategyStatistics]:
        """Count, mean confidence and usage of recently used cache entries, per strategy."""
        entries = await asyncio.to_thread(self._learning_store.read_recent_entries, STATISTICS_WINDOW)
        return strategy_statistics(entries)


def _source_names(extracted: Any) -> list[str]:
    """Best-effort field names from a request that may have failed validation."""
    fields = extracted.fields if isinstance(extracted, ExtractedFields) else None
    if fields is None and isinstance(extracted, dict):
        fields = extracted.get("fields")
    names: list[str] = []
    for f in fields or []:
        name = f.get("name") if isinstance(f, dict) else getattr(f, "name", None)
        if isinstance(name, str):
            names.append(name)
    return names


def create_mapping_engine(settings: AppSettings | None = None) -> FieldMappingEngine:
    """Wire the engine from settings: learning store, cache and reasoning provider."""
    if settings is None:
        settings = AppSettings()
    learning_store, _cache = create_persistence(settings)
    return FieldMappingEngine(
        settings=settings,
        model=create_model_provider(settings.llm),
        learning_store=learning_store,
    )
