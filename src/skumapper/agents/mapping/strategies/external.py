"""Cost-bounded fallback to the external reasoning service."""

from __future__ import annotations

import asyncio
import logging

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.prompts import build_mapping_messages, parse_suggestions
from skumapper.agents.mapping.similarity import clamp, round_half_up
from skumapper.agents.mapping.strategies.base import BaseStrategy
from skumapper.core.exceptions import CostBudgetExceeded, ExternalParseError, ExternalServiceError
from skumapper.core.protocols import IModelProvider
from skumapper.models.llm import SuggestedMapping
from skumapper.models.mapping import ExternalMetadata, FieldMapping, StrategyTag

logger = logging.getLogger(__name__)

EXTERNAL_FLOOR = 40
EXTERNAL_CEILING = 89  # never as certain as a deterministic match


def to_field_mappings(suggestions: list[SuggestedMapping], context: MappingContext) -> list[FieldMapping]:
    """Drop weak suggestions and those naming unknown fields; clamp the rest into the external band.

    The minimum-confidence gate applies to the service's raw score, before
    rounding and clamping.
    """
    sources = set(context.source_names)
    mappings: list[FieldMapping] = []
    for s in suggestions:
        if s.confidence < context.config.min_confidence:
            continue
        if s.source_field not in sources or s.target_field not in context.schema:
            logger.debug("Dropping suggestion %s -> %s: unknown field", s.source_field, s.target_field)
            continue
        mappings.append(FieldMapping(
            source_field=s.source_field,
            target_field=s.target_field,
            confidence=clamp(round_half_up(s.confidence), EXTERNAL_FLOOR, EXTERNAL_CEILING),
            strategy=StrategyTag.EXTERNAL,
            reasoning=s.reasoning or "LLM-powered mapping",
            metadata=ExternalMetadata(
                raw_confidence=s.confidence,
                data_type_match=s.data_type_match,
                transformation_required=s.transformation_required,
            ),
        ))
    return mappings


class ExternalStrategy(BaseStrategy):
    tag = StrategyTag.EXTERNAL
    metered = True

    def __init__(self, provider: IModelProvider | None, max_tokens: int = 1500) -> None:
        self._provider = provider
        self._max_tokens = max_tokens

    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        governor = context.cost_governor

        if self._provider is None or not self._provider.is_available():
            return []
        if not governor.has_budget():
            logger.info("Skipping external mapping: session budget $%.6f spent", governor.ceiling)
            return []

        messages = build_mapping_messages(context)
        try:
            completion = await asyncio.to_thread(
                self._provider.complete,
                messages,
                cost_limit=governor.remaining,
                max_tokens=self._max_tokens,
                timeout=context.remaining_seconds(),
            )
        except CostBudgetExceeded as exc:
            logger.info("Skipping external mapping: %s", exc)
            return []
        except ExternalServiceError as exc:
            logger.warning("External mapping call failed: %s", exc)
            return []

        governor.record(completion.cost)

        try:
            return to_field_mappings(parse_suggestions(completion.content), context)
        except ExternalParseError as exc:
            logger.warning("Discarding external mapping response: %s", exc)
            return []
