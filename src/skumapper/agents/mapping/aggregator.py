"""Reconciles candidates from every strategy into one mapping per source field."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

from skumapper.agents.mapping.similarity import mean_confidence
from skumapper.models.mapping import STRATEGY_PRIORITY, FieldMapping, SourceField, StrategyResult


@dataclass
class AggregatedMappings:
    mappings: list[FieldMapping] = field(default_factory=list)
    unmapped_fields: list[str] = field(default_factory=list)
    confidence: int = 0


def rank_key(mapping: FieldMapping) -> tuple[int, int]:
    """Sort key: higher confidence first, then higher strategy priority."""
    return (-mapping.confidence, -STRATEGY_PRIORITY[mapping.strategy])


class Aggregator:
    def __init__(self, min_confidence: int = 60) -> None:
        self._min_confidence = min_confidence

    def aggregate(
        self, results: Sequence[StrategyResult], source_fields: Sequence[SourceField]
    ) -> AggregatedMappings:
        candidates: dict[str, list[FieldMapping]] = defaultdict(list)
        for result in results:
            for mapping in result.mappings:
                candidates[mapping.source_field].append(mapping)

        outcome = AggregatedMappings()
        for source in source_fields:
            ranked = sorted(candidates.get(source.name, []), key=rank_key)
            if ranked and ranked[0].confidence >= self._min_confidence:
                outcome.mappings.append(ranked[0])
            else:
                outcome.unmapped_fields.append(source.name)

        outcome.confidence = mean_confidence(outcome.mappings)
        return outcome
