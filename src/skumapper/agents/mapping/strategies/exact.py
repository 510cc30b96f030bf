"""Exact (case-insensitive) field name matching."""

from __future__ import annotations

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.similarity import data_type_match
from skumapper.agents.mapping.strategies.base import ThreadedStrategy
from skumapper.models.mapping import ExactMetadata, FieldMapping, StrategyTag

EXACT_CONFIDENCE = 95


class ExactStrategy(ThreadedStrategy):
    tag = StrategyTag.EXACT

    def match_fields(self, context: MappingContext) -> list[FieldMapping]:
        mappings: list[FieldMapping] = []
        for source in context.source_fields:
            name = source.name.lower()
            target = next((t for t in context.schema if t.name.lower() == name), None)
            if target is None:
                continue
            mappings.append(FieldMapping(
                source_field=source.name,
                target_field=target.name,
                confidence=EXACT_CONFIDENCE,
                strategy=self.tag,
                reasoning="Exact field name match",
                metadata=ExactMetadata(data_type_match=data_type_match(source, target)),
            ))
        return mappings
