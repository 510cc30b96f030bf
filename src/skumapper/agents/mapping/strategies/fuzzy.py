"""Edit-distance matching of source names against target names."""

from __future__ import annotations

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.similarity import data_type_match, round_half_up, scaled_confidence, string_similarity
from skumapper.agents.mapping.strategies.base import ThreadedStrategy
from skumapper.models.mapping import FieldMapping, FuzzyMetadata, StrategyTag

FUZZY_CEILING = 85  # always below an exact match


class FuzzyStrategy(ThreadedStrategy):
    tag = StrategyTag.FUZZY

    def match_fields(self, context: MappingContext) -> list[FieldMapping]:
        threshold = context.config.fuzzy_threshold
        mappings: list[FieldMapping] = []

        for source in context.source_fields:
            name = source.name.lower()
            best_target, best_score = None, 0.0
            for target in context.schema:
                score = string_similarity(name, target.name.lower())
                if score > threshold and score > best_score:
                    best_target, best_score = target, score

            if best_target is None:
                continue

            mappings.append(FieldMapping(
                source_field=source.name,
                target_field=best_target.name,
                confidence=scaled_confidence(best_score, FUZZY_CEILING),
                strategy=self.tag,
                reasoning=f"Fuzzy string match ({round_half_up(best_score * 100)}% similarity)",
                metadata=FuzzyMetadata(
                    similarity_score=best_score,
                    data_type_match=data_type_match(source, best_target),
                ),
            ))
        return mappings
