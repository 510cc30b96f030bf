"""The five mapping strategies, in aggregation priority order."""

from __future__ import annotations

from skumapper.agents.mapping.strategies.base import BaseStrategy, ThreadedStrategy
from skumapper.agents.mapping.strategies.exact import ExactStrategy
from skumapper.agents.mapping.strategies.external import ExternalStrategy
from skumapper.agents.mapping.strategies.fuzzy import FuzzyStrategy
from skumapper.agents.mapping.strategies.historical import HistoricalStrategy
from skumapper.agents.mapping.strategies.semantic import SemanticStrategy
from skumapper.core.protocols import ILearningStore, IModelProvider


def build_default_strategies(
    store: ILearningStore, provider: IModelProvider | None, max_tokens: int = 1500
) -> list[BaseStrategy]:
    return [
        ExactStrategy(),
        FuzzyStrategy(),
        SemanticStrategy(),
        HistoricalStrategy(store),
        ExternalStrategy(provider, max_tokens=max_tokens),
    ]


__all__ = [
    "BaseStrategy",
    "ExactStrategy",
    "ExternalStrategy",
    "FuzzyStrategy",
    "HistoricalStrategy",
    "SemanticStrategy",
    "ThreadedStrategy",
    "build_default_strategies",
]
