"""Common strategy plumbing: timing and result assembly."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import ClassVar

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.similarity import mean_confidence
from skumapper.models.mapping import FieldMapping, StrategyResult, StrategyTag


def elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class BaseStrategy(ABC):
    """One independent heuristic proposing candidate mappings."""

    tag: ClassVar[StrategyTag]
    # Metered strategies report the run's external spend on their result.
    metered: ClassVar[bool] = False

    async def run(self, context: MappingContext) -> StrategyResult:
        start = time.perf_counter()
        spent_before = context.cost_governor.spent
        mappings = await self.propose(context)
        return StrategyResult(
            strategy=self.tag,
            mappings=mappings,
            confidence=mean_confidence(mappings),
            processing_time_ms=elapsed_ms(start),
            cost=context.cost_governor.spent - spent_before if self.metered else None,
        )

    @abstractmethod
    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        """Return at most one candidate per source field."""


class ThreadedStrategy(BaseStrategy):
    """Strategy whose matching is pure CPU work.

    ``match_fields`` runs in a worker thread, off the event loop that drives
    the shared deadline.
    """

    async def propose(self, context: MappingContext) -> list[FieldMapping]:
        return await asyncio.to_thread(self.match_fields, context)

    @abstractmethod
    def match_fields(self, context: MappingContext) -> list[FieldMapping]:
        ...
