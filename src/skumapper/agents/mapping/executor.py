"""Concurrent strategy execution under a shared deadline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.strategies.base import BaseStrategy
from skumapper.core.exceptions import StrategyFailure
from skumapper.models.mapping import StrategyResult

logger = logging.getLogger(__name__)


class StrategyExecutor:
    """Runs every strategy as its own task and collects what settles in time.

    A strategy that raises contributes nothing. Strategies still running when
    the deadline passes are cancelled and their results discarded.
    """

    def __init__(self, strategies: Sequence[BaseStrategy], deadline_seconds: float = 10.0) -> None:
        self._strategies = list(strategies)
        self._deadline = deadline_seconds

    async def _guarded(self, strategy: BaseStrategy, context: MappingContext) -> StrategyResult | None:
        try:
            return await strategy.run(context)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            failure = StrategyFailure(strategy.tag, str(exc) or exc.__class__.__name__)
            logger.warning("%s", failure, exc_info=exc)
            return None

    async def execute(self, context: MappingContext) -> list[StrategyResult]:
        if not self._strategies:
            return []

        tasks = [
            asyncio.create_task(self._guarded(s, context), name=f"strategy:{s.tag}")
            for s in self._strategies
        ]
        done, pending = await asyncio.wait(tasks, timeout=self._deadline)

        if pending:
            abandoned = [s.tag for s, t in zip(self._strategies, tasks) if t in pending]
            logger.warning(
                "Strategy deadline of %.1fs reached; abandoning %s",
                self._deadline, ", ".join(abandoned),
            )
            for task in pending:
                task.cancel()

        # Declaration order, not arrival order.
        results: list[StrategyResult] = []
        for task in tasks:
            if task in done and task.result() is not None:
                results.append(task.result())
        return results
