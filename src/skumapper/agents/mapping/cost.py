"""Per-run spend tracking for the external reasoning service."""

from __future__ import annotations


class CostGovernor:
    """Tracks cumulative external spend for one mapping run.

    Only the external-fallback strategy writes to it, and only after its
    call has completed.
    """

    def __init__(self, ceiling: float) -> None:
        if ceiling < 0:
            raise ValueError(f"Cost ceiling must be non-negative, got {ceiling}")
        self._ceiling = ceiling
        self._spent = 0.0

    @property
    def ceiling(self) -> float:
        return self._ceiling

    @property
    def spent(self) -> float:
        return self._spent

    @property
    def remaining(self) -> float:
        return max(0.0, self._ceiling - self._spent)

    def has_budget(self) -> bool:
        return self._spent < self._ceiling

    def record(self, cost: float) -> None:
        if cost < 0:
            raise ValueError(f"Cost must be non-negative, got {cost}")
        self._spent += cost
