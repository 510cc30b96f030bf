"""SKU mapper exception hierarchy."""

from __future__ import annotations


class SkuMapperError(Exception):
    """Base exception for all SKU mapper errors."""


class MappingError(SkuMapperError):
    """Error during a field mapping run."""


class StrategyFailure(MappingError):
    """A single mapping strategy raised while proposing candidates."""

    def __init__(self, strategy: str, message: str) -> None:
        self.strategy = strategy
        super().__init__(f"Strategy {strategy} failed: {message}")


class MappingSetupError(MappingError):
    """Invalid request or schema; the run cannot start."""


class CostBudgetExceeded(SkuMapperError):
    """External call would exceed the remaining spend ceiling."""

    def __init__(self, estimated: float, ceiling: float) -> None:
        self.estimated = estimated
        self.ceiling = ceiling
        super().__init__(f"Estimated cost ${estimated:.6f} exceeds limit ${ceiling:.6f}")


class ExternalServiceError(SkuMapperError):
    """External reasoning service call failed."""


class ExternalParseError(ExternalServiceError):
    """External reasoning service returned content that is not a mapping list."""


class LearningStoreError(SkuMapperError):
    """Learning cache read or write failed."""


class CacheError(SkuMapperError):
    """Redis cache operation failed."""
