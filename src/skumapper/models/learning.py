"""Learning cache models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from skumapper.models.mapping import StrategyTag


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LearningCacheEntry(BaseModel):
    """A previously confirmed source-pattern -> target-field association."""

    source_field_pattern: str
    target_field: str
    confidence: int = Field(ge=0, le=100)
    strategy: StrategyTag
    usage_count: int = Field(default=1, ge=0)
    success_rate: int = Field(default=0, ge=0, le=100)
    last_used_at: datetime = Field(default_factory=_utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def reinforced(self) -> LearningCacheEntry:
        """Copy with one more use, success rate bumped toward 100."""
        return self.model_copy(update={
            "usage_count": self.usage_count + 1,
            "success_rate": min(100, self.success_rate + 1),
            "last_used_at": _utcnow(),
        })


class StrategyStatistics(BaseModel):
    """Aggregate view of cached mappings produced by one strategy."""

    count: int = 0
    avg_confidence: float = 0.0
    total_usage: int = 0
