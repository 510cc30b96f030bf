"""Inputs shared by every strategy during one mapping run."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from skumapper.agents.mapping.cost import CostGovernor
from skumapper.core.config import MappingConfig
from skumapper.models.mapping import SourceField
from skumapper.models.schema import TargetSchema


@dataclass(frozen=True)
class MappingContext:
    source_fields: list[SourceField]
    schema: TargetSchema
    config: MappingConfig
    cost_governor: CostGovernor
    sample_data: list[dict[str, Any]] = field(default_factory=list)
    file_type: str = "csv"
    started_at: float = field(default_factory=time.monotonic)

    @property
    def source_names(self) -> list[str]:
        return [f.name for f in self.source_fields]

    def remaining_seconds(self) -> float:
        """Time left before the shared strategy deadline."""
        return max(0.0, self.config.deadline_seconds - (time.monotonic() - self.started_at))
