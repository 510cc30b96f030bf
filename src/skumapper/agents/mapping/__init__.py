"""Multi-strategy field mapping agent."""

from __future__ import annotations

from skumapper.agents.mapping.engine import FieldMappingEngine, create_mapping_engine

__all__ = ["FieldMappingEngine", "create_mapping_engine"]
