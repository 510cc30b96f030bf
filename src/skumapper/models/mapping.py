"""Source field, candidate mapping and mapping result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

DataType = Literal["string", "number", "boolean", "date"]


class StrategyTag(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    SEMANTIC = "semantic"
    HISTORICAL = "historical"
    EXTERNAL = "external"


# Higher wins when two candidates carry the same confidence.
STRATEGY_PRIORITY: dict[StrategyTag, int] = {
    StrategyTag.EXACT: 5,
    StrategyTag.FUZZY: 4,
    StrategyTag.SEMANTIC: 3,
    StrategyTag.HISTORICAL: 2,
    StrategyTag.EXTERNAL: 1,
}


class MappingRunState(StrEnum):
    IDLE = "IDLE"
    DISPATCHING = "DISPATCHING"
    AWAITING_RESULTS = "AWAITING_RESULTS"
    AGGREGATING = "AGGREGATING"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    FAILED = "FAILED"


class SourceField(BaseModel):
    """A column discovered in an uploaded file."""

    name: str = Field(min_length=1)
    data_type: DataType = "string"
    sample_values: list[Any] = Field(default_factory=list)
    null_percentage: float = Field(default=0.0, ge=0, le=100)


class ExtractedFields(BaseModel):
    """Input handed over by the field extraction step."""

    fields: list[SourceField] = Field(default_factory=list)
    sample_data: list[dict[str, Any]] = Field(default_factory=list)
    file_type: str = "csv"


# ---------------------------------------------------------------------------
# Per-strategy metadata, discriminated by ``strategy``
# ---------------------------------------------------------------------------

class ExactMetadata(BaseModel):
    strategy: Literal["exact"] = "exact"
    data_type_match: bool = False


class FuzzyMetadata(BaseModel):
    strategy: Literal["fuzzy"] = "fuzzy"
    similarity_score: float
    data_type_match: bool = False


class SemanticMetadata(BaseModel):
    strategy: Literal["semantic"] = "semantic"
    pattern_match: bool
    content_match: bool
    data_type_match: bool = False


class HistoricalMetadata(BaseModel):
    strategy: Literal["historical"] = "historical"
    historical_usage: int
    similarity_score: float
    matched_pattern: str
    data_type_match: bool = False


class ExternalMetadata(BaseModel):
    strategy: Literal["external"] = "external"
    raw_confidence: float
    data_type_match: Optional[bool] = None
    transformation_required: Optional[str] = None


MappingMetadata = Annotated[
    Union[ExactMetadata, FuzzyMetadata, SemanticMetadata, HistoricalMetadata, ExternalMetadata],
    Field(discriminator="strategy"),
]


class FieldMapping(BaseModel):
    """A proposed (source -> target) mapping with calibrated confidence."""

    source_field: str
    target_field: str
    confidence: int = Field(ge=0, le=100)
    strategy: StrategyTag
    reasoning: str = ""
    metadata: MappingMetadata

    @model_validator(mode="after")
    def _metadata_matches_strategy(self) -> FieldMapping:
        if self.metadata.strategy != self.strategy:
            raise ValueError(
                f"{self.metadata.strategy} metadata attached to a {self.strategy} mapping"
            )
        return self


class StrategyResult(BaseModel):
    """Candidates produced by one strategy in one run."""

    strategy: StrategyTag
    mappings: list[FieldMapping] = Field(default_factory=list)
    confidence: int = 0
    processing_time_ms: int = 0
    cost: Optional[float] = None


class MappingResult(BaseModel):
    """Final outcome of a mapping run. Failures are encoded, never raised."""

    success: bool
    mappings: list[FieldMapping] = Field(default_factory=list)
    unmapped_fields: list[str] = Field(default_factory=list)
    confidence: int = 0
    processing_time_ms: int = 0
    strategies_used: list[StrategyTag] = Field(default_factory=list)
    cost: float = 0.0
    error: Optional[str] = None
