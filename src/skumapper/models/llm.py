"""External reasoning service request/response models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Completion(BaseModel):
    """Text returned by the reasoning service plus metered usage."""

    content: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class SuggestedMapping(BaseModel):
    """One entry of the service's ``mappings`` array (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source_field: str = Field(alias="sourceField")
    target_field: str = Field(alias="targetField")
    confidence: float = 0
    reasoning: Optional[str] = None
    data_type_match: Optional[bool] = Field(default=None, alias="dataTypeMatch")
    transformation_required: Optional[str] = Field(default=None, alias="transformationRequired")


class SuggestedMappings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mappings: list[SuggestedMapping]
    unmapped_fields: list[Any] = Field(default_factory=list, alias="unmappedFields")
