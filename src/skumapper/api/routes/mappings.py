"""Field mapping endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from skumapper.models.learning import StrategyStatistics
from skumapper.models.mapping import ExtractedFields, MappingResult

router = APIRouter(tags=["mappings"])


@router.post("", response_model=MappingResult)
async def generate_mappings(extracted: ExtractedFields, request: Request) -> MappingResult:
    """Map uploaded columns onto the SKU schema. Failures come back with ``success: false``."""
    return await request.app.state.engine.generate_mappings(extracted)


@router.get("/statistics")
async def get_statistics(request: Request) -> dict[str, StrategyStatistics]:
    return await request.app.state.engine.get_strategy_statistics()
