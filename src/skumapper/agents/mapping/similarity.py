"""String similarity and scoring helpers shared by the mapping strategies."""

from __future__ import annotations

import math
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

from skumapper.models.mapping import FieldMapping, SourceField
from skumapper.models.schema import TargetFieldSpec

# Target type -> source types that load into it without conversion.
TYPE_COMPATIBILITY: dict[str, tuple[str, ...]] = {
    "string": ("string", "text"),
    "number": ("number", "integer", "float", "decimal"),
    "boolean": ("boolean", "bool"),
    "date": ("date", "datetime", "timestamp"),
}


def string_similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity: ``1 - distance / max(len(a), len(b))``."""
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scaled_confidence(similarity: float, ceiling: int) -> int:
    """Map a 0..1 similarity onto a strategy's confidence band."""
    return round_half_up(similarity * ceiling)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def mean_confidence(mappings: Iterable[FieldMapping]) -> int:
    scores = [m.confidence for m in mappings]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def data_type_match(source: SourceField, target: TargetFieldSpec | None) -> bool:
    if target is None:
        return False
    return source.data_type in TYPE_COMPATIBILITY.get(target.type, ())
