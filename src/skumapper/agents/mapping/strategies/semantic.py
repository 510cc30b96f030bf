"""Rule-based semantic matching on field names and sample content.

Rules are evaluated in list order and the first rule whose name pattern or
content matcher fires wins, so the order of ``DEFAULT_RULES`` is a priority
order. Reordering it changes which target a field lands on.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from skumapper.agents.mapping.context import MappingContext
from skumapper.agents.mapping.similarity import clamp, data_type_match
from skumapper.agents.mapping.strategies.base import ThreadedStrategy
from skumapper.models.mapping import FieldMapping, SemanticMetadata, SourceField, StrategyTag

BASE_CONFIDENCE = 65
PATTERN_BONUS = 10
CONTENT_BONUS = 5
COMPLETENESS_BONUS = 5
COMPLETENESS_NULL_PCT = 10
CONFIDENCE_FLOOR = 60
CONFIDENCE_CEILING = 79

_CODE = re.compile(r"[A-Z0-9\-_]+", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"\s*[-+]?(\d+(\.\d*)?|\.\d+)")
_BARCODE = re.compile(r"\d{8,14}")


def _present(values: Sequence[Any]) -> list[Any]:
    return [v for v in values if v is not None]


def _long_text(min_length: int) -> Callable[[Sequence[Any]], bool]:
    def matcher(values: Sequence[Any]) -> bool:
        return any(isinstance(v, str) and len(v) > min_length for v in values)
    return matcher


def _looks_like_code(values: Sequence[Any]) -> bool:
    return any(_CODE.fullmatch(str(v)) for v in _present(values))


def _looks_numeric(values: Sequence[Any]) -> bool:
    for v in _present(values):
        if isinstance(v, bool):
            continue
        if isinstance(v, (int, float)):
            if not math.isnan(v):
                return True
        elif _LEADING_NUMBER.match(str(v)):
            return True
    return False


def _looks_integral(values: Sequence[Any]) -> bool:
    for v in _present(values):
        if isinstance(v, bool):
            continue
        if isinstance(v, int):
            return True
        try:
            number = float(str(v).strip())
        except ValueError:
            continue
        if math.isfinite(number) and number.is_integer():
            return True
    return False


def _looks_like_barcode(values: Sequence[Any]) -> bool:
    return any(_BARCODE.fullmatch(str(v)) for v in _present(values))


@dataclass(frozen=True)
class SemanticRule:
    pattern: re.Pattern[str]
    target_field: str
    reasoning: str
    content_matcher: Callable[[Sequence[Any]], bool]


DEFAULT_RULES: tuple[SemanticRule, ...] = (
    SemanticRule(
        pattern=re.compile(r"^(product_name|productname|title|product_title|item_name)$", re.I),
        target_field="name",
        reasoning="Product name pattern match",
        content_matcher=_long_text(3),
    ),
    SemanticRule(
        pattern=re.compile(r"^(sku|product_code|item_code|part_number|model)$", re.I),
        target_field="sku",
        reasoning="SKU/product code pattern match",
        content_matcher=_looks_like_code,
    ),
    SemanticRule(
        pattern=re.compile(r"^(price|cost|amount|selling_price|unit_price)$", re.I),
        target_field="price",
        reasoning="Price field pattern match",
        content_matcher=_looks_numeric,
    ),
    SemanticRule(
        pattern=re.compile(r"^(description|desc|product_description|details)$", re.I),
        target_field="shortDescription",
        reasoning="Description field pattern match",
        content_matcher=_long_text(10),
    ),
    SemanticRule(
        pattern=re.compile(r"^(stock|inventory|quantity|qty|available)$", re.I),
        target_field="stock",
        reasoning="Stock/inventory pattern match",
        content_matcher=_looks_integral,
    ),
    SemanticRule(
        pattern=re.compile(r"^(barcode|upc|ean|gtin)$", re.I),
        target_field="gtin",
        reasoning="Barcode/GTIN pattern match",
        content_matcher=_looks_like_barcode,
    ),
)


def semantic_confidence(source: SourceField, pattern_match: bool, content_match: bool) -> int:
    confidence = BASE_CONFIDENCE
    if pattern_match:
        confidence += PATTERN_BONUS
    if content_match:
        confidence += CONTENT_BONUS
    if source.null_percentage < COMPLETENESS_NULL_PCT:
        confidence += COMPLETENESS_BONUS
    return clamp(confidence, CONFIDENCE_FLOOR, CONFIDENCE_CEILING)


class SemanticStrategy(ThreadedStrategy):
    tag = StrategyTag.SEMANTIC

    def __init__(self, rules: Sequence[SemanticRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    def match(self, source: SourceField) -> tuple[SemanticRule, bool, bool] | None:
        """First rule firing on the name or the samples, with which of the two fired."""
        name = source.name.lower()
        for rule in self._rules:
            pattern_match = rule.pattern.search(name) is not None
            content_match = rule.content_matcher(source.sample_values)
            if pattern_match or content_match:
                return rule, pattern_match, content_match
        return None

    def match_fields(self, context: MappingContext) -> list[FieldMapping]:
        mappings: list[FieldMapping] = []
        for source in context.source_fields:
            hit = self.match(source)
            if hit is None:
                continue
            rule, pattern_match, content_match = hit
            target = context.schema.get(rule.target_field)
            if target is None:
                continue
            mappings.append(FieldMapping(
                source_field=source.name,
                target_field=rule.target_field,
                confidence=semantic_confidence(source, pattern_match, content_match),
                strategy=self.tag,
                reasoning=rule.reasoning,
                metadata=SemanticMetadata(
                    pattern_match=pattern_match,
                    content_match=content_match,
                    data_type_match=data_type_match(source, target),
                ),
            ))
        return mappings
