"""Tests for the five mapping strategies."""

from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime, timezone

import pytest

from skumapper.agents.mapping.cost import CostGovernor
from skumapper.agents.mapping.strategies import (
    ExactStrategy,
    ExternalStrategy,
    FuzzyStrategy,
    HistoricalStrategy,
    SemanticStrategy,
)
from skumapper.agents.mapping.strategies.semantic import DEFAULT_RULES, SemanticRule, semantic_confidence
from skumapper.core.config import MappingConfig
from skumapper.models.learning import LearningCacheEntry
from skumapper.models.mapping import ExternalMetadata, StrategyTag
from tests.fakes import MemoryLearningStore, MockModelProvider, make_context, source


def _run(strategy, context):
    return asyncio.run(strategy.run(context))


def _entry(pattern, target, usage, strategy=StrategyTag.SEMANTIC):
    return LearningCacheEntry(
        source_field_pattern=pattern,
        target_field=target,
        confidence=80,
        strategy=strategy,
        usage_count=usage,
        success_rate=90,
        last_used_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


# ---------- exact ----------

class TestExactStrategy:
    def test_case_insensitive_match(self):
        result = _run(ExactStrategy(), make_context([source("Name"), source("SKU")]))
        assert result.strategy == StrategyTag.EXACT
        assert [(m.source_field, m.target_field, m.confidence) for m in result.mappings] == [
            ("Name", "name", 95),
            ("SKU", "sku", 95),
        ]
        assert result.confidence == 95

    def test_camel_case_target(self):
        result = _run(ExactStrategy(), make_context([source("compareatprice")]))
        assert result.mappings[0].target_field == "compareAtPrice"

    def test_no_match(self):
        result = _run(ExactStrategy(), make_context([source("internal_note")]))
        assert result.mappings == []
        assert result.confidence == 0

    def test_records_data_type_match(self):
        result = _run(ExactStrategy(), make_context([source("price", data_type="number")]))
        assert result.mappings[0].metadata.data_type_match is True

    def test_unmetered_result_has_no_cost(self):
        result = _run(ExactStrategy(), make_context([source("sku")]))
        assert result.cost is None


# ---------- fuzzy ----------

class TestFuzzyStrategy:
    def test_typo_maps_with_capped_confidence(self):
        result = _run(FuzzyStrategy(), make_context([source("pricee")]))
        mapping = result.mappings[0]
        assert mapping.target_field == "price"
        assert mapping.confidence == 71
        assert mapping.metadata.similarity_score == pytest.approx(5 / 6)
        assert mapping.reasoning == "Fuzzy string match (83% similarity)"

    def test_identical_name_capped_at_85(self):
        result = _run(FuzzyStrategy(), make_context([source("Stock")]))
        assert result.mappings[0].confidence == 85

    def test_dissimilar_names_skipped(self):
        result = _run(FuzzyStrategy(), make_context([source("internal_note")]))
        assert result.mappings == []

    def test_threshold_is_strict(self):
        config = MappingConfig(fuzzy_threshold=0.9)
        result = _run(FuzzyStrategy(), make_context([source("stok")], config=config))
        assert result.mappings == []


# ---------- semantic ----------

class TestSemanticStrategy:
    def test_pattern_and_content_clamped_to_79(self):
        result = _run(SemanticStrategy(), make_context([source("product_name", ["Blue Widget"])]))
        mapping = result.mappings[0]
        assert mapping.target_field == "name"
        assert mapping.confidence == 79
        assert mapping.metadata.pattern_match is True
        assert mapping.metadata.content_match is True

    def test_pattern_only(self):
        result = _run(SemanticStrategy(), make_context([source("UPC", null_percentage=50)]))
        mapping = result.mappings[0]
        assert mapping.target_field == "gtin"
        assert mapping.confidence == 75
        assert mapping.metadata.content_match is False

    def test_earlier_content_rule_beats_later_name_rule(self):
        strategy = SemanticStrategy()
        rule, pattern_match, content_match = strategy.match(source("qty", ["12", "7"]))
        assert rule.target_field == "sku"
        assert (pattern_match, content_match) == (False, True)

    def test_rule_order_is_priority(self):
        strategy = SemanticStrategy(rules=tuple(reversed(DEFAULT_RULES)))
        rule, pattern_match, _ = strategy.match(source("qty", ["12", "7"]))
        assert rule.target_field == "stock"
        assert pattern_match is True

    def test_free_text_note_lands_on_name_by_content(self):
        result = _run(SemanticStrategy(), make_context([source("internal_note", ["call supplier"])]))
        mapping = result.mappings[0]
        assert mapping.target_field == "name"
        assert mapping.confidence == 75
        assert (mapping.metadata.pattern_match, mapping.metadata.content_match) == (False, True)

    def test_no_rule_fires(self):
        result = _run(SemanticStrategy(), make_context([source("internal_note", ["n/a"])]))
        assert result.mappings == []

    def test_numeric_samples_hit_price_rule(self):
        rule, _, content_match = SemanticStrategy().match(source("amount_usd", [19.99, 5.5]))
        assert rule.target_field == "price"
        assert content_match is True

    def test_skips_rules_for_targets_missing_from_schema(self):
        rule = SemanticRule(
            pattern=re.compile(r"^legacy$"),
            target_field="legacyField",
            reasoning="retired",
            content_matcher=lambda values: False,
        )
        result = _run(SemanticStrategy(rules=(rule,)), make_context([source("legacy")]))
        assert result.mappings == []

    def test_confidence_formula(self):
        assert semantic_confidence(source("x", null_percentage=50), True, False) == 75
        assert semantic_confidence(source("x", null_percentage=50), False, True) == 70
        assert semantic_confidence(source("x", null_percentage=0), False, True) == 75
        assert semantic_confidence(source("x", null_percentage=0), True, True) == 79


# ---------- historical ----------

class TestHistoricalStrategy:
    def test_exact_pattern_yields_65(self):
        store = MemoryLearningStore([_entry("unit_cost", "price", 50)])
        result = _run(HistoricalStrategy(store), make_context([source("unit_cost")]))
        mapping = result.mappings[0]
        assert mapping.target_field == "price"
        assert mapping.confidence == 65
        assert mapping.metadata.historical_usage == 50
        assert mapping.metadata.matched_pattern == "unit_cost"
        assert mapping.reasoning == "Historical pattern match (used 50 times)"

    def test_near_pattern_scaled(self):
        store = MemoryLearningStore([_entry("unit_cost", "price", 50)])
        result = _run(HistoricalStrategy(store), make_context([source("Unit_Cst")]))
        assert result.mappings[0].confidence == 58

    def test_best_entry_wins(self):
        store = MemoryLearningStore([
            _entry("item_title", "name", 5),
            _entry("item_code", "sku", 9),
        ])
        result = _run(HistoricalStrategy(store), make_context([source("item_code")]))
        assert result.mappings[0].target_field == "sku"

    def test_below_threshold_skipped(self):
        store = MemoryLearningStore([_entry("unit_cost", "price", 50)])
        result = _run(HistoricalStrategy(store), make_context([source("color")]))
        assert result.mappings == []

    def test_reads_only_top_entries(self):
        store = MemoryLearningStore([
            _entry("unit_cost", "price", 1),
            _entry("msrp", "compareAtPrice", 10),
        ])
        config = MappingConfig(historical_entry_limit=1)
        result = _run(HistoricalStrategy(store), make_context([source("unit_cost")], config=config))
        assert result.mappings == []

    def test_stale_targets_filtered(self):
        store = MemoryLearningStore([_entry("vendor_ref", "retiredField", 5)])
        result = _run(HistoricalStrategy(store), make_context([source("vendor_ref")]))
        assert result.mappings == []

    def test_stale_targets_kept_when_filter_disabled(self):
        store = MemoryLearningStore([_entry("vendor_ref", "retiredField", 5)])
        config = MappingConfig(filter_stale_cache_entries=False)
        result = _run(HistoricalStrategy(store), make_context([source("vendor_ref")], config=config))
        assert result.mappings[0].target_field == "retiredField"
        assert result.mappings[0].metadata.data_type_match is False


# ---------- external ----------

RESPONSE = json.dumps({
    "mappings": [
        {"sourceField": "vendor_ref", "targetField": "sku", "confidence": 95,
         "reasoning": "Vendor reference code", "transformationRequired": "none"},
        {"sourceField": "ghost", "targetField": "sku", "confidence": 80},
        {"sourceField": "vendor_ref", "targetField": "nonexistent", "confidence": 80},
        {"sourceField": "weight", "targetField": "stock", "confidence": 20},
    ],
})


class TestExternalStrategy:
    def _fields(self):
        return [source("vendor_ref"), source("weight")]

    def test_parses_and_clamps(self):
        provider = MockModelProvider(default_response=f"Here you go:\n{RESPONSE}", cost_per_call=0.0004)
        context = make_context(self._fields())
        result = _run(ExternalStrategy(provider), context)

        assert [(m.source_field, m.target_field, m.confidence) for m in result.mappings] == [
            ("vendor_ref", "sku", 89),
        ]
        assert all(m.strategy == StrategyTag.EXTERNAL for m in result.mappings)
        assert isinstance(result.mappings[0].metadata, ExternalMetadata)
        assert result.mappings[0].metadata.raw_confidence == 95
        assert result.mappings[0].metadata.transformation_required == "none"
        assert result.cost == 0.0004
        assert context.cost_governor.spent == 0.0004

    def test_weak_raw_scores_dropped_before_rounding(self):
        provider = MockModelProvider(default_response=json.dumps({"mappings": [
            {"sourceField": "vendor_ref", "targetField": "sku", "confidence": 59.5},
            {"sourceField": "weight", "targetField": "stock", "confidence": 60},
        ]}))
        result = _run(ExternalStrategy(provider), make_context(self._fields()))
        assert [(m.source_field, m.confidence) for m in result.mappings] == [("weight", 60)]

    def test_floor_applies_under_lower_minimum(self):
        provider = MockModelProvider(default_response=RESPONSE)
        config = MappingConfig(min_confidence=10)
        result = _run(ExternalStrategy(provider), make_context(self._fields(), config=config))
        assert [(m.source_field, m.confidence) for m in result.mappings] == [
            ("vendor_ref", 89),
            ("weight", 40),
        ]

    def test_call_bounded_by_strategy_deadline(self):
        provider = MockModelProvider(default_response=RESPONSE)
        config = MappingConfig(deadline_seconds=2.0)
        _run(ExternalStrategy(provider, max_tokens=800), make_context(self._fields(), config=config))
        options = provider.call_options[0]
        assert 0 < options["timeout"] <= 2.0
        assert options["max_tokens"] == 800

    def test_prompt_contains_schema_and_fields(self):
        provider = MockModelProvider(default_response=RESPONSE)
        _run(ExternalStrategy(provider), make_context(self._fields(), sample_data=[{"vendor_ref": "V-1"}]))
        prompt = provider.calls[0][-1]["content"]
        assert "Product selling price in cents" in prompt
        assert "vendor_ref" in prompt
        assert "V-1" in prompt

    def test_sample_rows_capped(self):
        provider = MockModelProvider(default_response=RESPONSE)
        rows = [{"vendor_ref": f"ROW-{i}"} for i in range(20)]
        config = MappingConfig(sample_row_limit=2)
        _run(ExternalStrategy(provider), make_context(self._fields(), config=config, sample_data=rows))
        prompt = provider.calls[0][-1]["content"]
        assert "ROW-1" in prompt
        assert "ROW-2" not in prompt

    def test_unparseable_response_yields_nothing(self):
        provider = MockModelProvider(default_response="I cannot help with that")
        result = _run(ExternalStrategy(provider), make_context(self._fields()))
        assert result.mappings == []

    def test_malformed_mapping_list_yields_nothing(self):
        provider = MockModelProvider(default_response='{"mappings": "not-a-list"}')
        result = _run(ExternalStrategy(provider), make_context(self._fields()))
        assert result.mappings == []

    def test_skipped_when_budget_spent(self):
        provider = MockModelProvider(default_response=RESPONSE)
        governor = CostGovernor(0.001)
        governor.record(0.001)
        result = _run(ExternalStrategy(provider), make_context(self._fields(), governor=governor))
        assert result.mappings == []
        assert provider.calls == []

    def test_skipped_when_call_would_exceed_budget(self):
        provider = MockModelProvider(default_response=RESPONSE, cost_per_call=0.002)
        context = make_context(self._fields())
        result = _run(ExternalStrategy(provider), context)
        assert result.mappings == []
        assert provider.calls == []
        assert context.cost_governor.spent == 0.0

    def test_unavailable_provider_not_called(self):
        provider = MockModelProvider(default_response=RESPONSE, available=False)
        result = _run(ExternalStrategy(provider), make_context(self._fields()))
        assert result.mappings == []
        assert provider.calls == []

    def test_no_provider(self):
        result = _run(ExternalStrategy(None), make_context(self._fields()))
        assert result.mappings == []
        assert result.cost == 0.0
