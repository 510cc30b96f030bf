"""Prompt construction and response parsing for the external reasoning service."""

from __future__ import annotations

import json
import re
from string import Template

from pydantic import ValidationError

from skumapper.agents.mapping.context import MappingContext
from skumapper.core.exceptions import ExternalParseError
from skumapper.models.llm import SuggestedMapping, SuggestedMappings

FIELD_MAPPING_TEMPLATE_ID = "field-mapping-v1"

FIELD_MAPPING_V1 = Template("""\
You are a field mapping specialist for a product SKU management system.

TASK: Map uploaded file fields to our SKU database fields using intelligent analysis.

OUR SKU DATABASE FIELDS:
$target_fields

UPLOADED FILE ANALYSIS:
$uploaded_fields

MAPPING STRATEGY:
1. Exact name matching (confidence: 90-100)
2. Fuzzy string matching (confidence: 70-89)
3. Semantic analysis of field names (confidence: 60-79)
4. Data pattern analysis (confidence: 50-69)
5. Only map fields with confidence > 60

SPECIAL HANDLING:
- Price fields (price, compareAtPrice) are stored in CENTS
- Boolean fields should map to true/false values
- Required fields: $required_fields

RESPONSE FORMAT (JSON only):
{
  "mappings": [
    {
      "sourceField": "source_field_name",
      "targetField": "sku_field_name",
      "confidence": 85,
      "reasoning": "Brief explanation of mapping decision",
      "dataTypeMatch": true,
      "transformationRequired": "none|format|convert|calculate"
    }
  ],
  "unmappedFields": ["field1", "field2"]
}""")

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_mapping_messages(context: MappingContext) -> list[dict[str, str]]:
    """Single user message: target descriptions, source fields and a few sample rows."""
    uploaded = {
        "fields": [f.model_dump(mode="json") for f in context.source_fields],
        "sampleData": context.sample_data[: context.config.sample_row_limit],
        "fileType": context.file_type,
    }
    prompt = FIELD_MAPPING_V1.substitute(
        target_fields=json.dumps(context.schema.descriptions(), indent=2),
        uploaded_fields=json.dumps(uploaded, indent=2, default=str),
        required_fields=", ".join(t.name for t in context.schema if t.required) or "none",
    )
    return [{"role": "user", "content": prompt}]


def parse_suggestions(content: str) -> list[SuggestedMapping]:
    match = _JSON_OBJECT.search(content)
    if match is None:
        raise ExternalParseError("No JSON object in reasoning service response")
    try:
        return SuggestedMappings.model_validate_json(match.group(0)).mappings
    except ValidationError as exc:
        raise ExternalParseError(f"Malformed mapping list: {exc.error_count()} errors") from exc
