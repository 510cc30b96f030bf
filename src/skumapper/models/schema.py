"""Target schema registry: the fixed destination fields of a SKU import."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel, ConfigDict

TargetType = Literal["string", "number", "boolean", "date"]


class TargetFieldSpec(BaseModel):
    """A destination field of the SKU table."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TargetType
    required: bool = False
    description: str = ""


class TargetSchema:
    """Ordered, read-only registry of target fields keyed by name."""

    def __init__(self, fields: tuple[TargetFieldSpec, ...]) -> None:
        specs: dict[str, TargetFieldSpec] = {}
        for spec in fields:
            if spec.name in specs:
                raise ValueError(f"Duplicate target field {spec.name!r}")
            specs[spec.name] = spec
        self._fields: Mapping[str, TargetFieldSpec] = MappingProxyType(specs)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[TargetFieldSpec]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, name: str) -> TargetFieldSpec | None:
        return self._fields.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._fields)

    def descriptions(self) -> dict[str, str]:
        """Field name -> description, in registry order."""
        return {name: spec.description for name, spec in self._fields.items()}


SKU_FIELDS = TargetSchema((
    # Core identification
    TargetFieldSpec(name="id", type="string", description="Auto-generated unique identifier"),
    TargetFieldSpec(name="name", type="string", required=True, description="Product name/title (required)"),
    TargetFieldSpec(name="slug", type="string", required=True, description="URL-friendly identifier"),
    TargetFieldSpec(name="sku", type="string", description="Stock keeping unit identifier"),
    TargetFieldSpec(name="gtin", type="string", description="Global trade item number (barcode)"),
    # Descriptions
    TargetFieldSpec(name="shortDescription", type="string", description="Brief product description"),
    TargetFieldSpec(name="longDescription", type="string", description="Detailed product description"),
    TargetFieldSpec(name="story", type="string", description="Product or brand story"),
    # Pricing (stored in cents)
    TargetFieldSpec(name="price", type="number", description="Product selling price in cents"),
    TargetFieldSpec(name="compareAtPrice", type="number", description="Original/MSRP price in cents"),
    # Inventory
    TargetFieldSpec(name="stock", type="number", description="Available stock quantity"),
    TargetFieldSpec(name="lowStockThreshold", type="number", description="Low stock alert threshold"),
    # Product attributes
    TargetFieldSpec(name="brandId", type="string", description="Brand identifier (foreign key)"),
    TargetFieldSpec(name="parentId", type="string", description="Parent product ID for variants"),
    TargetFieldSpec(name="status", type="string", description="Product status (draft, review, live, archived)"),
    TargetFieldSpec(name="isVariant", type="boolean", description="Whether this is a product variant"),
    # Timestamps (auto-generated)
    TargetFieldSpec(name="createdAt", type="date", description="Creation timestamp (auto-generated)"),
    TargetFieldSpec(name="updatedAt", type="date", description="Last update timestamp (auto-generated)"),
))
