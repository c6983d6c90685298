"""
DimensionConfigurationSet schema.

Defines the human-authored, reviewable source artifact for dimension
configuration. YAML documents are parsed into these types by the loader,
checked by the validator, and turned into a DimensionRegistry by
``search_dimensions_config.build_registry``.

Key distinction:
  DimensionConfigurationSet = source artifact (human-authored, versioned)
  DimensionRegistry         = runtime artifact (constructed, frozen)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Dimension declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DimensionDef:
    """One dimension declared on a model."""

    field: str
    kind: str = "generic"
    label: str | None = None
    param: str | None = None
    facet_options: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)  # variant-specific


@dataclass(frozen=True)
class ModelDimensionsDef:
    """Dimensions of one model type, in declaration order."""

    model: str
    dimensions: tuple[DimensionDef, ...] = ()


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubdivisionDef:
    """A subdivision of a country."""

    country_code: str
    code: str
    name: str
    primary: bool = True


@dataclass(frozen=True)
class CategoryDef:
    """A category name keyed by leaf code."""

    code: str
    name: str


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DimensionConfigurationSet:
    """A complete, versioned dimension configuration."""

    version: int
    models: tuple[ModelDimensionsDef, ...] = ()
    subdivisions: tuple[SubdivisionDef, ...] = ()
    categories: tuple[CategoryDef, ...] = ()
    checksum: str = ""

    def model(self, name: str) -> ModelDimensionsDef | None:
        for model in self.models:
            if model.model == name:
                return model
        return None

    @property
    def country_codes(self) -> tuple[str, ...]:
        return tuple(sorted({s.country_code for s in self.subdivisions}))
