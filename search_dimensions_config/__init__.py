"""
search_dimensions_config -- declarative dimension configuration.

Responsibility:
    Turns a YAML dimension document into a frozen ``DimensionRegistry``
    plus the reference catalogs its state and category dimensions label
    with. ``load_registry()`` is the entrypoint for applications; the
    loader and validator are building blocks.

Architecture position:
    Configuration -- sits above ``search_dimensions``. The core package
    MUST NEVER import from ``search_dimensions_config``.

Invariants enforced:
    - A document that fails validation registers nothing.
    - The returned registry is frozen (single writer, then read-only).
    - Catalogs passed in by the caller take precedence over reference data
      declared in the document.

Failure modes:
    - ``FileNotFoundError`` / ``yaml.YAMLError`` from loading.
    - ``ConfigurationError`` for structural or validation failures.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from search_dimensions.domain.dimensions import DimensionKind, dimension_class_for
from search_dimensions.domain.reference import (
    CategoryCatalog,
    CategoryInfo,
    InMemoryCategoryCatalog,
    InMemorySubdivisionCatalog,
    SubdivisionCatalog,
    SubdivisionInfo,
)
from search_dimensions.domain.registry import DimensionRegistry
from search_dimensions.exceptions import ConfigurationError
from search_dimensions.logging_config import get_logger
from search_dimensions_config.loader import load_configuration_set
from search_dimensions_config.schema import DimensionConfigurationSet, DimensionDef
from search_dimensions_config.validator import validate_configuration

logger = get_logger("config")

__all__ = [
    "build_catalogs",
    "build_registry",
    "load_registry",
]


def build_catalogs(
    config: DimensionConfigurationSet,
) -> tuple[InMemorySubdivisionCatalog, InMemoryCategoryCatalog]:
    """Reference catalogs from the document's ``subdivisions`` and ``categories``."""
    countries: dict[str, list[SubdivisionInfo]] = {}
    for subdivision in config.subdivisions:
        countries.setdefault(subdivision.country_code, []).append(
            SubdivisionInfo(
                code=subdivision.code,
                name=subdivision.name,
                is_primary=subdivision.primary,
            )
        )
    categories = InMemoryCategoryCatalog(
        CategoryInfo(code=c.code, name=c.name) for c in config.categories
    )
    return InMemorySubdivisionCatalog(countries), categories


def _dimension_options(
    dimension: DimensionDef,
    subdivisions: SubdivisionCatalog,
    categories: CategoryCatalog,
) -> dict[str, Any]:
    options: dict[str, Any] = dict(dimension.options)
    if dimension.label is not None:
        options["label"] = dimension.label
    if dimension.param is not None:
        options["param"] = dimension.param
    if dimension.facet_options:
        options["facet_options"] = dict(dimension.facet_options)

    kind = DimensionKind.parse(dimension.kind)
    if kind is DimensionKind.STATE:
        options.setdefault("subdivisions", subdivisions)
    elif kind is DimensionKind.CATEGORY_HIERARCHICAL:
        options.setdefault("categories", categories)
    return options


def build_registry(
    config: DimensionConfigurationSet,
    *,
    registry: DimensionRegistry | None = None,
    model_types: Mapping[str, Any] | None = None,
    subdivisions: SubdivisionCatalog | None = None,
    categories: CategoryCatalog | None = None,
    freeze: bool = True,
) -> DimensionRegistry:
    """
    Register every dimension declared in ``config``.

    Args:
        config: Parsed configuration set.
        registry: Registry to populate; a new one by default.
        model_types: Model name -> host model type. When given, every model
            named in the document must be present. When omitted, model
            names are used as the model types.
        subdivisions: Overrides the document's subdivision reference data.
        categories: Overrides the document's category reference data.
        freeze: Freeze the registry once populated.

    Raises:
        ConfigurationError: if validation fails or a model name cannot be
            resolved.
    """
    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ConfigurationError(
            "configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        logger.warning("dimension_config_warning", extra={"detail": warning})

    default_subdivisions, default_categories = build_catalogs(config)
    subdivisions = subdivisions if subdivisions is not None else default_subdivisions
    categories = categories if categories is not None else default_categories

    resolved: list[tuple[Any, DimensionDef]] = []
    for model in config.models:
        if model_types is None:
            model_type = model.model
        elif model.model in model_types:
            model_type = model_types[model.model]
        else:
            raise ConfigurationError(
                f"model {model.model!r} has no registered model type; "
                f"known: {sorted(model_types)}"
            )
        resolved.extend((model_type, dimension) for dimension in model.dimensions)

    registry = registry if registry is not None else DimensionRegistry()
    for model_type, dimension in resolved:
        registry.register(
            model_type,
            dimension.field,
            dimension_class_for(dimension.kind),
            **_dimension_options(dimension, subdivisions, categories),
        )

    if freeze:
        registry.freeze()

    logger.info("dimension_config_applied", extra={
        "config_version": config.version,
        "checksum": config.checksum,
        "model_count": len(config.models),
        "dimension_count": len(resolved),
    })
    return registry


def load_registry(path: Path | str, **kwargs: Any) -> DimensionRegistry:
    """Load a YAML document from ``path`` and build a frozen registry from it."""
    config = load_configuration_set(Path(path))
    return build_registry(config, **kwargs)
