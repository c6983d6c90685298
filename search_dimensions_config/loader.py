"""
Configuration Loader (``search_dimensions_config.loader``).

Responsibility
--------------
Loads YAML documents and parses them into typed
``search_dimensions_config.schema`` dataclass instances.

Architecture position
---------------------
**Config layer**. Consumed by ``search_dimensions_config.load_registry``.
The core package never imports this module.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing required keys raise ``ConfigurationError`` naming the key and
  where it was expected; nothing required is silently defaulted.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or mistyped keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from search_dimensions.exceptions import ConfigurationError
from search_dimensions_config.schema import (
    CategoryDef,
    DimensionConfigurationSet,
    DimensionDef,
    ModelDimensionsDef,
    SubdivisionDef,
)

# Keys of a dimension entry that map onto DimensionDef fields; anything else
# is a variant-specific option (country_code, display_unknown_states, ...).
_DIMENSION_KEYS = frozenset({"field", "kind", "label", "param", "facet_options"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return data


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationError(f"{where}: missing required key {key!r}")
    return data[key]


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"{where}: expected a mapping, got {type(value).__name__}"
        )
    return value


def _code(value: Any, where: str) -> str:
    # YAML 1.1 reads unquoted NO or ON as a boolean and 75 as an integer
    if not isinstance(value, str):
        raise ConfigurationError(
            f"{where}: code {value!r} must be a string; quote it in the YAML document"
        )
    return value


def _name(value: Any, where: str) -> str:
    if isinstance(value, bool):
        raise ConfigurationError(
            f"{where}: name {value!r} must be a string; quote it in the YAML document"
        )
    return str(value)


def parse_dimension(data: dict[str, Any], model: str = "?") -> DimensionDef:
    """
    Parse a ``DimensionDef`` from a dict.

    Preconditions:
        - ``data`` must contain ``field``.
    Postconditions:
        - Unrecognised keys are kept in ``options`` for the dimension variant.
    """
    where = f"models.{model}.dimensions"
    data = _mapping(data, where)
    field = str(_require(data, "field", where))
    options = {k: v for k, v in data.items() if k not in _DIMENSION_KEYS}
    if "country_code" in options:
        options["country_code"] = _code(options["country_code"], f"{where}.{field}.country_code")
    return DimensionDef(
        field=field,
        kind=str(data.get("kind", "generic")),
        label=data.get("label"),
        param=data.get("param"),
        facet_options=dict(_mapping(data.get("facet_options"), f"{where}.{field}.facet_options")),
        options=options,
    )


def parse_model(name: str, data: Any) -> ModelDimensionsDef:
    """Parse a ``ModelDimensionsDef``; ``data`` is a mapping or a bare list."""
    if isinstance(data, list):
        entries = data
    else:
        entries = _mapping(data, f"models.{name}").get("dimensions") or []
    if not isinstance(entries, list):
        raise ConfigurationError(f"models.{name}.dimensions: expected a list")
    return ModelDimensionsDef(
        model=str(name),
        dimensions=tuple(parse_dimension(entry, str(name)) for entry in entries),
    )


def parse_subdivisions(data: Any) -> tuple[SubdivisionDef, ...]:
    """
    Parse subdivisions keyed by country code.

    Each subdivision is either a plain name (primary) or a mapping with
    ``name`` and optional ``primary``.
    """
    subdivisions: list[SubdivisionDef] = []
    for country_code, entries in _mapping(data, "subdivisions").items():
        country_code = _code(country_code, "subdivisions")
        where = f"subdivisions.{country_code}"
        for code, entry in _mapping(entries, where).items():
            code = _code(code, where)
            if isinstance(entry, dict):
                name = _require(entry, "name", f"{where}.{code}")
                primary = entry.get("primary", True)
                if not isinstance(primary, bool):
                    raise ConfigurationError(
                        f"{where}.{code}.primary: expected true or false, got {primary!r}"
                    )
            else:
                name, primary = entry, True
            subdivisions.append(SubdivisionDef(
                country_code=country_code.upper(),
                code=code,
                name=_name(name, f"{where}.{code}"),
                primary=primary,
            ))
    return tuple(subdivisions)


def parse_categories(data: Any) -> tuple[CategoryDef, ...]:
    """Parse categories: ``code: name`` or ``code: {name: ...}``."""
    categories: list[CategoryDef] = []
    for code, entry in _mapping(data, "categories").items():
        code = _code(code, "categories")
        if isinstance(entry, dict):
            name = _require(entry, "name", f"categories.{code}")
        else:
            name = entry
        categories.append(CategoryDef(code=code, name=_name(name, f"categories.{code}")))
    return tuple(categories)


def parse_configuration_set(data: dict[str, Any]) -> DimensionConfigurationSet:
    """
    Parse a complete ``DimensionConfigurationSet``.

    Postconditions:
        - ``checksum`` is computed over the raw document.
    """
    models = tuple(
        parse_model(name, model_data)
        for name, model_data in _mapping(data.get("models"), "models").items()
    )
    return DimensionConfigurationSet(
        version=int(data.get("version", 1)),
        models=models,
        subdivisions=parse_subdivisions(data.get("subdivisions")),
        categories=parse_categories(data.get("categories")),
        checksum=compute_checksum(data),
    )


def load_configuration_set(path: Path) -> DimensionConfigurationSet:
    """Load and parse a configuration document from ``path``."""
    return parse_configuration_set(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (deterministic).
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
