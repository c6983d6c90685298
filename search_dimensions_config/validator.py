"""
Configuration Validator (``search_dimensions_config.validator``).

Responsibility
--------------
Checks a ``DimensionConfigurationSet`` before any dimension is built, so
that a bad document fails as a whole instead of half-registering.

Invariants enforced
-------------------
* Every dimension kind belongs to the closed ``DimensionKind`` set.
* Field names are unique within a model.
* State dimensions have subdivisions for their country (warning).
* Category dimensions have categories to label with (warning).
* Two dimensions of one model reading the same parameter (warning).

Failure modes
-------------
* Validation errors  -> the registry MUST NOT be built.
* Validation warnings  -> the registry is built; the document should be
  reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from search_dimensions.domain.dimensions import DEFAULT_COUNTRY_CODE, DimensionKind
from search_dimensions_config.schema import DimensionConfigurationSet


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` is True only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: DimensionConfigurationSet) -> ConfigValidationResult:
    """Validate a parsed configuration set."""
    result = ConfigValidationResult()
    kinds = {k.value for k in DimensionKind}
    countries = set(config.country_codes)

    for model in config.models:
        if not model.dimensions:
            result.add_warning(f"{model.model}: no dimensions declared")

        seen_fields: set[str] = set()
        seen_params: dict[str, str] = {}
        for dimension in model.dimensions:
            where = f"{model.model}.{dimension.field}"

            if dimension.field in seen_fields:
                result.add_error(f"{where}: field declared more than once")
            seen_fields.add(dimension.field)

            param = dimension.param or dimension.field
            if param in seen_params:
                result.add_warning(
                    f"{where}: reads parameter {param!r} already read by "
                    f"{model.model}.{seen_params[param]}"
                )
            seen_params.setdefault(param, dimension.field)

            kind = dimension.kind.strip().lower()
            if kind not in kinds:
                result.add_error(
                    f"{where}: unknown kind {dimension.kind!r}; expected one of {sorted(kinds)}"
                )
                continue

            if kind == DimensionKind.STATE.value:
                country = str(dimension.options.get("country_code") or DEFAULT_COUNTRY_CODE).upper()
                if country not in countries:
                    result.add_warning(
                        f"{where}: no subdivisions configured for country {country!r}; "
                        "labels will show raw codes"
                    )
            elif kind == DimensionKind.CATEGORY_HIERARCHICAL.value and not config.categories:
                result.add_warning(
                    f"{where}: no categories configured; labels will show raw paths"
                )

    return result
