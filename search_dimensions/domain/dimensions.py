"""
Dimensions -- facetable attributes declared on a model type.

Responsibility:
    A Dimension describes one search-index field: which request parameter
    selects it, how it is labelled, which facet options the engine receives,
    and which DimensionValue variant represents a selection on it.

Architecture position:
    Core > Domain -- pure, zero I/O. Created once when a model type is
    configured; read-only afterwards and safe to share across threads.

Invariants enforced:
    - field is required; param and label are defaulted from it exactly once,
      at construction.
    - Variant facet defaults sit beneath caller options: an explicitly
      configured option always wins.
    - The variant set is closed (DimensionKind); every kind maps to one
      Dimension class and one DimensionValue class.

Failure modes:
    - ConfigurationError when field is missing or facet_options is not a mapping.
    - UnknownDimensionKindError for a kind outside DimensionKind.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, ClassVar, Self

from search_dimensions.domain.reference import (
    CategoryCatalog,
    SubdivisionCatalog,
    SubdivisionInfo,
)
from search_dimensions.domain.search import SearchRequest
from search_dimensions.domain.values import (
    CategoryValue,
    DimensionValue,
    ExplicitlyOrderedValue,
    HierarchicalValue,
    RatingValue,
    StateValue,
)
from search_dimensions.exceptions import ConfigurationError, UnknownDimensionKindError
from search_dimensions.logging_config import get_logger

logger = get_logger("domain.dimensions")

DEFAULT_COUNTRY_CODE = "US"

_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_ID_SUFFIX = re.compile(r"_id$")


class DimensionKind(str, Enum):
    """Closed set of dimension variants."""

    GENERIC = "generic"
    STATE = "state"
    RATING = "rating"
    EXPLICITLY_ORDERED = "explicitly_ordered"
    HIERARCHICAL = "hierarchical"
    CATEGORY_HIERARCHICAL = "category_hierarchical"

    @classmethod
    def parse(cls, kind: DimensionKind | str) -> DimensionKind:
        if isinstance(kind, DimensionKind):
            return kind
        try:
            return cls(str(kind).strip().lower())
        except ValueError:
            raise UnknownDimensionKindError(
                str(kind), [k.value for k in cls]
            ) from None


def titleize(field: str) -> str:
    """``product_category`` -> ``Product Category``; a trailing ``_id`` is dropped."""
    words = _ID_SUFFIX.sub("", _CAMEL_BOUNDARY.sub(r"\1_\2", field)).replace("_", " ").split()
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


class Dimension:
    """
    Generic dimension.

    Contract:
        Values are matched by exact equality on ``field`` when selected and
        faceted with ``facet_options`` when not.

    Unrecognized construction options are ignored so that option mappings
    can be shared between variants.
    """

    kind: ClassVar[DimensionKind] = DimensionKind.GENERIC
    value_class: ClassVar[type[DimensionValue]] = DimensionValue
    default_facet_options: ClassVar[Mapping[str, Any]] = MappingProxyType({})

    def __init__(
        self,
        model_type: Any,
        *,
        field: str | None = None,
        label: str | None = None,
        param: str | None = None,
        facet_options: Mapping[str, Any] | None = None,
        **ignored: Any,
    ):
        if field is None or not str(field).strip():
            raise ConfigurationError("field is required", model_type=model_type)
        if facet_options is not None and not isinstance(facet_options, Mapping):
            raise ConfigurationError(
                f"facet_options must be a mapping, got {type(facet_options).__name__}",
                model_type=model_type,
                field=field,
            )

        self._model_type = model_type
        self._field = str(field)
        self._param = param or self._field
        self._label = label or titleize(self._field)
        self._facet_options = dict(facet_options or {})

        if ignored:
            logger.debug("dimension_options_ignored", extra={
                "field": self._field,
                "options": sorted(ignored),
            })

    @classmethod
    def from_options(cls, model_type: Any, options: Mapping[str, Any]) -> Self:
        """Build from a loosely-typed option mapping (string or enum keys)."""
        return cls(model_type, **{str(key): val for key, val in options.items()})

    @property
    def model_type(self) -> Any:
        return self._model_type

    @property
    def field(self) -> str:
        return self._field

    @property
    def param(self) -> str:
        return self._param

    @property
    def label(self) -> str:
        return self._label

    @property
    def facet_options(self) -> dict[str, Any]:
        """Variant defaults overlaid with the configured options."""
        return {**self.default_facet_options, **self._facet_options}

    def value_variant(self) -> type[DimensionValue]:
        return self.value_class

    def make_value(self, raw: Any = None) -> DimensionValue:
        return self.value_class(self, raw)

    def value_from_params(self, params: Mapping[str, Any]) -> DimensionValue:
        return self.make_value(params.get(self.param))

    def configure_search(self, request: SearchRequest, params: Mapping[str, Any]) -> None:
        self.value_from_params(params).configure_search(request)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._field} param={self._param!r}>"


class StateDimension(Dimension):
    """
    Country subdivision (state, province) dimension.

    Labels come from a SubdivisionCatalog. Outside the US every subdivision
    code is shown by default; for the US only primary (FIPS) codes are,
    unless ``display_non_fips_states`` says otherwise.
    """

    kind = DimensionKind.STATE
    value_class = StateValue

    def __init__(
        self,
        model_type: Any,
        *,
        country_code: str | None = None,
        display_unknown_states: bool = False,
        display_non_fips_states: bool | None = None,
        subdivisions: SubdivisionCatalog | None = None,
        **options: Any,
    ):
        super().__init__(model_type, **options)
        self._country_code = (country_code or DEFAULT_COUNTRY_CODE).upper().strip()
        self._display_unknown_states = bool(display_unknown_states)
        if display_non_fips_states is None:
            display_non_fips_states = self._country_code != DEFAULT_COUNTRY_CODE
        self._display_non_fips_states = bool(display_non_fips_states)
        self._subdivisions = subdivisions

    @property
    def country_code(self) -> str:
        return self._country_code

    @property
    def display_unknown_states(self) -> bool:
        return self._display_unknown_states

    @property
    def display_non_fips_states(self) -> bool:
        return self._display_non_fips_states

    @property
    def subdivisions(self) -> SubdivisionCatalog | None:
        return self._subdivisions

    @cached_property
    def country(self) -> Mapping[str, SubdivisionInfo]:
        """Subdivisions of ``country_code``, resolved on first use."""
        if self._subdivisions is None:
            logger.warning("state_dimension_without_catalog", extra={
                "field": self.field,
                "country_code": self._country_code,
            })
            return MappingProxyType({})
        return self._subdivisions.lookup(self._country_code)


class RatingDimension(Dimension):
    """Star rating; facets include zero counts and an unrated (``none``) row."""

    kind = DimensionKind.RATING
    value_class = RatingValue
    default_facet_options = MappingProxyType({"zeros": True, "extra": "none"})


class ExplicitlyOrderedDimension(Dimension):
    """Values carry their own sort index (``3:Red``); facets sort by index."""

    kind = DimensionKind.EXPLICITLY_ORDERED
    value_class = ExplicitlyOrderedValue
    default_facet_options = MappingProxyType({"sort": "index"})


class HierarchicalDimension(Dimension):
    """Tree-valued dimension using depth-prefixed paths."""

    kind = DimensionKind.HIERARCHICAL
    value_class = HierarchicalValue


class CategoryHierarchicalDimension(HierarchicalDimension):
    """Hierarchical dimension whose leaf codes are named by a CategoryCatalog."""

    kind = DimensionKind.CATEGORY_HIERARCHICAL
    value_class = CategoryValue

    def __init__(
        self,
        model_type: Any,
        *,
        categories: CategoryCatalog | None = None,
        **options: Any,
    ):
        super().__init__(model_type, **options)
        self._categories = categories

    @property
    def categories(self) -> CategoryCatalog | None:
        return self._categories


DIMENSION_CLASSES: Mapping[DimensionKind, type[Dimension]] = MappingProxyType({
    cls.kind: cls
    for cls in (
        Dimension,
        StateDimension,
        RatingDimension,
        ExplicitlyOrderedDimension,
        HierarchicalDimension,
        CategoryHierarchicalDimension,
    )
})


def dimension_class_for(kind: DimensionKind | str | type[Dimension]) -> type[Dimension]:
    """Dimension class for a kind, or the class itself when one is given."""
    if isinstance(kind, type) and issubclass(kind, Dimension):
        return kind
    return DIMENSION_CLASSES[DimensionKind.parse(kind)]


def build_dimension(
    model_type: Any,
    field: str,
    kind: DimensionKind | str | type[Dimension] = DimensionKind.GENERIC,
    options: Mapping[str, Any] | None = None,
) -> Dimension:
    """Construct the dimension variant for ``kind`` bound to ``field``."""
    merged = dict(options or {})
    merged["field"] = field
    return dimension_class_for(kind).from_options(model_type, merged)
