"""
DimensionRegistry -- model type to ordered dimension map, plus model binding.

Responsibility:
    Holds the dimensions declared for each model type, in declaration order,
    and runs the bulk operations a search page needs: decode every
    dimension's value from a parameter set, and apply every dimension to a
    search request.

Architecture position:
    Core > Domain -- pure, zero I/O.

Invariants enforced:
    - Single writer, then read-only: registration happens during setup;
      after freeze() any registration raises RegistryFrozenError, and
      lookups never mutate state, so a frozen registry can be shared
      across threads without locking.
    - Re-registering a field replaces the earlier dimension in place,
      keeping its first position.

Failure modes:
    - UnknownFieldError when looking up a field that was not registered.
    - ConfigurationError / UnknownDimensionKindError from dimension construction.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from search_dimensions.domain.dimensions import (
    Dimension,
    DimensionKind,
    build_dimension,
)
from search_dimensions.domain.search import SearchRequest
from search_dimensions.domain.values import DimensionValue
from search_dimensions.exceptions import (
    ConfigurationError,
    RegistryFrozenError,
    UnknownFieldError,
    model_type_name,
)
from search_dimensions.logging_config import LogContext, get_logger

logger = get_logger("domain.registry")


class DimensionRegistry:
    """Per-model-type registry of dimensions."""

    def __init__(self) -> None:
        self._dimensions: dict[Any, dict[str, Dimension]] = {}
        self._frozen = False
        self._write_lock = threading.Lock()

    # -- setup --------------------------------------------------------------

    def register(
        self,
        model_type: Any,
        field: str,
        kind: DimensionKind | str | type[Dimension] = DimensionKind.GENERIC,
        **options: Any,
    ) -> Dimension:
        """Declare a dimension on ``model_type`` and return it."""
        dimension = build_dimension(model_type, field, kind, options)
        return self.add(dimension)

    def add(self, dimension: Dimension) -> Dimension:
        """Register an already constructed dimension."""
        with self._write_lock:
            if self._frozen:
                raise RegistryFrozenError(dimension.model_type, dimension.field)

            fields = self._dimensions.setdefault(dimension.model_type, {})
            if dimension.field in fields:
                logger.warning("dimension_replaced", extra={
                    "model_type": model_type_name(dimension.model_type),
                    "field": dimension.field,
                    "previous_kind": fields[dimension.field].kind.value,
                    "kind": dimension.kind.value,
                })
            fields[dimension.field] = dimension

        logger.debug("dimension_registered", extra={
            "model_type": model_type_name(dimension.model_type),
            "field": dimension.field,
            "kind": dimension.kind.value,
            "param": dimension.param,
        })
        return dimension

    def freeze(self) -> None:
        """Reject further registrations."""
        with self._write_lock:
            self._frozen = True
        logger.info("dimension_registry_frozen", extra={
            "model_types": [model_type_name(m) for m in self._dimensions],
            "dimension_count": sum(len(d) for d in self._dimensions.values()),
        })

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -- lookup -------------------------------------------------------------

    def dimensions_for(self, model_type: Any) -> Mapping[str, Dimension]:
        """Ordered field -> dimension view; empty for an unknown model type."""
        return MappingProxyType(dict(self._dimensions.get(model_type, {})))

    def get(self, model_type: Any, field: str) -> Dimension:
        fields = self._dimensions.get(model_type, {})
        try:
            return fields[field]
        except KeyError:
            raise UnknownFieldError(model_type, field, list(fields)) from None

    def has_dimension(self, model_type: Any, field: str) -> bool:
        return field in self._dimensions.get(model_type, {})

    def model_types(self) -> list[Any]:
        return list(self._dimensions)

    # -- bulk operations ----------------------------------------------------

    def value_from_params(
        self,
        model_type: Any,
        field: str,
        params: Mapping[str, Any],
    ) -> DimensionValue:
        return self.get(model_type, field).value_from_params(params)

    def values_from_params(
        self,
        model_type: Any,
        params: Mapping[str, Any],
    ) -> dict[str, DimensionValue]:
        """One value per registered dimension, keyed by field, in declaration order."""
        with LogContext.bind(model_type=model_type_name(model_type)):
            values: dict[str, DimensionValue] = {}
            for field, dimension in self._dimensions.get(model_type, {}).items():
                with LogContext.bind(field=field):
                    values[field] = dimension.value_from_params(params)
            logger.debug("dimension_values_decoded", extra={
                "selected": [field for field, value in values.items() if value.has_value],
            })
        return values

    def apply_all_to_search(
        self,
        model_type: Any,
        request: SearchRequest,
        params: Mapping[str, Any],
    ) -> dict[str, DimensionValue]:
        """Configure ``request`` with every dimension; returns the values used."""
        with LogContext.bind(model_type=model_type_name(model_type)):
            values = self.values_from_params(model_type, params)
            for field, value in values.items():
                with LogContext.bind(field=field):
                    value.configure_search(request)
        return values

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._dimensions


class SearchDimensionsMixin:
    """
    Class-level dimension declarations for host model classes.

        class Organization(Base, SearchDimensionsMixin):
            ...

        Organization.search_dimension("state", DimensionKind.STATE, subdivisions=catalog)
        Organization.search_dimension("rating", DimensionKind.RATING)
        Organization.configure_search(request, params)

    Each class hierarchy shares one registry (its own, unless one is passed
    with ``class Model(SearchDimensionsMixin, registry=shared)``) and each
    class owns its own set of dimensions within it.
    """

    dimension_registry: ClassVar[DimensionRegistry]

    def __init_subclass__(cls, registry: DimensionRegistry | None = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if registry is not None:
            cls.dimension_registry = registry
        elif getattr(cls, "dimension_registry", None) is None:
            cls.dimension_registry = DimensionRegistry()

    @classmethod
    def search_dimension(
        cls,
        field: str,
        kind: DimensionKind | str | type[Dimension] = DimensionKind.GENERIC,
        **options: Any,
    ) -> Dimension:
        if "model_type" in options:
            raise ConfigurationError(
                "model_type is bound by the class", model_type=cls, field=field
            )
        return cls.dimension_registry.register(cls, field, kind, **options)

    @classmethod
    def search_dimensions(cls) -> Mapping[str, Dimension]:
        return cls.dimension_registry.dimensions_for(cls)

    @classmethod
    def dimension_values_from_params(cls, params: Mapping[str, Any]) -> dict[str, DimensionValue]:
        return cls.dimension_registry.values_from_params(cls, params)

    @classmethod
    def configure_search(
        cls,
        request: SearchRequest,
        params: Mapping[str, Any],
    ) -> dict[str, DimensionValue]:
        return cls.dimension_registry.apply_all_to_search(cls, request, params)
