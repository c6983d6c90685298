"""
Dimension values -- per-request values bound to a Dimension.

Responsibility:
    A DimensionValue is what a user selected (or did not select) for one
    dimension. It knows how to shape a search request for that selection,
    how to turn the engine's facet rows back into child values, and how to
    label itself for display. Each Dimension variant produces exactly one
    value variant:

        Dimension                       -> DimensionValue
        StateDimension                  -> StateValue
        RatingDimension                 -> RatingValue
        ExplicitlyOrderedDimension      -> ExplicitlyOrderedValue
        HierarchicalDimension           -> HierarchicalValue
        CategoryHierarchicalDimension   -> CategoryValue

Architecture position:
    Core > Domain -- pure, zero I/O. Search requests, search results and
    reference catalogs are borrowed for the duration of a call.

Invariants enforced:
    - has_value is true iff the raw value is present and not blank.
    - A value without has_value configures a facet-only (browse) request.
    - Values are immutable; hierarchical paths are decoded once, in the
      constructor.
    - facet_count is only set on values built from facet rows.

Failure modes:
    - InvalidPathError from HierarchicalValue construction on a malformed depth.
"""

from __future__ import annotations

import math
import re
from functools import cached_property
from typing import TYPE_CHECKING, Any, Self

from search_dimensions.domain.hierarchy_path import (
    DecodedPath,
    child_facet_prefix,
    decode_path,
    encode_path,
)
from search_dimensions.domain.reference import CategoryInfo, SubdivisionInfo
from search_dimensions.domain.search import (
    FacetRow,
    SearchRequest,
    SearchResult,
    compose_parameter_override,
)
from search_dimensions.logging_config import get_logger

if TYPE_CHECKING:
    from search_dimensions.domain.dimensions import Dimension

logger = get_logger("domain.values")

NO_RATING = "none"
STAR = "★"

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_SORT_INDEX_PREFIX = re.compile(r"^\d+:", re.ASCII)


def is_present(value: Any) -> bool:
    """True unless value is None, empty, or whitespace only."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return bool(value)
    return True


def leading_integer(value: Any) -> int:
    """Integer at the start of value, 0 when there is none."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INTEGER.match(str(value))
    return int(match.group(1)) if match else 0


class DimensionValue:
    """Generic value: filter on the raw value, or facet when unselected."""

    def __init__(
        self,
        dimension: Dimension,
        value: Any = None,
        facet_count: int | None = None,
    ):
        self._dimension = dimension
        self._value = value
        self._facet_count = facet_count

    @property
    def dimension(self) -> Dimension:
        return self._dimension

    @property
    def raw_value(self) -> Any:
        """The value exactly as supplied by a parameter or facet row."""
        return self._value

    @property
    def value(self) -> Any:
        return self._value

    @property
    def facet_count(self) -> int | None:
        return self._facet_count

    @property
    def ancestors(self) -> tuple[Self, ...]:
        return ()

    @property
    def has_value(self) -> bool:
        return is_present(self._value)

    @property
    def label(self) -> str | None:
        return self.value

    @property
    def display_eligible(self) -> bool:
        return True

    def configure_search(self, request: SearchRequest) -> None:
        if self.has_value:
            request.filter_equal_to(self.dimension.field, self.value)
        else:
            request.facet(self.dimension.field, self.dimension.facet_options)

    def facet_children(self, result: SearchResult) -> list[Self]:
        """Child values for each facet row of this dimension's field."""
        facet = result.facet(self.dimension.field)
        if facet is None:
            logger.debug("facet_missing", extra={"field": self.dimension.field})
            return []
        return [self.make_child(row) for row in facet.rows]

    def make_child(self, row: FacetRow) -> Self:
        return type(self)(self.dimension, row.value, row.count)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._dimension is other._dimension
            and self._value == other._value
            and self._facet_count == other._facet_count
        )

    def __hash__(self) -> int:
        return hash((type(self), id(self._dimension), self._value, self._facet_count))

    def __repr__(self) -> str:
        count = f", facet_count={self._facet_count}" if self._facet_count is not None else ""
        return f"{type(self).__name__}({self.dimension.field}={self._value!r}{count})"


class StateValue(DimensionValue):
    """Subdivision code labelled through the dimension's country table."""

    @property
    def subdivision(self) -> SubdivisionInfo | None:
        if not self.has_value:
            return None
        return self.dimension.country.get(self.value)

    @property
    def known(self) -> bool:
        return self.subdivision is not None

    @property
    def is_primary(self) -> bool:
        """True for standardized (FIPS) codes; unknown codes are not primary."""
        subdivision = self.subdivision
        return subdivision is not None and subdivision.is_primary

    @property
    def label(self) -> str | None:
        subdivision = self.subdivision
        if subdivision is not None:
            return subdivision.name
        return self.value

    @property
    def display_eligible(self) -> bool:
        return (
            (self.dimension.display_unknown_states or self.known)
            and (self.dimension.display_non_fips_states or self.is_primary)
        )


class RatingValue(DimensionValue):
    """Star rating; the literal ``none`` selects unrated documents."""

    @property
    def is_unrated(self) -> bool:
        return self.value is None or str(self.value) == NO_RATING

    @property
    def label(self) -> str:
        if self.is_unrated or not self.has_value:
            return "No rating"
        stars = leading_integer(self.value)
        if stars > 0:
            return STAR * stars
        return "0 stars"

    def facet_children(self, result: SearchResult) -> list[Self]:
        """Children from highest rating down, unrated last."""
        children = super().facet_children(result)
        children.sort(key=_rating_rank)
        children.reverse()
        return children

    def configure_search(self, request: SearchRequest) -> None:
        if self.value is not None and str(self.value) == NO_RATING:
            request.filter_equal_to(self.dimension.field, None)
        else:
            super().configure_search(request)


def _rating_rank(value: RatingValue) -> int:
    if value.is_unrated:
        return -1
    return leading_integer(value.value)


class ExplicitlyOrderedValue(DimensionValue):
    """Values stored as ``<sort index>:<display text>``; only the text is shown."""

    @property
    def label(self) -> str | None:
        if self.value is None:
            return None
        return _SORT_INDEX_PREFIX.sub("", str(self.value), count=1)


class HierarchicalValue(DimensionValue):
    """
    Node of a tree encoded as a depth-prefixed path.

    Selecting a node filters on its full path and, in the same request,
    facets on the children one level below it, so browsing shows the current
    selection and its sub-facets together.
    """

    def __init__(
        self,
        dimension: Dimension,
        value: Any = None,
        facet_count: int | None = None,
    ):
        # ancestors are built from an already decoded path
        if isinstance(value, DecodedPath):
            path, value = value, value.encode()
        else:
            path = decode_path(value) if is_present(value) else DecodedPath(depth=0)
        super().__init__(dimension, value, facet_count)
        self._path: DecodedPath = path
        cls = type(self)
        self._ancestors: tuple[Self, ...] = tuple(
            cls(dimension, ancestor) for ancestor in path.ancestors()
        )

    @property
    def depth(self) -> int:
        return self._path.depth

    @property
    def leaf_value(self) -> str | None:
        return self._path.leaf

    @property
    def ancestors(self) -> tuple[Self, ...]:
        return self._ancestors

    @property
    def components(self) -> list[str]:
        """Segments from the top of the tree down to this node's leaf."""
        return list(self._path.segments)

    @property
    def value(self) -> str:
        return encode_path(self.depth, self.components)

    @property
    def child_facet_prefix(self) -> str:
        return child_facet_prefix(self.depth, self.components, selected=self.has_value)

    def configure_search(self, request: SearchRequest) -> None:
        field = self.dimension.field
        if self.has_value:
            request.filter_equal_to(field, self.value)

        # facet even when selected: the children of the selection are needed
        request.facet(field, self.dimension.facet_options)

        prefix_key = f"f.{request.indexed_name(field)}.facet.prefix"
        compose_parameter_override(request, prefix_key, self.child_facet_prefix)
        logger.debug("hierarchical_facet_prefix_set", extra={
            "field": field,
            "parameter": prefix_key,
            "prefix": self.child_facet_prefix,
        })


class CategoryValue(HierarchicalValue):
    """Hierarchical value whose leaf codes name entries of a category catalog."""

    @cached_property
    def category(self) -> CategoryInfo | None:
        catalog = self.dimension.categories
        if catalog is None or self.leaf_value is None:
            return None
        return catalog.lookup(self.leaf_value)

    @property
    def label(self) -> str | None:
        if self.category is not None:
            return self.category.name
        return super().label

    def facet_children(self, result: SearchResult) -> list[Self]:
        return sorted(super().facet_children(result), key=lambda child: child.label or "")
