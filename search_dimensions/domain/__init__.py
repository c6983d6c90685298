"""
Pure domain layer.

Dimensions, dimension values, the hierarchical path codec, the registry and
the collaborator protocols. NO dependencies on:
- the search engine client
- the host ORM
- configuration files
- I/O

Dimensions and values are immutable once constructed.
"""

from search_dimensions.domain.dimensions import (
    DIMENSION_CLASSES,
    CategoryHierarchicalDimension,
    Dimension,
    DimensionKind,
    ExplicitlyOrderedDimension,
    HierarchicalDimension,
    RatingDimension,
    StateDimension,
    build_dimension,
    dimension_class_for,
    titleize,
)
from search_dimensions.domain.hierarchy_path import (
    DecodedPath,
    decode_path,
    encode_path,
    paths_for_segments,
)
from search_dimensions.domain.reference import (
    CategoryCatalog,
    CategoryInfo,
    InMemoryCategoryCatalog,
    InMemorySubdivisionCatalog,
    SubdivisionCatalog,
    SubdivisionInfo,
)
from search_dimensions.domain.registry import DimensionRegistry, SearchDimensionsMixin
from search_dimensions.domain.search import (
    Facet,
    FacetRow,
    FacetRows,
    SearchRequest,
    SearchResult,
    StaticSearchResult,
    compose_parameter_override,
)
from search_dimensions.domain.values import (
    CategoryValue,
    DimensionValue,
    ExplicitlyOrderedValue,
    HierarchicalValue,
    RatingValue,
    StateValue,
)

__all__ = [
    # Dimensions
    "Dimension",
    "DimensionKind",
    "StateDimension",
    "RatingDimension",
    "ExplicitlyOrderedDimension",
    "HierarchicalDimension",
    "CategoryHierarchicalDimension",
    "DIMENSION_CLASSES",
    "build_dimension",
    "dimension_class_for",
    "titleize",
    # Values
    "DimensionValue",
    "StateValue",
    "RatingValue",
    "ExplicitlyOrderedValue",
    "HierarchicalValue",
    "CategoryValue",
    # Path codec
    "DecodedPath",
    "decode_path",
    "encode_path",
    "paths_for_segments",
    # Registry
    "DimensionRegistry",
    "SearchDimensionsMixin",
    # Collaborators
    "SearchRequest",
    "SearchResult",
    "Facet",
    "FacetRow",
    "FacetRows",
    "StaticSearchResult",
    "compose_parameter_override",
    # Reference catalogs
    "SubdivisionCatalog",
    "SubdivisionInfo",
    "InMemorySubdivisionCatalog",
    "CategoryCatalog",
    "CategoryInfo",
    "InMemoryCategoryCatalog",
]
