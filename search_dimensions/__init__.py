"""
Search Dimensions

Declares facetable dimensions on model types and translates between user
parameters, search-engine facet/filter directives and labelled facet values:
- Generic, state, rating, explicitly ordered and hierarchical dimensions
- Depth-prefixed hierarchical paths with ancestor reconstruction
- Per-model-type registries with bulk decode/configure operations
"""

__version__ = "0.1.0"
