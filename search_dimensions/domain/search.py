"""
Search collaborator contracts.

Responsibility:
    Declares the narrow interfaces the dimension model needs from a search
    client: configuring an outgoing request and reading facet rows back from
    an executed search. Concrete engines (Solr, Elasticsearch, ...) adapt
    themselves to these protocols; nothing here talks to an engine.

Architecture position:
    Core > Domain -- pure, zero I/O. Imported by values.py and registry.py.

Invariants enforced:
    - An outgoing parameter override never replaces a previously registered
      parameter adjustment; the previous hook runs first and the override is
      applied on top of its result (compose_parameter_override).
    - A missing facet is reported as None, never as an error.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

ParameterAdjustment = Callable[[MutableMapping[str, Any]], None]


@runtime_checkable
class SearchRequest(Protocol):
    """Outgoing search request being configured by dimension values."""

    def filter_equal_to(self, field: str, value: Any) -> None:
        """Restrict results to documents whose ``field`` equals ``value``.

        ``value`` may be None, meaning "documents with no value for field".
        """
        ...

    def facet(self, field: str, options: Mapping[str, Any]) -> None:
        """Request facet counts for ``field`` with engine-specific options."""
        ...

    def indexed_name(self, field: str) -> str:
        """Engine-level name of ``field`` as used in raw request parameters."""
        ...

    def parameter_adjustment(self) -> ParameterAdjustment | None:
        """Return the currently registered raw-parameter hook, if any."""
        ...

    def adjust_parameters(self, adjustment: ParameterAdjustment) -> None:
        """Register the hook run over raw parameters just before sending."""
        ...


@dataclass(frozen=True, slots=True)
class FacetRow:
    """One (value, count) pair of a facet result."""

    value: Any
    count: int


@runtime_checkable
class Facet(Protocol):
    """Facet counts for a single field."""

    @property
    def rows(self) -> Sequence[FacetRow]:
        ...


@runtime_checkable
class SearchResult(Protocol):
    """Executed search exposing facet results by field."""

    def facet(self, field: str) -> Facet | None:
        """Facet for ``field``, or None when the field was not faceted."""
        ...


@dataclass(frozen=True, slots=True)
class FacetRows:
    """Plain facet: an ordered tuple of rows."""

    rows: tuple[FacetRow, ...] = ()

    @classmethod
    def of(cls, pairs: Iterable[tuple[Any, int] | FacetRow]) -> FacetRows:
        rows = tuple(
            pair if isinstance(pair, FacetRow) else FacetRow(value=pair[0], count=pair[1])
            for pair in pairs
        )
        return cls(rows=rows)


class StaticSearchResult:
    """
    SearchResult backed by an in-memory mapping of field -> rows.

    Hosts wrap whatever their engine returned (already executed) so that
    dimension values can turn it into child values:

        result = StaticSearchResult({"state": [("CA", 12), ("NY", 3)]})
        children = value.facet_children(result)
    """

    def __init__(self, facets: Mapping[str, Iterable[tuple[Any, int] | FacetRow]]):
        self._facets = {field: FacetRows.of(rows) for field, rows in facets.items()}

    def facet(self, field: str) -> FacetRows | None:
        return self._facets.get(field)

    def fields(self) -> list[str]:
        return list(self._facets)


def compose_parameter_override(request: SearchRequest, key: str, value: Any) -> None:
    """
    Set a raw outgoing parameter on ``request`` without clobbering hooks.

    Any adjustment already registered on the request runs first; the
    override is written afterwards so it survives whatever that hook does.
    """
    previous = request.parameter_adjustment()

    def adjustment(params: MutableMapping[str, Any]) -> None:
        if previous is not None:
            previous(params)
        params[key] = value

    request.adjust_parameters(adjustment)
