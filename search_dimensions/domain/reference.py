"""Reference catalogs -- subdivision and category lookups used for labels."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class SubdivisionInfo:
    """A first-level subdivision (state, province, territory) of a country."""

    code: str
    name: str
    is_primary: bool = True  # FIPS-standard code for the US


@dataclass(frozen=True)
class CategoryInfo:
    """A named node of a category taxonomy, keyed by its leaf code."""

    code: str
    name: str


@runtime_checkable
class SubdivisionCatalog(Protocol):
    """Country -> known subdivisions lookup."""

    def lookup(self, country_code: str) -> Mapping[str, SubdivisionInfo]:
        """Subdivisions of ``country_code`` keyed by code; empty when unknown."""
        ...


@runtime_checkable
class CategoryCatalog(Protocol):
    """Leaf code -> category lookup."""

    def lookup(self, code: str) -> CategoryInfo | None:
        ...


class InMemorySubdivisionCatalog:
    """SubdivisionCatalog over a fixed table, normalised to upper-case country codes."""

    def __init__(self, countries: Mapping[str, Iterable[SubdivisionInfo]]):
        self._countries: dict[str, Mapping[str, SubdivisionInfo]] = {
            country.upper().strip(): MappingProxyType({s.code: s for s in subdivisions})
            for country, subdivisions in countries.items()
        }

    def lookup(self, country_code: str) -> Mapping[str, SubdivisionInfo]:
        return self._countries.get(
            (country_code or "").upper().strip(), MappingProxyType({})
        )

    def country_codes(self) -> list[str]:
        return sorted(self._countries)


class InMemoryCategoryCatalog:
    """CategoryCatalog over a fixed code -> category table."""

    def __init__(self, categories: Iterable[CategoryInfo]):
        self._categories = {c.code: c for c in categories}

    @classmethod
    def from_names(cls, names: Mapping[str, str]) -> InMemoryCategoryCatalog:
        return cls(CategoryInfo(code=code, name=name) for code, name in names.items())

    def lookup(self, code: str) -> CategoryInfo | None:
        if code is None:
            return None
        return self._categories.get(code)

    def __len__(self) -> int:
        return len(self._categories)
