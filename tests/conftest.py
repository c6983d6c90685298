"""
Pytest fixtures for the search dimensions test suite.

Provides:
- A recording search request implementing the SearchRequest protocol
- Subdivision and category reference catalogs
- A fresh DimensionRegistry per test
- Structured log capture
"""

import json
import logging
from collections.abc import Mapping, MutableMapping
from io import StringIO
from typing import Any

import pytest

from search_dimensions.domain.reference import (
    CategoryInfo,
    InMemoryCategoryCatalog,
    InMemorySubdivisionCatalog,
    SubdivisionInfo,
)
from search_dimensions.domain.registry import DimensionRegistry
from search_dimensions.domain.search import ParameterAdjustment
from search_dimensions.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Search request double
# =============================================================================


class RecordingSearchRequest:
    """SearchRequest that records every directive it receives."""

    def __init__(self, indexed_names: Mapping[str, str] | None = None):
        self.filters: list[tuple[str, Any]] = []
        self.facets: list[tuple[str, dict[str, Any]]] = []
        self._indexed_names = dict(indexed_names or {})
        self._adjustment: ParameterAdjustment | None = None

    def filter_equal_to(self, field: str, value: Any) -> None:
        self.filters.append((field, value))

    def facet(self, field: str, options: Mapping[str, Any]) -> None:
        self.facets.append((field, dict(options)))

    def indexed_name(self, field: str) -> str:
        return self._indexed_names.get(field, field)

    def parameter_adjustment(self) -> ParameterAdjustment | None:
        return self._adjustment

    def adjust_parameters(self, adjustment: ParameterAdjustment) -> None:
        self._adjustment = adjustment

    def outgoing_parameters(
        self, base: MutableMapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Raw parameters as they would be sent, after the adjustment hook."""
        params = dict(base or {})
        if self._adjustment is not None:
            self._adjustment(params)
        return params

    @property
    def facet_fields(self) -> list[str]:
        return [field for field, _ in self.facets]


@pytest.fixture
def search_request() -> RecordingSearchRequest:
    return RecordingSearchRequest()


@pytest.fixture
def make_search_request():
    """Factory for requests with engine-specific indexed field names."""
    return RecordingSearchRequest


# =============================================================================
# Reference catalogs
# =============================================================================


@pytest.fixture
def subdivisions() -> InMemorySubdivisionCatalog:
    return InMemorySubdivisionCatalog({
        "US": [
            SubdivisionInfo("CA", "California"),
            SubdivisionInfo("NY", "New York"),
            SubdivisionInfo("TX", "Texas"),
            SubdivisionInfo("AE", "Armed Forces Europe", is_primary=False),
        ],
        "CA": [
            SubdivisionInfo("ON", "Ontario"),
            SubdivisionInfo("QC", "Quebec"),
        ],
    })


@pytest.fixture
def categories() -> InMemoryCategoryCatalog:
    return InMemoryCategoryCatalog([
        CategoryInfo("A", "Arts, Culture & Humanities"),
        CategoryInfo("A20", "Arts & Culture"),
        CategoryInfo("A50", "Museums"),
        CategoryInfo("B", "Education"),
        CategoryInfo("B20", "Elementary & Secondary Schools"),
        CategoryInfo("E", "Health Care"),
    ])


# =============================================================================
# Registry
# =============================================================================


@pytest.fixture
def registry() -> DimensionRegistry:
    return DimensionRegistry()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture search_dimensions logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, registry):
            registry.register(Organization, "state")
            logs = captured_logs()
            assert any(r["message"] == "dimension_registered" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("search_dimensions")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)
