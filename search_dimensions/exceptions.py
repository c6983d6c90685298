"""
Typed exception hierarchy for search dimensions.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from SearchDimensionsError:

    SearchDimensionsError (base)
    |
    +-- ConfigurationError
    |   +-- UnknownDimensionKindError
    |   +-- RegistryFrozenError
    |
    +-- InvalidPathError
    |
    +-- UnknownFieldError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Dimension declared without a field, bad
                |                             | option value, malformed config document
                | UNKNOWN_DIMENSION_KIND      | Kind name not in the closed variant set
                | REGISTRY_FROZEN             | Registration after the registry froze
----------------|-----------------------------|-----------------------------------------
Path            | INVALID_PATH                | Hierarchical path depth is not a
                |                             | non-negative integer
----------------|-----------------------------|-----------------------------------------
Lookup          | UNKNOWN_FIELD               | Field not registered for the model type

===============================================================================
HANDLING PATTERNS
===============================================================================

All of these are programming or input errors. They are raised synchronously
as soon as they are detected and are never retried. A missing facet for a
field or a missing parameter is NOT an error; both mean "unconstrained".

    try:
        values = registry.values_from_params(Organization, request.args)
    except InvalidPathError as e:
        return error_response(code=e.code, path=e.path)

Every exception stores its context as attributes so that the structured
log formatter can emit them as ``exc_<name>`` fields.
"""

from typing import Any


class SearchDimensionsError(Exception):
    """
    Base exception for all search dimension errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SEARCH_DIMENSIONS_ERROR"


# Configuration-related exceptions


class ConfigurationError(SearchDimensionsError):
    """A dimension or dimension set is misconfigured."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, reason: str, model_type: Any = None, field: str | None = None):
        self.reason = reason
        self.model_type = model_type_name(model_type) if model_type is not None else None
        self.field = field
        where = ""
        if self.model_type is not None:
            where = f" on {self.model_type}"
            if field:
                where += f".{field}"
        super().__init__(f"Invalid dimension configuration{where}: {reason}")


class UnknownDimensionKindError(ConfigurationError):
    """Dimension kind is not one of the supported variants."""

    code: str = "UNKNOWN_DIMENSION_KIND"

    def __init__(self, kind: str, available_kinds: list[str]):
        self.kind = kind
        self.available_kinds = available_kinds
        super().__init__(
            f"unknown dimension kind {kind!r}; expected one of {available_kinds}"
        )


class RegistryFrozenError(ConfigurationError):
    """Registration attempted after the registry was frozen."""

    code: str = "REGISTRY_FROZEN"

    def __init__(self, model_type: Any, field: str):
        super().__init__(
            "registry is frozen; dimensions must be registered during setup",
            model_type=model_type,
            field=field,
        )


# Path-related exceptions


class InvalidPathError(SearchDimensionsError):
    """Hierarchical path could not be decoded."""

    code: str = "INVALID_PATH"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid hierarchical path {path!r}: {reason}")


# Lookup-related exceptions


class UnknownFieldError(SearchDimensionsError):
    """No dimension is registered for the field on this model type."""

    code: str = "UNKNOWN_FIELD"

    def __init__(self, model_type: Any, field: str, available_fields: list[str]):
        self.model_type = model_type_name(model_type)
        self.field = field
        self.available_fields = available_fields
        super().__init__(
            f"No dimension registered for {self.model_type}.{field}. "
            f"Registered fields: {available_fields}"
        )


def model_type_name(model_type: Any) -> str:
    if isinstance(model_type, str):
        return model_type
    return getattr(model_type, "__qualname__", None) or repr(model_type)
