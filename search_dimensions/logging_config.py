"""
Structured JSON logging for search dimensions.

Every record is emitted as one JSON object per line:

    {"ts": "...", "level": "DEBUG", "logger": "search_dimensions.domain.registry",
     "message": "dimension_values_decoded", "model_type": "Organization",
     "selected": ["state"]}

Context fields (``correlation_id``, ``model_type``, ``field``) are carried in
context variables, so they follow the current thread or task. The registry
binds ``model_type`` around its bulk operations and ``field`` around each
dimension it applies; hosts bind ``correlation_id`` per incoming search.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "search_dimensions"

CONTEXT_FIELDS: tuple[str, ...] = ("correlation_id", "model_type", "field")

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"{_LOGGER_PREFIX}_{name}", default=None)
    for name in CONTEXT_FIELDS
}


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


class LogContext:
    """Request-scoped log fields shared by every search_dimensions logger."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        model_type: str | None = None,
        field: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        for name, val in (
            ("correlation_id", correlation_id),
            ("model_type", model_type),
            ("field", field),
        ):
            if val is not None:
                _context_vars[name].set(val)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Return all non-None context fields as a dict."""
        return {
            name: val
            for name, var in _context_vars.items()
            if (val := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """
        Set fields for the duration of a ``with`` block, then restore them.

        None values and names outside CONTEXT_FIELDS are ignored.
        """
        tokens: list[tuple[ContextVar[str | None], Token]] = [
            (_context_vars[name], _context_vars[name].set(val))
            for name, val in fields.items()
            if val is not None and name in _context_vars
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """``exc_*`` fields: type, message, code and public attributes."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, val in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = val
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        # extra={...} payloads; context fields win on a name clash
        for key, val in vars(record).items():
            if key not in _RESERVED_KEYS:
                payload.setdefault(key, val)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the search_dimensions namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the search_dimensions logger (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
