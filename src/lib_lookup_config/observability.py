"""Structured logging helpers shared by the engine, adapters, and reporters.

Purpose
    Keep every emission of logging data predictable and contextual without
    forcing applications to adopt a specific logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error`` / ``log_at``: emit structured
      entries via a single private emitter.
    - ``make_event``: convenience builder for structured event payloads.
    - ``source_name``: stable label for a source instance.

System Integration
    Used by the resolution engine and source adapters so all diagnostics carry
    the same trace metadata. Values are never passed to these helpers by the
    engine, only keys and field names, so secrets stay out of the logs.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_lookup_config_trace_id", default=None)
"""Current trace identifier propagated through logging helpers.

Why
    Requests that resolve records (e.g. a web handler using ``FormSource``)
    can correlate lookup diagnostics with their own spans.
"""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_lookup_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def log_at(level: int, message: str, **fields: Any) -> None:
    """Emit a structured entry at an arbitrary *level*."""

    _emit(level, message, fields)


def make_event(
    source: str,
    key: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for lookup lifecycle events.

    Inputs
        source: Label of the source or component being observed.
        key: Lookup key associated with the event, if any.
        payload: Optional mapping with extra diagnostic detail.
    Outputs
        dict[str, Any]: Data safe to unpack into :func:`log_*` helpers.

    Examples
    --------
    >>> make_event('env', 'PORT', {'found': True})
    {'source': 'env', 'key': 'PORT', 'found': True}
    """

    event: dict[str, Any] = {"source": source, "key": key}
    if payload:
        event |= dict(payload)
    return event


def source_name(source: object) -> str:
    """Return the label used for *source* in log events.

    Adapters may define a ``name`` attribute; otherwise the class name is used.

    Examples
    --------
    >>> class Demo:
    ...     pass
    >>> source_name(Demo())
    'Demo'
    """

    name = getattr(source, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(source).__name__


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current trace identifier to the provided structured fields."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
