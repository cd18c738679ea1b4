"""Composition root for ``lib_lookup_config``.

Purpose
-------
Provide the single entry point that walks a record's tagged fields, asks the
source sequence for each key, coerces the text into the field's kind, and
notifies the reporter. It is the only module that knows all collaborators.

Contents
--------
* :func:`lookup` – populate a dataclass instance in one pass.

System Role
-----------
Connects :mod:`lib_lookup_config.domain.fields` (what to look up),
:mod:`lib_lookup_config.application.resolve` (where to look), and
:mod:`lib_lookup_config.application.coerce` (how to convert) while emitting
structured observability signals. Processing is synchronous and stops at the
first failing field; fields already set stay set.
"""

from __future__ import annotations

import dataclasses

from .application.coerce import coerce
from .application.ports import Reporter, Source
from .application.resolve import lookup_key
from .domain.errors import (
    InvalidRecordArgument,
    MissingRequiredField,
    SourceError,
    SourceLookupFailed,
    TypeCoercionFailed,
)
from .domain.fields import describe_record
from .observability import log_debug, log_error, make_event
from .reporters import DISCARD


def lookup(record: object, *sources: Source, reporter: Reporter | None = None) -> None:
    """Fill the tagged fields of *record* from *sources* in priority order.

    Why
    ----
    Applications declare once, on the dataclass, which key feeds which field;
    this call then merges command line, environment, files, and defaults with a
    predictable precedence and typed conversion.

    What
    ----
    For each tagged field in declaration order:

    1. look the key up across *sources* (first source that finds it wins);
    2. if nothing found it, fail for required fields, or report ``(key, "")``
       and leave the field untouched for optional ones;
    3. otherwise coerce the text, assign it, and report ``(key, value)``.

    Parameters
    ----------
    record:
        Mutable dataclass instance; modified in place.
    *sources:
        Objects implementing :class:`lib_lookup_config.application.ports.Source`.
    reporter:
        Observer notified once per field reaching a terminal state.

    Raises
    ------
    InvalidRecordArgument
        *record* is not a mutable dataclass instance. No field is touched.
    SourceLookupFailed
        The last source raised :class:`SourceError` for a field's key.
    MissingRequiredField
        No source supplied a value for a required field.
    TypeCoercionFailed
        A value could not be converted to the field's declared type.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_lookup_config import MapReporter, MapSource, tag
    >>> @dataclass
    ... class Service:
    ...     port: int = tag(lookup="PORT", default=0)
    ...     debug: bool = tag(lookup="DEBUG,optional", default=False)
    >>> service, seen = Service(), MapReporter()
    >>> lookup(service, MapSource({"PORT": "8080"}), reporter=seen)
    >>> service
    Service(port=8080, debug=False)
    >>> seen.mapping()
    {'PORT': '8080', 'DEBUG': ''}
    """

    _ensure_record(record)
    sink = reporter if reporter is not None else DISCARD
    for spec in describe_record(type(record)):
        try:
            raw, found = lookup_key(spec.key, sources)
        except SourceError as exc:
            log_error("lookup_failed", **make_event("engine", spec.key, {"field": spec.name, "error": str(exc)}))
            raise SourceLookupFailed(field=spec.name, key=spec.key, cause=exc) from exc

        if not found:
            if not spec.optional:
                log_error("field_missing", **make_event("engine", spec.key, {"field": spec.name}))
                raise MissingRequiredField(field=spec.name, key=spec.key)
            log_debug("field_defaulted", **make_event("engine", spec.key, {"field": spec.name}))
            sink.report(spec.key, raw)
            continue

        try:
            value = coerce(raw, spec.kind)
        except ValueError as exc:
            log_error("field_invalid", **make_event("engine", spec.key, {"field": spec.name, "error": str(exc)}))
            raise TypeCoercionFailed(field=spec.name, value=raw, target=spec.kind, reason=str(exc)) from exc
        setattr(record, spec.name, value)
        log_debug("field_resolved", **make_event("engine", spec.key, {"field": spec.name}))
        sink.report(spec.key, value)


def _ensure_record(record: object) -> None:
    """Reject anything that is not a mutable dataclass instance."""

    if record is None:
        raise InvalidRecordArgument("lookup needs a dataclass instance, got None")
    if isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise InvalidRecordArgument(f"lookup needs a dataclass instance, got {type(record).__name__}")
    if type(record).__dataclass_params__.frozen:  # type: ignore[attr-defined]
        raise InvalidRecordArgument(f"lookup cannot populate frozen dataclass {type(record).__name__}")


__all__ = ["lookup"]
