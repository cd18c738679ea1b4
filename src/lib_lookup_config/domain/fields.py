"""Field metadata extraction for record dataclasses.

Purpose
-------
Turn a dataclass declaration into an ordered list of :class:`FieldSpec`
descriptors carrying the lookup key, the optionality flag, and the kind the
coercion engine dispatches on. The reflection pass runs once per record class
and is cached.

Contents
--------
* :data:`TAG_SYSTEMS` – recognised metadata entries in priority order.
* :func:`tag` – convenience wrapper around :func:`dataclasses.field`.
* :func:`extract_tag` – key/optionality extraction for one field.
* :class:`FieldSpec` / :func:`describe_record` – cached per-class descriptors.

System Role
-----------
The orchestrator in :mod:`lib_lookup_config.core` iterates the descriptors
returned by :func:`describe_record`; nothing here performs I/O.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Final, Mapping

from .errors import InvalidRecordArgument
from .kinds import kind_of

TAG_SYSTEMS: Final[tuple[tuple[str, str], ...]] = (
    ("json", "omitempty"),
    ("lookup", "optional"),
)
"""``(metadata entry, optional marker)`` pairs; the first present entry wins."""


def tag(*, json: str | None = None, lookup: str | None = None, **field_kwargs: Any) -> Any:
    """Return a :func:`dataclasses.field` carrying lookup tags in its metadata.

    Extra keyword arguments (``default``, ``default_factory``, ``repr`` …) are
    forwarded untouched. Existing ``metadata`` entries are preserved.

    Examples
    --------
    >>> from dataclasses import dataclass, fields
    >>> @dataclass
    ... class Demo:
    ...     port: int = tag(lookup="PORT,optional", default=8080)
    >>> dict(fields(Demo)[0].metadata)
    {'lookup': 'PORT,optional'}
    """

    metadata = dict(field_kwargs.pop("metadata", None) or {})
    if json is not None:
        metadata["json"] = json
    if lookup is not None:
        metadata["lookup"] = lookup
    return dataclasses.field(metadata=metadata, **field_kwargs)


def extract_tag(name: str, metadata: Mapping[str, Any]) -> tuple[str, bool, bool]:
    """Return ``(key, optional, present)`` for the field called *name*.

    Tag systems are consulted in :data:`TAG_SYSTEMS` order and only the first
    non-empty one is honoured. An empty key part falls back to *name*.

    Examples
    --------
    >>> extract_tag("a", {"lookup": "A,optional"})
    ('A', True, True)
    >>> extract_tag("c", {"json": "C,omitempty", "lookup": "OTHER"})
    ('C', True, True)
    >>> extract_tag("d", {"json": "D,optional"})
    ('D', False, True)
    >>> extract_tag("e", {"lookup": ",optional"})
    ('e', True, True)
    >>> extract_tag("f", {})
    ('f', False, False)
    """

    for entry, marker in TAG_SYSTEMS:
        raw = metadata.get(entry)
        if not isinstance(raw, str) or not raw:
            continue
        parts = raw.split(",")
        key = parts[0] or name
        optional = len(parts) > 1 and parts[1] == marker
        return key, optional, True
    return name, False, False


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Resolved description of one tagged record field.

    Attributes
    ----------
    name:
        Attribute name on the record.
    key:
        Lookup key passed to every source.
    optional:
        ``True`` when a missing value is acceptable.
    kind:
        Dispatch target for :func:`lib_lookup_config.application.coerce.coerce`.
    """

    name: str
    key: str
    optional: bool
    kind: Any


def describe_record(record_type: type) -> tuple[FieldSpec, ...]:
    """Return the tagged fields of *record_type* in declaration order.

    Untagged fields are omitted and their annotations are never evaluated.
    A tagged field whose annotation names something not visible from the
    defining module keeps the annotation text as its kind, so the failure
    surfaces when a value is coerced for it. Results are cached per class.

    Raises
    ------
    InvalidRecordArgument
        When *record_type* is not a dataclass.
    """

    try:
        return _describe(record_type)
    except TypeError as exc:
        raise InvalidRecordArgument(f"Cannot inspect fields of {record_type.__name__}: {exc}") from exc


@lru_cache(maxsize=None)
def _describe(record_type: type) -> tuple[FieldSpec, ...]:
    specs: list[FieldSpec] = []
    for item in dataclasses.fields(record_type):
        key, optional, present = extract_tag(item.name, item.metadata)
        if not present:
            continue
        specs.append(FieldSpec(item.name, key, optional, kind_of(_resolve_annotation(record_type, item))))
    return tuple(specs)


def _resolve_annotation(record_type: type, item: dataclasses.Field) -> Any:
    """Evaluate the annotation of one field in the namespace of *record_type*."""

    annotation = item.type
    if not isinstance(annotation, str):
        return annotation
    holder = type(
        f"{record_type.__name__}_{item.name}",
        (),
        {"__annotations__": {item.name: annotation}, "__module__": record_type.__module__},
    )
    try:
        hints = typing.get_type_hints(holder, localns=dict(vars(record_type)), include_extras=True)
    except (NameError, AttributeError, SyntaxError, TypeError):
        return annotation
    return hints[item.name]
