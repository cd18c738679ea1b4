"""In-memory and function-backed sources.

Purpose
-------
Cover the sources that need no I/O of their own: a mapping of defaults and
adapters that lift plain lookup functions into the
:class:`lib_lookup_config.application.ports.Source` protocol.

Contents
--------
* :class:`MapSource` – defaults mapping; usually the last source in a sequence.
* :class:`PairSource` – wraps ``func(key) -> (value, found)``.
* :class:`CallableSource` – wraps ``func(key) -> value``.
* :func:`format_scalar` – text form of decoded JSON/TOML/YAML values, shared
  by the document-backed sources.
"""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Callable, Mapping

from ...domain.errors import SourceError


class MapSource:
    """Answer lookups from a fixed mapping of strings.

    The mapping is copied on construction so later mutations by the caller do
    not leak into running resolutions.

    Examples
    --------
    >>> defaults = MapSource({"PORT": "8080"})
    >>> defaults.lookup_key("PORT"), defaults.lookup_key("HOST")
    (('8080', True), ('', False))
    """

    name = "defaults"

    def __init__(self, mapping: Mapping[str, str] | None = None, **entries: str) -> None:
        data = dict(mapping or {})
        data.update(entries)
        self._data = MappingProxyType(data)

    @property
    def data(self) -> Mapping[str, str]:
        return self._data

    def lookup_key(self, key: str) -> tuple[str, bool]:
        if key in self._data:
            return self._data[key], True
        return "", False


class PairSource:
    """Adapt a function returning ``(value, found)`` and never failing.

    Examples
    --------
    >>> registry = {"A": "1"}
    >>> source = PairSource(lambda key: (registry.get(key, ""), key in registry))
    >>> source.lookup_key("A")
    ('1', True)
    """

    def __init__(self, func: Callable[[str], tuple[str, bool]], *, name: str = "pair") -> None:
        self._func = func
        self.name = name

    def lookup_key(self, key: str) -> tuple[str, bool]:
        value, found = self._func(key)
        if not found:
            return "", False
        return value, True


class CallableSource:
    """Adapt a function returning the value directly.

    ``None`` or :class:`KeyError` mean the key is absent. Exceptions whose type
    is listed in *errors* (every :class:`Exception` unless narrowed) are
    re-raised as :class:`SourceError` so the source sequence can fall back past
    them; anything else propagates unchanged.

    Examples
    --------
    >>> source = CallableSource({"A": "1"}.__getitem__)
    >>> source.lookup_key("A"), source.lookup_key("B")
    (('1', True), ('', False))
    """

    def __init__(
        self,
        func: Callable[[str], str | None],
        *,
        errors: tuple[type[Exception], ...] = (Exception,),
        name: str = "callable",
    ) -> None:
        self._func = func
        self._errors = errors
        self.name = name

    def lookup_key(self, key: str) -> tuple[str, bool]:
        try:
            value = self._func(key)
        except KeyError:
            return "", False
        except self._errors as exc:
            raise SourceError(f"{self.name} lookup of {key!r} failed: {exc}") from exc
        if value is None:
            return "", False
        return value, True


def format_scalar(value: object) -> str:
    """Render a decoded document value as lookup text.

    Strings pass through, booleans become ``true``/``false``, integral floats
    lose their fractional part, and containers become compact JSON.

    Examples
    --------
    >>> format_scalar("x"), format_scalar(True), format_scalar(2.0), format_scalar(2.5)
    ('x', 'true', '2', '2.5')
    >>> format_scalar({"a": [1, 2]})
    '{"a":[1,2]}'
    """

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def lookup_document(data: Mapping[str, object], key: str) -> tuple[str, bool]:
    """Look *key* up in a decoded document; ``null`` values read as absent."""

    value = data.get(key)
    if value is None:
        return "", False
    return format_scalar(value), True
