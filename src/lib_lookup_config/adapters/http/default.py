"""HTTP request adapters (WSGI).

Purpose
-------
Resolve per-request records (search filters, API options) straight from a
WSGI ``environ``: the query string and URL-encoded form body, or a JSON body.

Contents
--------
* :class:`FormSource` – query string plus ``application/x-www-form-urlencoded``
  body.
* :class:`JSONRequestSource` – top-level keys of a JSON object body.

Key behaviours
--------------
* The body is read once, on the first lookup, under the lock provided by
  :class:`lib_lookup_config.adapters.lazy.LazySource`.
* A body that cannot be read or decoded raises
  :class:`lib_lookup_config.domain.errors.InvalidFormat` on every lookup.
"""

from __future__ import annotations

import json
from typing import Any, Final, Mapping
from urllib.parse import parse_qsl

from ...domain.errors import InvalidFormat
from ..lazy import LazySource

FORM_CONTENT_TYPE: Final[str] = "application/x-www-form-urlencoded"
BODY_METHODS: Final[frozenset[str]] = frozenset({"POST", "PUT", "PATCH"})
PRESENT_VALUE: Final[str] = "1"


class FormSource(LazySource):
    """Look keys up in the form values of a WSGI request.

    Body values precede query values. A key present with only empty values
    reads as ``"1"`` so ``?debug`` can feed a boolean field; otherwise the
    first non-empty value wins.

    Examples
    --------
    >>> source = FormSource({"REQUEST_METHOD": "GET", "QUERY_STRING": "A=1&B=&D"})
    >>> source.lookup_key("A"), source.lookup_key("B"), source.lookup_key("D"), source.lookup_key("E")
    (('1', True), ('1', True), ('1', True), ('', False))
    """

    name = "form"

    def __init__(self, environ: Mapping[str, Any]) -> None:
        super().__init__()
        self._environ = environ

    def lookup_key(self, key: str) -> tuple[str, bool]:
        values = self._ensure_loaded().get(key)
        if values is None:
            return "", False
        for value in values:  # type: ignore[attr-defined]
            if value != "":
                return value, True
        return PRESENT_VALUE, True

    def _load(self) -> Mapping[str, object]:
        pairs: list[tuple[str, str]] = []
        if _method(self._environ) in BODY_METHODS and _content_type(self._environ) == FORM_CONTENT_TYPE:
            pairs.extend(_parse_form(_decode(_read_body(self._environ))))
        pairs.extend(_parse_form(self._environ.get("QUERY_STRING", "")))
        collected: dict[str, list[str]] = {}
        for key, value in pairs:
            collected.setdefault(key, []).append(value)
        return collected


class JSONRequestSource(LazySource):
    """Look keys up in the JSON object sent as the request body.

    Examples
    --------
    >>> import io
    >>> body = b'{"E1": "lorem ipsum", "B": 2}'
    >>> source = JSONRequestSource({"wsgi.input": io.BytesIO(body), "CONTENT_LENGTH": str(len(body))})
    >>> source.lookup_key("B"), source.lookup_key("E1")
    (('2', True), ('lorem ipsum', True))
    """

    name = "json_request"

    def __init__(self, environ: Mapping[str, Any]) -> None:
        super().__init__()
        self._environ = environ

    def _load(self) -> Mapping[str, object]:
        try:
            data = json.loads(_read_body(self._environ))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidFormat(f"Invalid JSON request body: {exc}") from exc
        if not isinstance(data, Mapping):
            raise InvalidFormat("JSON request body is not an object")
        return data


def _method(environ: Mapping[str, Any]) -> str:
    return str(environ.get("REQUEST_METHOD", "GET")).upper()


def _content_type(environ: Mapping[str, Any]) -> str:
    return str(environ.get("CONTENT_TYPE", "")).split(";", 1)[0].strip().lower()


def _read_body(environ: Mapping[str, Any]) -> bytes:
    """Read the request body honouring ``CONTENT_LENGTH`` when it is set."""

    stream = environ.get("wsgi.input")
    if stream is None:
        return b""
    raw_length = str(environ.get("CONTENT_LENGTH") or "").strip()
    try:
        if raw_length:
            length = int(raw_length)
            if length < 0:
                raise InvalidFormat(f"Invalid CONTENT_LENGTH {raw_length!r}")
            return stream.read(length)
        return stream.read()
    except ValueError as exc:
        raise InvalidFormat(f"Invalid CONTENT_LENGTH {raw_length!r}") from exc
    except OSError as exc:
        raise InvalidFormat(f"Cannot read request body: {exc}") from exc


def _decode(body: bytes) -> str:
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidFormat(f"Form body is not valid UTF-8: {exc}") from exc


def _parse_form(text: str) -> list[tuple[str, str]]:
    """Split ``a=1&b`` style text; keys without ``=`` get an empty value."""

    try:
        return parse_qsl(text, keep_blank_values=True)
    except ValueError as exc:
        raise InvalidFormat(f"Malformed form data: {exc}") from exc
