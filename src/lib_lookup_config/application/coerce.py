"""Type coercion engine.

Purpose
-------
Convert the text returned by a source into the native value of a record
field. Each supported kind has one small converter; caller-defined types plug
in through the :class:`lib_lookup_config.domain.kinds.Scanner` capability.

Contents
    - ``coerce``: public dispatcher.
    - ``_as_bytes`` / ``_as_bool`` / ``_as_int`` / ``_as_float`` /
      ``_as_complex`` / ``_scan``: per-kind converters.

System Role
-----------
Called by :func:`lib_lookup_config.core.lookup` after a source found a value.
Converters raise :class:`ValueError` with a short reason; the orchestrator
wraps it into :class:`lib_lookup_config.domain.errors.TypeCoercionFailed`.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
import struct
from typing import Any, Callable, Final

from ..domain.kinds import FLOAT64, FloatKind, IntKind

_TRUE: Final[frozenset[str]] = frozenset({"1", "t", "true"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "f", "false"})

_INT_LITERAL: Final[re.Pattern[str]] = re.compile(
    r"""
    (?P<sign>[+-]?)
    (?:
        0[xX](?P<hex>_?[0-9a-fA-F]+(?:_[0-9a-fA-F]+)*)
      | 0[oO](?P<oct>_?[0-7]+(?:_[0-7]+)*)
      | 0[bB](?P<bin>_?[01]+(?:_[01]+)*)
      | 0(?P<legacy>_?[0-7]+(?:_[0-7]+)*)
      | (?P<dec>0|[1-9][0-9]*)
    )
    """,
    re.VERBOSE,
)
_INT_BASES: Final[dict[str, int]] = {"hex": 16, "oct": 8, "bin": 2, "legacy": 8, "dec": 10}


def coerce(raw: str, kind: Any) -> Any:
    """Return *raw* converted into *kind*.

    *kind* is what :func:`lib_lookup_config.domain.kinds.kind_of` produced for
    the field annotation: a Python type, an ``IntKind``, or a ``FloatKind``.

    Raises
    ------
    ValueError
        When *raw* is not a valid literal for *kind* or *kind* is unsupported.

    Examples
    --------
    >>> from lib_lookup_config.domain.kinds import IntKind
    >>> coerce("0x1F", IntKind(8))
    31
    >>> coerce("T", bool)
    True
    >>> coerce("3,4", complex)
    (3+4j)
    >>> coerce("aGk", bytes)
    b'hi'
    """

    converter = _CONVERTERS.get(kind)
    if converter is not None:
        return converter(raw)
    if isinstance(kind, IntKind):
        return _as_int(raw, kind)
    if isinstance(kind, FloatKind):
        return _as_float(raw, kind)
    return _scan(raw, kind)


def _as_str(raw: str) -> str:
    return raw


def _as_bytes(raw: str) -> bytes:
    """Decode standard-alphabet base64; trailing padding is optional."""

    padded = raw + "=" * (-len(raw) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 data: {exc}") from exc


def _as_bytearray(raw: str) -> bytearray:
    return bytearray(_as_bytes(raw))


def _as_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError("invalid boolean literal")


def _as_int(raw: str, kind: IntKind) -> int:
    """Parse a base-prefixed integer literal and enforce the width of *kind*.

    Examples
    --------
    >>> _as_int("-0b101", IntKind(8))
    -5
    >>> _as_int("017", IntKind(8))
    15
    >>> _as_int("256", IntKind(8, signed=False))
    Traceback (most recent call last):
    ...
    ValueError: value out of range for uint8
    """

    match = _INT_LITERAL.fullmatch(raw)
    if match is None:
        raise ValueError("invalid integer literal")
    sign = match.group("sign")
    if sign and not kind.signed:
        raise ValueError(f"sign not allowed for {kind}")
    base_name = next(name for name in _INT_BASES if match.group(name) is not None)
    value = int(match.group(base_name).replace("_", ""), _INT_BASES[base_name])
    if sign == "-":
        value = -value
    low, high = kind.bounds
    if not low <= value <= high:
        raise ValueError(f"value out of range for {kind}")
    return value


def _as_float(raw: str, kind: FloatKind) -> float:
    """Parse a decimal or exponent literal; whitespace and underscores are rejected."""

    if raw != raw.strip() or "_" in raw:
        raise ValueError("invalid floating point literal")
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError("invalid floating point literal") from exc
    if math.isinf(value) and "inf" not in raw.lower():
        raise ValueError(f"value out of range for {kind}")
    if kind.bits == 32:
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise ValueError(f"value out of range for {kind}") from exc
    return value


def _as_complex(raw: str) -> complex:
    """Parse ``real,imaginary``; spaces are allowed only around the comma."""

    parts = raw.split(",")
    if len(parts) < 2:
        raise ValueError("expected 'real,imaginary' components")
    real = _as_float(parts[0].strip(), FLOAT64)
    imaginary = _as_float(parts[1].strip(), FLOAT64)
    return complex(real, imaginary)


def _scan(raw: str, kind: Any) -> Any:
    """Scan exactly one whitespace-delimited token through ``kind.scan_token``."""

    if isinstance(kind, str):
        raise ValueError(f"unresolved field type {kind!r}")
    scan = getattr(kind, "scan_token", None)
    if not callable(scan):
        raise ValueError("unsupported field type; implement scan_token to load it")
    tokens = raw.split()
    if not tokens:
        raise ValueError("expected a value, found none")
    if len(tokens) > 1:
        raise ValueError("expected a single value followed by newline")
    token = tokens[0]
    try:
        value, consumed = scan(token)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"cannot scan {token!r}: {exc}") from exc
    if consumed <= 0:
        raise ValueError("scan consumed no input")
    if consumed < len(token):
        raise ValueError(f"unexpected trailing input {token[consumed:]!r}")
    return value


_CONVERTERS: Final[dict[Any, Callable[[str], Any]]] = {
    str: _as_str,
    bytes: _as_bytes,
    bytearray: _as_bytearray,
    bool: _as_bool,
    complex: _as_complex,
}
