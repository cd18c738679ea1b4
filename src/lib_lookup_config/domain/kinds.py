"""Native kinds understood by the coercion engine.

Purpose
-------
Python has a single ``int`` and a single ``float`` type, while configuration
records frequently need width-limited values (ports fit in ``UInt16``, a byte
mask in ``UInt8``). This module publishes :data:`typing.Annotated` aliases that
carry the width as metadata so records stay plain dataclasses while the engine
still enforces ranges.

Contents
--------
* :class:`IntKind` / :class:`FloatKind` – frozen width descriptors.
* ``Int8`` … ``Int64``, ``UInt8`` … ``UInt64``, ``Float32``, ``Float64`` –
  annotated aliases used in record declarations.
* :class:`Scanner` – capability protocol for caller-defined types.
* :func:`kind_of` – reduce an annotation to the object the engine dispatches on.
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class IntKind:
    """Width-limited integer kind.

    Examples
    --------
    >>> IntKind(8).bounds
    (-128, 127)
    >>> IntKind(16, signed=False).bounds
    (0, 65535)
    >>> str(IntKind(32, signed=False))
    'uint32'
    """

    bits: int
    signed: bool = True

    @property
    def bounds(self) -> tuple[int, int]:
        if self.signed:
            half = 1 << (self.bits - 1)
            return -half, half - 1
        return 0, (1 << self.bits) - 1

    def __str__(self) -> str:
        return f"{'' if self.signed else 'u'}int{self.bits}"


@dataclass(frozen=True, slots=True)
class FloatKind:
    """Floating point kind of 32 or 64 bits."""

    bits: int

    def __str__(self) -> str:
        return f"float{self.bits}"


INT64 = IntKind(64)
FLOAT64 = FloatKind(64)

Int8 = Annotated[int, IntKind(8)]
Int16 = Annotated[int, IntKind(16)]
Int32 = Annotated[int, IntKind(32)]
Int64 = Annotated[int, INT64]
UInt8 = Annotated[int, IntKind(8, signed=False)]
UInt16 = Annotated[int, IntKind(16, signed=False)]
UInt32 = Annotated[int, IntKind(32, signed=False)]
UInt64 = Annotated[int, IntKind(64, signed=False)]
Float32 = Annotated[float, FloatKind(32)]
Float64 = Annotated[float, FLOAT64]


@runtime_checkable
class Scanner(Protocol):
    """Capability implemented by caller-defined field types.

    ``scan_token`` is a classmethod. It receives a single whitespace-free
    token and returns the parsed instance together with the number of
    characters it consumed. It raises :class:`ValueError` when the token is
    unusable. The engine rejects scans that consume nothing or leave trailing
    characters behind.

    Examples
    --------
    >>> class Level:
    ...     def __init__(self, name):
    ...         self.name = name
    ...     @classmethod
    ...     def scan_token(cls, text):
    ...         return cls(text.upper()), len(text)
    >>> isinstance(Level, Scanner)
    True
    """

    @classmethod
    def scan_token(cls, text: str) -> tuple[Any, int]:
        """Parse *text* and report how many characters were consumed."""


def kind_of(annotation: Any) -> Any:
    """Reduce a field annotation to the object the coercion engine dispatches on.

    ``Optional[X]`` and ``X | None`` unwrap to ``X``; annotated aliases carrying
    an :class:`IntKind` or :class:`FloatKind` reduce to that descriptor; plain
    ``int`` and ``float`` reduce to their 64-bit kinds. Other annotations are
    returned unchanged.

    Examples
    --------
    >>> kind_of(UInt8)
    IntKind(bits=8, signed=False)
    >>> kind_of(int | None)
    IntKind(bits=64, signed=True)
    >>> kind_of(str)
    <class 'str'>
    """

    annotation = _strip_optional(annotation)
    if typing.get_origin(annotation) is Annotated:
        for extra in annotation.__metadata__:
            if isinstance(extra, (IntKind, FloatKind)):
                return extra
        annotation = _strip_optional(typing.get_args(annotation)[0])
    if annotation is int:
        return INT64
    if annotation is float:
        return FLOAT64
    return annotation


def _strip_optional(annotation: Any) -> Any:
    """Return ``X`` for ``Optional[X]``; any other annotation is returned as-is."""

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation
