"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by source adapters, the resolution
engine, and consuming applications. The hierarchy lives in the domain layer so
outer layers depend on it and never the other way round.

Contents
--------
* :class:`ConfigError` – umbrella base class for every library failure.
* :class:`SourceError` – a source could not answer a lookup.
* :class:`InvalidFormat` – a backing document or request body is malformed.
* :class:`NotFound` – a backing resource (file, directory) does not exist.
* :class:`InvalidRecordArgument` – :func:`lib_lookup_config.lookup` received
  something other than a mutable dataclass instance.
* :class:`ResolutionError` – base for failures attributed to one field.
* :class:`SourceLookupFailed` / :class:`MissingRequiredField` /
  :class:`TypeCoercionFailed` – the three ways a field aborts a pass.

System Role
-----------
Adapters raise :class:`SourceError` subclasses. The source sequence resolver
absorbs them for every source but the last one; the orchestrator converts the
surviving ones into :class:`SourceLookupFailed`. Callers catch
:class:`ConfigError` to handle all library failures uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_lookup_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class SourceError(ConfigError):
    """Raised by a source when it cannot answer a lookup.

    Why
    ----
    Separates "the key is absent" (a normal ``(value, False)`` answer) from "the
    source itself is broken". Only the latter may abort a resolution pass, and
    only when it comes from the last source in the sequence.
    """


class InvalidFormat(SourceError):
    """Raised when an input artifact cannot be parsed into key/value pairs.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`), dotenv
    parsing, and WSGI request body decoding.
    """


class NotFound(SourceError):
    """Represents a missing backing resource (file, directory, etc.).

    File-backed sources raise it unless told that a missing file is acceptable.
    """


class InvalidRecordArgument(ConfigError, TypeError):
    """Raised before any field is touched when the record cannot be populated."""


class ResolutionError(ConfigError):
    """Failure attributed to a single field of the record.

    Attributes
    ----------
    field:
        Name of the dataclass field whose resolution aborted the pass.
    """

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


class SourceLookupFailed(ResolutionError):
    """The last source consulted for a field's key raised :class:`SourceError`."""

    def __init__(self, *, field: str, key: str, cause: BaseException) -> None:
        super().__init__(f"lookup for field {field!r} failed: {cause}", field=field)
        self.key = key


class MissingRequiredField(ResolutionError):
    """No source supplied a value for a field that is not optional."""

    def __init__(self, *, field: str, key: str) -> None:
        super().__init__(f"missing value for required field {field!r} (key {key!r})", field=field)
        self.key = key


class TypeCoercionFailed(ResolutionError, ValueError):
    """The raw text could not be converted into the field's declared type.

    Attributes
    ----------
    value:
        Raw text returned by the source.
    target:
        Declared type of the field.
    reason:
        Human readable explanation produced by the coercion engine.
    """

    def __init__(self, *, field: str, value: str, target: object, reason: str) -> None:
        super().__init__(
            f"value {value!r} for field {field!r} is not {type_name(target)}: {reason}",
            field=field,
        )
        self.value = value
        self.target = target
        self.reason = reason


def type_name(target: object) -> str:
    """Return a readable name for *target* used in error messages.

    Examples
    --------
    >>> type_name(int)
    'int'
    >>> type_name("uint8")
    'uint8'
    """

    if isinstance(target, type):
        return target.__name__
    return str(target)
