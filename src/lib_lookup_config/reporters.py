"""Reporter implementations and combinators.

Purpose
    Observe the outcome of every resolved field: print it, keep it, log it, or
    hide it when the key looks secret.

Contents
    - ``render_value``: text form shared by every text-producing reporter.
    - ``DiscardReporter`` / ``DISCARD``: default when no reporter is given.
    - ``FanOutReporter``: forwards each entry to several reporters.
    - ``RedactingReporter``: masks values of keys matching a pattern.
    - ``FmtReporter``: writes ``<prefix><key>=<value>`` lines to a stream.
    - ``MapReporter``: accumulates entries into a defaults-shaped mapping.
    - ``LoggingReporter``: emits entries through the package logger.

System Integration
    All classes satisfy :class:`lib_lookup_config.application.ports.Reporter`.
    Reporters never raise into the engine on their own account; failures of the
    underlying stream or logger propagate unchanged.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import Final, Iterable, TextIO

from .adapters.mapping.default import MapSource
from .application.ports import Reporter
from .observability import log_at

EMPTY_MARKER: Final[str] = "(empty)"
NOT_EMPTY_MARKER: Final[str] = "(not empty)"


def render_value(value: object) -> str:
    """Return the text form of *value* in the syntax the engine accepts back.

    Examples
    --------
    >>> render_value(None), render_value(True), render_value(b"hi"), render_value(3 + 4j)
    ('', 'true', 'aGk', '3.0,4.0')
    >>> render_value(-4)
    '-4'
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii").rstrip("=")
    if isinstance(value, complex):
        return f"{value.real},{value.imag}"
    return str(value)


class DiscardReporter:
    """Ignore every entry."""

    def report(self, key: str, value: object) -> None:
        return None


DISCARD: Final[DiscardReporter] = DiscardReporter()


class FanOutReporter:
    """Forward each entry to every wrapped reporter, in order."""

    def __init__(self, *reporters: Reporter) -> None:
        self._reporters = tuple(reporters)

    def report(self, key: str, value: object) -> None:
        for reporter in self._reporters:
            reporter.report(key, value)


class RedactingReporter:
    """Forward entries as text, masking values whose key matches *pattern*.

    Masked values become ``"(empty)"`` when their text form is empty and
    ``"(not empty)"`` otherwise, so operators can still see whether a secret
    was supplied.

    Examples
    --------
    >>> seen = MapReporter()
    >>> redacting = RedactingReporter(seen, r"SECRET")
    >>> redacting.report("API_SECRET", "hunter2")
    >>> redacting.report("EMPTY_SECRET", "")
    >>> redacting.report("PUBLIC", 1)
    >>> seen.mapping()
    {'API_SECRET': '(not empty)', 'EMPTY_SECRET': '(empty)', 'PUBLIC': '1'}
    """

    def __init__(self, reporter: Reporter, pattern: str | re.Pattern[str]) -> None:
        self._reporter = reporter
        self._pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def report(self, key: str, value: object) -> None:
        text = render_value(value)
        if self._pattern.search(key):
            text = EMPTY_MARKER if text == "" else NOT_EMPTY_MARKER
        self._reporter.report(key, text)


class FmtReporter:
    """Write one ``<prefix><key>=<value>`` line per entry to *stream*."""

    def __init__(self, stream: TextIO, prefix: str = "") -> None:
        self._stream = stream
        self._prefix = prefix

    def report(self, key: str, value: object) -> None:
        self._stream.write(f"{self._prefix}{key}={render_value(value)}\n")


class MapReporter:
    """Accumulate entries as ``key -> text``; later entries for a key win."""

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self._entries: dict[str, str] = dict(entries)

    def report(self, key: str, value: object) -> None:
        self._entries[key] = render_value(value)

    def mapping(self) -> dict[str, str]:
        """Return a copy of the accumulated entries."""

        return dict(self._entries)

    def as_source(self) -> MapSource:
        """Return a snapshot usable as a defaults source for another pass."""

        return MapSource(self._entries)


class LoggingReporter:
    """Emit a ``field_reported`` log record per entry.

    Values are included in the structured context; wrap this reporter in a
    :class:`RedactingReporter` when keys may hold secrets.
    """

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def report(self, key: str, value: object) -> None:
        log_at(self._level, "field_reported", key=key, value=render_value(value))
