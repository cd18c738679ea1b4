"""Source sequence resolution.

Purpose
-------
Ask an ordered list of sources for one key and settle on a single answer.
Earlier sources take precedence; later ones act as fallbacks and defaults.

Contents
    - ``lookup_key``: public entry point.

System Role
-----------
Called once per tagged field by :func:`lib_lookup_config.core.lookup`. Free of
I/O itself; any blocking happens inside the sources it calls.
"""

from __future__ import annotations

from typing import Sequence

from ..domain.errors import SourceError
from ..observability import log_debug, make_event, source_name
from .ports import Source


def lookup_key(key: str, sources: Sequence[Source]) -> tuple[str, bool]:
    """Return the first ``(value, True)`` answer for *key* across *sources*.

    What
    ----
    Sources are tried in order. The first one that finds *key* wins and later
    sources are not consulted. A :class:`SourceError` from any source but the
    last is absorbed and the next source is tried. When nothing finds the key,
    the last source's outcome is returned verbatim, which re-raises its error
    if it had one. An empty sequence answers ``("", False)``.

    Raises
    ------
    SourceError
        Only when the final source raised it.

    Examples
    --------
    >>> from lib_lookup_config.adapters.mapping.default import MapSource
    >>> lookup_key("K", [MapSource({}), MapSource({"K": "x"}), MapSource({"K": "y"})])
    ('x', True)
    >>> lookup_key("K", [])
    ('', False)
    """

    value, found = "", False
    last = len(sources) - 1
    for index, source in enumerate(sources):
        try:
            value, found = source.lookup_key(key)
        except SourceError as exc:
            if index == last:
                raise
            log_debug("source_failed", **make_event(source_name(source), key, {"error": str(exc)}))
            value, found = "", False
            continue
        if found:
            log_debug("key_found", **make_event(source_name(source), key, {"position": index}))
            break
    return value, found
