"""Parse-once support for sources backed by files or request bodies.

Purpose
-------
Several sources must read and decode their backing resource exactly once,
even when the same instance serves concurrent resolutions from many threads.
:class:`LazySource` owns that lifecycle so each adapter only implements
``_load``.

Key behaviours
--------------
* The first ``lookup_key`` call loads the resource under a
  :class:`threading.Lock`; concurrent first calls converge on one attempt.
* A failed load is remembered and re-raised on every later call, so an
  instance fails consistently for its whole life.
* Successful loads are answered from memory afterwards.
"""

from __future__ import annotations

import threading
from typing import Mapping

from ..domain.errors import SourceError
from ..observability import log_debug
from .mapping.default import lookup_document


class LazySource:
    """Base class for sources that decode their data on first use."""

    name = "lazy"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Mapping[str, object] | None = None
        self._failure: SourceError | None = None

    def lookup_key(self, key: str) -> tuple[str, bool]:
        return lookup_document(self._ensure_loaded(), key)

    @property
    def loaded(self) -> bool:
        """``True`` once a load attempt has completed, successfully or not."""

        return self._data is not None or self._failure is not None

    def _ensure_loaded(self) -> Mapping[str, object]:
        with self._lock:
            if self._failure is not None:
                raise self._failure.with_traceback(None)
            if self._data is None:
                try:
                    self._data = self._load()
                except SourceError as exc:
                    self._failure = exc
                    raise
                log_debug("source_loaded", source=self.name, key=None, keys=len(self._data))
            return self._data

    def _load(self) -> Mapping[str, object]:
        """Read and decode the backing resource; raise :class:`SourceError` on failure."""

        raise NotImplementedError
