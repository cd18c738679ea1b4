"""File-backed source.

Purpose
-------
Answer lookups from the top-level keys of a JSON, TOML, or YAML document. The
file is parsed once per instance, so one source can serve many records.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from ...application.ports import FileLoader
from ...domain.errors import NotFound
from ...observability import log_debug
from ..lazy import LazySource
from .structured import loader_for


class FileSource(LazySource):
    """Look keys up in a structured configuration file.

    Parameters
    ----------
    path:
        Document location. The loader is chosen by suffix unless *loader* is
        given.
    loader:
        Explicit :class:`lib_lookup_config.application.ports.FileLoader`.
    missing_ok:
        When ``True`` a missing file answers every key as absent instead of
        raising :class:`NotFound`. Handy for optional per-user overrides.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "service.json"
    >>> _ = target.write_text('{"PORT": 8080, "DEBUG": true}', encoding="utf-8")
    >>> source = FileSource(target)
    >>> source.lookup_key("PORT"), source.lookup_key("DEBUG"), source.lookup_key("HOST")
    (('8080', True), ('true', True), ('', False))
    >>> tmp.cleanup()
    """

    name = "file"

    def __init__(self, path: str | Path, *, loader: FileLoader | None = None, missing_ok: bool = False) -> None:
        super().__init__()
        self.path = str(path)
        self._loader = loader
        self._missing_ok = missing_ok

    def _load(self) -> Mapping[str, object]:
        loader = self._loader if self._loader is not None else loader_for(self.path)
        try:
            return loader.load(self.path)
        except NotFound:
            if not self._missing_ok:
                raise
            log_debug("config_file_skipped", source=self.name, key=None, path=self.path)
            return {}
