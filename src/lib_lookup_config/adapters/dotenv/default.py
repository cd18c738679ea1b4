"""`.env` adapter.

Purpose
-------
Answer lookups from a ``.env`` file so developers can keep local overrides and
secrets next to the project without exporting them into the shell.

Contents
--------
* :class:`DotEnvSource` – lazily parses the first ``.env`` file discovered.
* Helper functions (`_iter_candidates`, `_parse_dotenv`, `_strip_quotes`) that
  perform discovery and parsing.

System Role
-----------
Usually sits between the environment and file sources in a sequence. Keys are
kept verbatim (``KEY=value`` answers lookups for ``KEY``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error
from ..lazy import LazySource


class DotEnvSource(LazySource):
    """Look keys up in the first dotenv file discovered.

    Why
    ----
    `.env` files supply secrets and developer overrides. They need
    deterministic discovery and must never be required.

    Parameters
    ----------
    path:
        Explicit dotenv file. When given, no search is performed.
    start_dir:
        Directory that seeds the upward search (defaults to the working
        directory at first lookup).
    extras:
        Additional candidate paths appended to the search order.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> _ = (Path(tmp.name) / '.env').write_text("TOKEN='secret' # local\\n", encoding='utf-8')
    >>> source = DotEnvSource(start_dir=tmp.name)
    >>> source.lookup_key('TOKEN')
    ('secret', True)
    >>> source.last_loaded_path == str(Path(tmp.name) / '.env')
    True
    >>> tmp.cleanup()
    """

    name = "dotenv"

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        start_dir: str | Path | None = None,
        extras: Iterable[str | Path] | None = None,
    ) -> None:
        super().__init__()
        self._path = Path(path) if path is not None else None
        self._start_dir = start_dir
        self._extras = [Path(p) for p in extras or []]
        self.last_loaded_path: str | None = None

    def _load(self) -> Mapping[str, object]:
        if self._path is not None:
            candidates = [self._path]
        else:
            candidates = list(_iter_candidates(self._start_dir)) + self._extras
        for candidate in candidates:
            if candidate.is_file():
                self.last_loaded_path = str(candidate)
                data = _parse_dotenv(candidate)
                log_debug("dotenv_loaded", source=self.name, key=None, path=self.last_loaded_path, keys=sorted(data))
                return data
        log_debug("dotenv_not_found", source=self.name, key=None, path=None)
        return {}


def _iter_candidates(start_dir: str | Path | None) -> Iterable[Path]:
    """Yield candidate dotenv paths walking from ``start_dir`` to filesystem root.

    Examples
    --------
    >>> next(_iter_candidates('.')).name
    '.env'
    """

    base = Path(start_dir) if start_dir else Path.cwd()
    for directory in [base, *base.parents]:
        yield directory / ".env"


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``path`` into a flat dictionary, raising ``InvalidFormat`` on malformed lines.

    ``export KEY=value`` lines are accepted; blank lines and ``#`` comments are
    skipped.
    """

    result: dict[str, str] = {}
    try:
        handle = path.open("r", encoding="utf-8")
    except OSError as exc:
        raise InvalidFormat(f"Cannot read {path}: {exc}") from exc
    with handle:
        try:
            lines = list(handle)
        except UnicodeDecodeError as exc:
            raise InvalidFormat(f"Invalid encoding in {path}: {exc}") from exc
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            log_error("dotenv_invalid_line", source="dotenv", key=None, path=str(path), line=line_number)
            raise InvalidFormat(f"Malformed line {line_number} in {path}")
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            log_error("dotenv_invalid_line", source="dotenv", key=None, path=str(path), line=line_number)
            raise InvalidFormat(f"Empty key on line {line_number} in {path}")
        result[key] = _strip_quotes(value.strip())
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    >>> _strip_quotes("'quoted' # comment")
    'quoted'
    """

    if value.startswith("#"):
        return ""
    if " #" in value and not _is_quoted(value):
        value = value.split(" #", 1)[0].strip()
    if _is_quoted(value):
        return value[1:-1]
    return value


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}
