"""Environment variable adapter.

Purpose
-------
Answer lookups from the process environment. Usually placed near the top of a
source sequence so deployments can override files and defaults.

Key behaviours
--------------
* Reads :data:`os.environ` live by default, so changes made after the source
  was built are visible to later resolutions.
* Supports an optional namespace prefix (``default_env_prefix``) so a record
  tagged ``PORT`` can be fed by ``MY_APP_PORT``.
* Emits structured logging via :mod:`lib_lookup_config.observability`.
"""

from __future__ import annotations

import os
from typing import Final, Mapping

from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Why
    ----
    Namespacing prevents unrelated environment variables from leaking into the
    configuration.

    Examples
    --------
    >>> default_env_prefix('lib-lookup-config')
    'LIB_LOOKUP_CONFIG'
    """

    return slug.replace("-", "_").upper()


class EnvSource:
    """Look keys up in an environment mapping."""

    name = "env"

    def __init__(self, environ: Mapping[str, str] | None = None, *, prefix: str = "") -> None:
        """Initialise the source with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        prefix:
            Optional namespace. The source appends ``_`` if missing and looks up
            ``<prefix><key>``.
        """

        self._environ = environ if environ is not None else os.environ
        self._prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix

    def lookup_key(self, key: str) -> tuple[str, bool]:
        """Return the value of ``<prefix><key>`` if it is set.

        Examples
        --------
        >>> source = EnvSource({'DEMO_PORT': '8080'}, prefix='DEMO')
        >>> source.lookup_key('PORT')
        ('8080', True)
        >>> source.lookup_key('HOST')
        ('', False)
        """

        name = f"{self._prefix}{key}"
        value = self._environ.get(name)
        if value is None:
            return "", False
        log_debug("env_variable_found", source=self.name, key=name)
        return value, True


ENV: Final[EnvSource] = EnvSource()
"""Shared source reading the live process environment without a prefix."""
