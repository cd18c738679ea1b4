"""Command-line argument adapter.

Purpose
-------
Let operators override any tagged field from the command line with
``<prefix>KEY=value`` arguments (for example ``-PORT=9000`` or
``--env-PORT=9000``) while leaving every other argument for the program.

Key behaviours
--------------
* ``<prefix>KEY=value`` sets ``KEY`` to ``value``; ``<prefix>KEY=`` sets it to
  the empty string.
* ``<prefix>KEY`` alone sets ``KEY`` to ``"1"`` so flags can feed ``bool`` or
  ``int`` fields.
* Arguments not starting with *prefix* are kept, in order, in
  :attr:`ArgsSource.extra_args`.
* A later occurrence of the same key overrides an earlier one.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterable, Mapping

from ...observability import log_debug

FLAG_VALUE = "1"


class ArgsSource:
    """Answer lookups from a list of program arguments.

    Examples
    --------
    >>> args = ArgsSource("-", ["-A=1", "-B=", "-D", "--A=really", "blah"])
    >>> args.lookup_key("A"), args.lookup_key("-A"), args.lookup_key("B"), args.lookup_key("D")
    (('1', True), ('really', True), ('', True), ('1', True))
    >>> args.extra_args
    ['blah']
    """

    name = "args"

    def __init__(self, prefix: str, args: Iterable[str]) -> None:
        self.prefix = prefix
        self._pattern = re.compile("^" + re.escape(prefix) + r"([^=]*)(?:(=)(.*))?$")
        self._args = tuple(args)
        data, extra = _parse(self._pattern, self._args)
        self._data: Mapping[str, str] = MappingProxyType(data)
        self._extra = extra
        log_debug("args_parsed", source=self.name, key=None, keys=sorted(data), extra=len(extra))

    @property
    def extra_args(self) -> list[str]:
        """Arguments that did not match ``<prefix>KEY[=value]``."""

        return list(self._extra)

    def lookup_key(self, key: str) -> tuple[str, bool]:
        if key in self._data:
            return self._data[key], True
        return "", False


def _parse(pattern: re.Pattern[str], args: Iterable[str]) -> tuple[dict[str, str], list[str]]:
    """Split *args* into ``key -> value`` pairs and left-over arguments."""

    data: dict[str, str] = {}
    extra: list[str] = []
    for arg in args:
        match = pattern.match(arg)
        if match is None:
            extra.append(arg)
            continue
        key, equals, value = match.groups()
        data[key] = value if equals else FLAG_VALUE
    return data, extra
