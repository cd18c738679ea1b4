"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts that source adapters and reporters must
satisfy so the resolution engine can orchestrate behaviour without depending
on concrete implementations.

Contents
--------
* :class:`Source` – answers single-key lookups.
* :class:`Reporter` – observes the terminal outcome of each field.
* :class:`FileLoader` – parses a structured document into a mapping.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Each adapter implements one
protocol so :mod:`lib_lookup_config.core` only ever talks to abstractions.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class Source(Protocol):
    """Answer a lookup for one key.

    Why
    ----
    Environment variables, argument lists, files, and HTTP requests all reduce
    to "given a key, return its text" once their I/O is hidden.

    Contract
    --------
    Return ``(value, True)`` when the key is known and ``("", False)`` when it
    is absent. Raise :class:`lib_lookup_config.domain.errors.SourceError` when
    the source itself cannot answer. Calls must be safe to issue from any
    thread.
    """

    def lookup_key(self, key: str) -> tuple[str, bool]:
        """Return ``(value, found)`` for *key*."""


@runtime_checkable
class Reporter(Protocol):
    """Observe each field that reaches a terminal state.

    Why
    ----
    Applications log, audit, or snapshot their effective configuration without
    the engine knowing where the entries go. Reporters have no error channel.
    """

    def report(self, key: str, value: object) -> None:
        """Record that *key* resolved to *value*."""


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping.

    Why
    ----
    Segregate parsing concerns (TOML/JSON/YAML) from the lazy caching performed
    by file-backed sources.
    """

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``InvalidFormat``/``NotFound``."""
