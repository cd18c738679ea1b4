"""CLI adapter for ``lib_lookup_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check what a deployment would resolve for a set of keys, using
the same source precedence and engine as the library, without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_env_prefix` – exposes :func:`default_env_prefix`.
* :func:`cli_get` – resolves keys through :func:`lib_lookup_config.lookup`.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It builds sources from options, builds
a throwaway record class with one ``str`` field per key, and lets the engine
do the rest. ``lib_cli_exit_tools`` centralises the exit code strategy.
"""

from __future__ import annotations

import io
import json
import sys
from dataclasses import make_dataclass
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.args.default import ArgsSource
from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import EnvSource
from .adapters.env.default import default_env_prefix as _default_env_prefix
from .adapters.file_loaders.source import FileSource
from .adapters.mapping.default import MapSource
from .application.ports import Reporter, Source
from .core import lookup
from .domain.fields import tag
from .reporters import FmtReporter, MapReporter, RedactingReporter

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_lookup_config"


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed configuration lookup across arguments, environment, files and defaults",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_lookup_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo("lib_lookup_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-prefix", "config-kit"])
    >>> result.output.strip()
    'CONFIG_KIT'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("keys", nargs=-1, required=True)
@click.option("--arg", "raw_args", multiple=True, help="Program argument such as -PORT=9000 (repeatable)")
@click.option("--arg-prefix", default="-", show_default=True, help="Prefix marking KEY=value arguments")
@click.option("--env/--no-env", "use_env", default=True, show_default=True, help="Consult the process environment")
@click.option("--env-prefix", default="", help="Namespace prepended to keys looked up in the environment")
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="JSON/TOML/YAML document consulted after the environment (repeatable, first wins)",
)
@click.option(
    "--dotenv",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Explicit .env file consulted after documents",
)
@click.option("--default", "defaults", multiple=True, help="Fallback value as KEY=VALUE (repeatable)")
@click.option("--optional/--required", default=False, show_default=True, help="Treat missing keys as empty")
@click.option("--redact", default=None, help="Regular expression; values of matching keys are masked")
@click.option("--line-prefix", default="", help="Text printed before each KEY=value line")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print a JSON object instead of lines")
def cli_get(
    keys: Sequence[str],
    raw_args: Sequence[str],
    arg_prefix: str,
    use_env: bool,
    env_prefix: str,
    files: Sequence[Path],
    dotenv: Optional[Path],
    defaults: Sequence[str],
    optional: bool,
    redact: Optional[str],
    line_prefix: str,
    as_json: bool,
) -> None:
    """Resolve KEYS and print what the library would load for them.

    Precedence is arguments, environment, documents (in the order given),
    dotenv file, then ``--default`` values.
    """

    sources = _build_sources(raw_args, arg_prefix, use_env, env_prefix, files, dotenv, defaults)
    record_type = make_dataclass(
        "CliKeys",
        [(f"key_{index}", str, _key_field(key, optional)) for index, key in enumerate(keys)],
    )
    record = record_type()

    collected = MapReporter()
    buffer = io.StringIO()
    sink: Reporter = collected if as_json else FmtReporter(buffer, prefix=line_prefix)
    if redact:
        sink = RedactingReporter(sink, redact)
    lookup(record, *sources, reporter=sink)

    if as_json:
        click.echo(json.dumps(collected.mapping(), indent=2))
    else:
        click.echo(buffer.getvalue(), nl=False)


def _key_field(key: str, optional: bool) -> object:
    return tag(lookup=f"{key},optional" if optional else key, default="")


def _build_sources(
    raw_args: Sequence[str],
    arg_prefix: str,
    use_env: bool,
    env_prefix: str,
    files: Sequence[Path],
    dotenv: Optional[Path],
    defaults: Sequence[str],
) -> list[Source]:
    """Assemble the source sequence in documented precedence order."""

    sources: list[Source] = []
    if raw_args:
        sources.append(ArgsSource(arg_prefix, raw_args))
    if use_env:
        sources.append(EnvSource(prefix=env_prefix))
    sources.extend(FileSource(path) for path in files)
    if dotenv is not None:
        sources.append(DotEnvSource(dotenv))
    sources.append(MapSource(_parse_defaults(defaults)))
    return sources


def _parse_defaults(values: Sequence[str]) -> dict[str, str]:
    """Split ``KEY=VALUE`` options; a missing ``=`` is a usage error."""

    parsed: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--default")
        parsed[key] = value
    return parsed


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
