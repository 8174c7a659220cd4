"""CLI adapter for ``xvals`` built on ``rich_click`` and ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect how the provider chain resolves values and which
objects the store materialises, without writing Python.

Contents
--------
* :func:`cli` – root group; global options describe the provider chain.
* :func:`cli_info` – distribution metadata.
* :func:`cli_value` – resolve one key.
* :func:`cli_dump` – merged key/values, optionally with the winning provider.
* :func:`cli_objects` – materialised objects as JSON or YAML.
* :func:`cli_endpoint` – one endpoint as YAML, JSON, or ``EP_*`` lines.
* :func:`main` – entry point used by ``console_scripts`` registration.

Chain options register providers in a fixed order, highest priority first:
``--set`` values, ``--config-file`` files, ``--profile`` files, ``--dotenv``
files, then the process environment (unless ``--no-env``).
"""

from __future__ import annotations

import io
import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click
import yaml

from .application.ports import Object
from .core import Context
from .domain.endpoint import ENDPOINT_DESCRIPTOR
from .domain.errors import NotFound
from .domain.objects import generic_descriptor

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

FORMAT_CHOICES: Final[tuple[str, ...]] = ("json", "yaml")
ENDPOINT_FORMAT_CHOICES: Final[tuple[str, ...]] = ("yaml", "json", "env")


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for uninstalled checkouts."""

    try:
        return metadata.version("xvals")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Inspect prioritised external values and the objects built from them",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="xvals",
    message="xvals version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Highest-priority value (repeatable)",
)
@click.option(
    "--config-file",
    "config_files",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Flat YAML/JSON/TOML values file (repeatable, earlier wins)",
)
@click.option(
    "--profile",
    "profiles",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Profile file whose current profile supplies values (repeatable)",
)
@click.option(
    "--dotenv",
    "dotenvs",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Dotenv file (repeatable)",
)
@click.option(
    "--env/--no-env",
    "use_env",
    default=True,
    show_default=True,
    help="Include the process environment as the lowest-priority source",
)
@click.option(
    "--object",
    "object_types",
    multiple=True,
    metavar="TYPE:FIELD,FIELD",
    help="Declare an extra generic object type (repeatable)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    traceback: bool,
    assignments: Sequence[str],
    config_files: Sequence[Path],
    profiles: Sequence[Path],
    dotenvs: Sequence[Path],
    use_env: bool,
    object_types: Sequence[str],
) -> None:
    """Root command storing traceback preference and the chain description."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    ctx.obj["chain"] = {
        "assignments": _parse_assignments(assignments),
        "config_files": tuple(config_files),
        "profiles": tuple(profiles),
        "dotenvs": tuple(dotenvs),
        "use_env": use_env,
        "object_types": tuple(_parse_object_type(entry) for entry in object_types),
    }
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


def _build_context(ctx: click.Context) -> Context:
    """Create a :class:`Context` from the options captured by :func:`cli`."""

    options = ctx.find_root().obj["chain"]
    context = Context()
    if options["assignments"]:
        context.with_map(options["assignments"], name="cli")
    for path in options["config_files"]:
        context.with_config_file(path)
    for path in options["profiles"]:
        context.with_profile(path)
    for path in options["dotenvs"]:
        context.with_dotenv(path)
    if options["use_env"]:
        context.with_environment()
    context.with_object(ENDPOINT_DESCRIPTOR)
    for type_tag, fields in options["object_types"]:
        context.with_object(generic_descriptor(type_tag, fields))
    return context


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("xvals")
    except metadata.PackageNotFoundError:
        click.echo("xvals (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'xvals')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("value", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.option("--default", "default", default=None, help="Printed when no provider has KEY")
@click.pass_context
def cli_value(ctx: click.Context, key: str, default: Optional[str]) -> None:
    """Print the value of KEY from the highest-priority provider that has it."""

    context = _build_context(ctx)
    if default is not None:
        click.echo(context.value_or(key, default))
        return
    try:
        click.echo(context.value(key))
    except NotFound as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("dump", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON with the provided indent size")
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include the provider that supplied each key",
)
@click.pass_context
def cli_dump(ctx: click.Context, indent: Optional[int], provenance: bool) -> None:
    """Print every resolved key/value as JSON."""

    context = _build_context(ctx)
    values = dict(sorted(context.dump().items()))
    payload: Any = {"values": values, "provenance": context.dump_with_origin()} if provenance else values
    click.echo(json.dumps(payload, indent=indent, ensure_ascii=False))


@cli.command("objects", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--type", "type_tag", default=None, help="Only show objects of this type")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default="json",
    show_default=True,
)
@click.pass_context
def cli_objects(ctx: click.Context, type_tag: Optional[str], output_format: str) -> None:
    """Materialise objects from the resolved values and print them."""

    context = _build_context(ctx)
    context.reload_objects()
    selected = {
        key: _describe(obj)
        for key, obj in sorted(context.objects().items())
        if type_tag is None or obj.type() == type_tag.upper()
    }
    click.echo(_render(selected, output_format.lower()))


@cli.command("endpoint", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(ENDPOINT_FORMAT_CHOICES, case_sensitive=False),
    default="yaml",
    show_default=True,
)
@click.pass_context
def cli_endpoint(ctx: click.Context, name: str, output_format: str) -> None:
    """Print the endpoint NAME built from ``EP_<NAME>_<FIELD>`` keys."""

    context = _build_context(ctx)
    context.reload_objects()
    try:
        endpoint = context.get_endpoint(name)
    except NotFound as exc:
        raise click.ClickException(str(exc)) from exc
    if output_format.lower() == "env":
        buffer = io.StringIO()
        endpoint.write(buffer)
        click.echo(buffer.getvalue(), nl=False)
        return
    click.echo(_render(endpoint.to_dict(), output_format.lower()))


def _describe(obj: Object) -> dict[str, Any]:
    return {"type": obj.type(), "name": obj.name, "fields": obj.fields()}


def _render(payload: Any, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True).rstrip("\n")
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _parse_assignments(values: Sequence[str]) -> dict[str, str]:
    """Split ``KEY=VALUE`` options, rejecting entries without ``=``."""

    parsed: dict[str, str] = {}
    for entry in values:
        key, separator, value = entry.partition("=")
        if not separator or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {entry!r}", param_hint="--set")
        parsed[key] = value
    return parsed


def _parse_object_type(entry: str) -> tuple[str, tuple[str, ...]]:
    """Split ``TYPE:FIELD,FIELD`` into a tag and field names."""

    type_tag, separator, fields = entry.partition(":")
    names = tuple(name.strip() for name in fields.split(",") if name.strip())
    if not separator or not type_tag.strip() or not names:
        raise click.BadParameter(f"expected TYPE:FIELD,FIELD, got {entry!r}", param_hint="--object")
    return type_tag.strip(), names


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="xvals",
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
