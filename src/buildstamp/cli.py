"""CLI app definition and commands."""

import dataclasses
import json
import os
from typing import Annotated

import typer

from buildstamp.config import BuildstampError, Settings, load_settings
from buildstamp.resolver import VersionInfo, is_release_requested, resolve_version
from buildstamp.stamp import read_properties, write_properties
from buildstamp.utils import console, err_console, find_repo_root, log
from buildstamp.version import get_version


def _version_callback(value: bool):
    if value:
        console.print(get_version())
        raise typer.Exit()


app = typer.Typer(
    help="Resolve build version strings from git tags.",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    """Resolve build version strings from git tags."""


# Options shared by every resolving command
DirectoryOpt = Annotated[
    str, typer.Option("--directory", "-C", envvar="BUILDSTAMP_DIR", help="Repository root (defaults to the enclosing checkout of cwd)")
]
ReleaseOpt = Annotated[bool, typer.Option("--release", help="Resolve a release version (no git revision)")]
TaskOpt = Annotated[
    list[str], typer.Option("--task", "-t", help="Requested build task; the release task implies --release")
]
BaseVersionOpt = Annotated[str, typer.Option("--base-version", help="Base version, e.g. 3.0.0")]
SuffixOpt = Annotated[str, typer.Option("--suffix", help="Version suffix; pass '' for none")]


def _load_settings(base_version: str | None, suffix: str | None) -> Settings:
    """Load environment settings and apply CLI overrides. Exits 1 on bad config."""
    try:
        settings = load_settings()
    except BuildstampError as exc:
        err_console.print(f"ERROR: {exc}", style="bold red")
        raise typer.Exit(1)
    overrides = {}
    if base_version:
        overrides["base_version"] = base_version
    if suffix is not None:
        overrides["suffix"] = suffix
    return dataclasses.replace(settings, **overrides)


def _resolve(
    directory: str,
    release: bool,
    tasks: list[str] | None,
    base_version: str | None,
    suffix: str | None,
    stderr: bool = False,
) -> VersionInfo:
    settings = _load_settings(base_version, suffix)
    is_release = release or is_release_requested(tasks or [], settings.release_task)
    repo_dir = find_repo_root(directory or os.getcwd())
    return resolve_version(repo_dir, is_release, settings, stderr=stderr)


# ============================================
# Commands
# ============================================


@app.command("print-version")
def print_version(
    directory: DirectoryOpt = "",
    release: ReleaseOpt = False,
    task: TaskOpt = None,
    base_version: BaseVersionOpt = None,
    suffix: SuffixOpt = None,
) -> None:
    """Print only the display version to stdout."""
    info = _resolve(directory, release, task, base_version, suffix, stderr=True)
    typer.echo(info.display_version)


@app.command()
def resolve(
    directory: DirectoryOpt = "",
    release: ReleaseOpt = False,
    task: TaskOpt = None,
    base_version: BaseVersionOpt = None,
    suffix: SuffixOpt = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON")] = False,
) -> None:
    """Resolve the revision and display version and print both."""
    info = _resolve(directory, release, task, base_version, suffix, stderr=as_json)
    if as_json:
        typer.echo(json.dumps(info.to_dict(), indent=2))
        return
    console.print(f"  revision: {info.revision or '(none)'}", highlight=False)
    console.print(f"  version:  {info.display_version}", highlight=False)


@app.command()
def stamp(
    output: Annotated[str, typer.Argument(help="Properties file to write")],
    directory: DirectoryOpt = "",
    release: ReleaseOpt = False,
    task: TaskOpt = None,
    base_version: BaseVersionOpt = None,
    suffix: SuffixOpt = None,
) -> None:
    """Resolve the version and write it into a .properties file."""
    info = _resolve(directory, release, task, base_version, suffix)
    try:
        path = write_properties(info, output)
    except OSError as exc:
        err_console.print(f"ERROR: cannot write {output}: {exc}", style="bold red")
        raise typer.Exit(1)
    log(f"Wrote {path}", style="green")


@app.command()
def show(
    path: Annotated[str, typer.Argument(help="Properties file written by 'stamp'")],
) -> None:
    """Print the entries of a stamped properties file."""
    try:
        entries = read_properties(path)
    except BuildstampError as exc:
        err_console.print(f"ERROR: {exc}", style="bold red")
        raise typer.Exit(1)
    for key, value in entries.items():
        console.print(f"{key}={value}", highlight=False)
