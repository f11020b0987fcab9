"""Typer application for the bump-py command line."""

from __future__ import annotations

from typing import Annotated

import typer

from bump_py import __version__
from bump_py.cli import commands
from bump_py.cli.console import console, err_console
from bump_py.core.version import VersionIncrement
from bump_py.logging import configure_logging

app = typer.Typer(
    name="bump-py",
    help="Compute the next semantic version from conventional commits, tag it and run hooks.",
    no_args_is_help=True,
    add_completion=False,
)

PATH_OPTION = typer.Option("--path", help="Project directory (default: current directory)")
PACKAGE_OPTION = typer.Option("--package", help="Restrict to one monorepo package")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"bump-py {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    configure_logging(verbose=verbose, console=err_console)


def _select_increment(
    auto: bool, major: bool, minor: bool, patch: bool, version: str | None
) -> VersionIncrement:
    chosen = [
        flag
        for flag, enabled in (
            (VersionIncrement.auto(), auto),
            (VersionIncrement.major(), major),
            (VersionIncrement.minor(), minor),
            (VersionIncrement.patch(), patch),
        )
        if enabled
    ]
    if version:
        chosen.append(VersionIncrement.manual(version))
    if len(chosen) != 1:
        raise typer.BadParameter(
            "Pass exactly one of --auto, --major, --minor, --patch or --version"
        )
    return chosen[0]


@app.command()
def bump(
    auto: Annotated[bool, typer.Option("--auto", "-a", help="Derive from commits")] = False,
    major: Annotated[bool, typer.Option("--major", "-M", help="Increment major")] = False,
    minor: Annotated[bool, typer.Option("--minor", "-m", help="Increment minor")] = False,
    patch: Annotated[bool, typer.Option("--patch", "-p", help="Increment patch")] = False,
    version: Annotated[
        str | None, typer.Option("--version", help="Set the next version explicitly")
    ] = None,
    package: Annotated[str | None, PACKAGE_OPTION] = None,
    monorepo: Annotated[
        bool, typer.Option("--monorepo", help="Bump all packages and the aggregate")
    ] = False,
    hook_profile: Annotated[
        str | None, typer.Option("--hook-profile", "-H", help="Bump profile to run")
    ] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", "-d", help="Preview only")] = False,
    path: Annotated[str | None, PATH_OPTION] = None,
) -> None:
    """Commit a changelog and create the next version tag."""
    increment = _select_increment(auto, major, minor, patch, version)
    commands.run_bump(
        path=path,
        increment=increment,
        package=package,
        monorepo=monorepo,
        profile=hook_profile,
        dry_run=dry_run,
        console=console,
        err_console=err_console,
    )


@app.command()
def changelog(
    from_ref: Annotated[
        str | None, typer.Option("--from", "-f", help="Start ref (default: latest tag)")
    ] = None,
    to_ref: Annotated[
        str | None, typer.Option("--to", "-t", help="End ref (default: HEAD)")
    ] = None,
    package: Annotated[str | None, PACKAGE_OPTION] = None,
    at: Annotated[
        str | None, typer.Option("--at", help="Version label for the rendered release")
    ] = None,
    path: Annotated[str | None, PATH_OPTION] = None,
) -> None:
    """Display a changelog for a commit range."""
    commands.run_changelog(path, from_ref, to_ref, package, at, console, err_console)


@app.command()
def check(
    from_latest_tag: Annotated[
        bool,
        typer.Option("--from-latest-tag", "-l", help="Only check commits since the latest tag"),
    ] = False,
    path: Annotated[str | None, PATH_OPTION] = None,
) -> None:
    """Verify every commit message against the conventional commit format."""
    commands.run_check(path, from_latest_tag, console, err_console)


@app.command()
def verify(
    message: Annotated[str, typer.Argument(help="The commit message")],
    path: Annotated[str | None, PATH_OPTION] = None,
) -> None:
    """Verify a single commit message."""
    commands.run_verify(path, message, console, err_console)
