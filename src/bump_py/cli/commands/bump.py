"""Implementation of the 'bump' command.

The bump command computes the next version, writes the changelog, runs
hooks, commits and tags.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from bump_py.cli.console import print_error
from bump_py.config import load_config
from bump_py.core.engine import BumpOutcome, MonorepoOutcome, ReleaseEngine
from bump_py.exceptions import BumpPyError, BumpRolledBackError, NothingToBumpError
from bump_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from bump_py.core.version import VersionIncrement


def run_bump(
    path: str | None,
    increment: VersionIncrement,
    package: str | None,
    monorepo: bool,
    profile: str | None,
    dry_run: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the bump command.

    Args:
        path: Optional path to project directory
        increment: How to compute the next version
        package: Bump only this monorepo package
        monorepo: Bump every package plus the aggregate version
        profile: Hook profile to use instead of the default hooks
        dry_run: Compute and preview without changing anything
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = load_config(project_path)
    except BumpPyError as e:
        print_error(err_console, e, "Error loading config")
        raise SystemExit(1) from e

    # Initialize git repository
    try:
        repo = GitRepository(project_path)
    except BumpPyError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    engine = ReleaseEngine(repo, config)

    try:
        if package:
            outcome: BumpOutcome | MonorepoOutcome = engine.bump_package(
                package, increment, profile=profile, dry_run=dry_run
            )
        elif monorepo or config.is_monorepo:
            outcome = engine.bump_monorepo(increment, profile=profile, dry_run=dry_run)
        else:
            outcome = engine.bump(increment, profile=profile, dry_run=dry_run)
    except NothingToBumpError as e:
        console.print(f"[yellow]{escape(str(e))}. Nothing to do.[/]")
        console.print("[dim]Use [cyan]--version[/] or a forced part to release anyway.[/]")
        return
    except BumpRolledBackError as e:
        print_error(err_console, e, "Bump failed")
        handle = e.rollback.stash_handle
        if handle:
            err_console.print(
                f"Inspect the stashed changes with [cyan]git stash show -p {escape(handle)}[/]"
            )
        raise SystemExit(1) from e
    except BumpPyError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    outcomes = _flatten(outcome)
    mode_str = "[yellow]DRY-RUN[/]" if dry_run else "[green]EXECUTED[/]"
    for item in outcomes:
        console.print(
            f"{mode_str} - {escape(str(item.scope))}: "
            f"[cyan]{escape(str(item.previous))}[/] -> [green]{escape(str(item.tag))}[/]"
        )

    if dry_run:
        preview = "\n\n".join(item.changelog for item in outcomes)
        console.print(
            Panel(
                escape(preview),
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        return

    tags = ", ".join(escape(str(item.tag)) for item in outcomes)
    console.print(
        Panel(
            f"[green]Created {tags}[/]",
            title="[green]Bump Complete[/]",
            border_style="green",
        )
    )


def _flatten(outcome: BumpOutcome | MonorepoOutcome) -> list[BumpOutcome]:
    if isinstance(outcome, MonorepoOutcome):
        return [*outcome.packages, outcome.aggregate]
    return [outcome]
