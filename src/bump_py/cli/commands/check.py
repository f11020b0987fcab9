"""Implementation of the 'check' and 'verify' commands.

``check`` scans the history for commits that bump computation silently
ignores; ``verify`` validates a single message, e.g. from a commit-msg hook.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from bump_py.cli.console import print_error
from bump_py.config import load_config
from bump_py.core.commits import parse_conventional_commit
from bump_py.core.engine import ReleaseEngine
from bump_py.exceptions import BumpPyError, CommitParseError
from bump_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_check(
    path: str | None,
    from_latest_tag: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Report non-conforming commits; exits 1 if any are found."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        engine = ReleaseEngine(GitRepository(project_path), config)
        errored = engine.check_commits(from_latest_tag=from_latest_tag)
    except BumpPyError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    if not errored:
        console.print("[green]No errored commits[/]")
        return

    table = Table(title=f"{len(errored)} non-conforming commit(s)", title_justify="left")
    table.add_column("Commit", style="cyan", no_wrap=True)
    table.add_column("Author")
    table.add_column("Message")
    table.add_column("Error", style="red")
    for commit, error in errored:
        table.add_row(
            commit.short_sha,
            escape(commit.author_name),
            escape(commit.summary),
            escape(str(error)),
        )
    err_console.print(table)
    raise SystemExit(1)


def run_verify(
    path: str | None, message: str, console: Console, err_console: Console
) -> None:
    """Validate one commit message against the configured conventions."""
    try:
        config = load_config(Path(path) if path else Path.cwd())
    except BumpPyError as e:
        print_error(err_console, e, "Error loading config")
        raise SystemExit(1) from e

    try:
        parsed = parse_conventional_commit(message)
    except CommitParseError as e:
        print_error(err_console, e, "Invalid commit message")
        raise SystemExit(1) from e

    console.print(f"[green]Valid conventional commit[/] ({escape(str(parsed.commit_type))})")
    if parsed.scope:
        console.print(f"  scope: [cyan]{escape(parsed.scope)}[/]")
    if parsed.is_breaking(config.commits.breaking_pattern):
        console.print("  [red]BREAKING CHANGE[/]")
