"""Implementation of the 'changelog' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from bump_py.cli.console import print_error
from bump_py.config import load_config
from bump_py.core.engine import ReleaseEngine
from bump_py.exceptions import BumpPyError
from bump_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_changelog(
    path: str | None,
    from_ref: str | None,
    to_ref: str | None,
    package: str | None,
    at: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the changelog of a commit range; nothing is written."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
        engine = ReleaseEngine(GitRepository(project_path), config)
        content = engine.changelog(from_ref=from_ref, to_ref=to_ref, package=package, at=at)
    except BumpPyError as e:
        print_error(err_console, e)
        raise SystemExit(1) from e

    console.print(content, markup=False, highlight=False, soft_wrap=True)
