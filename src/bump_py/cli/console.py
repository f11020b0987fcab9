"""Shared console helpers for CLI commands."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


def print_error(target: Console, error: BaseException, title: str = "Error") -> None:
    """Print an error and its cause chain."""
    target.print(f"[red]{title}:[/] {escape(str(error))}")
    cause = error.__cause__
    while cause is not None:
        target.print(f"  [dim]caused by:[/] {escape(str(cause))}")
        cause = cause.__cause__
