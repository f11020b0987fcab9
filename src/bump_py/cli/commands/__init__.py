"""CLI command implementations."""

from __future__ import annotations

from bump_py.cli.commands.bump import run_bump
from bump_py.cli.commands.changelog import run_changelog
from bump_py.cli.commands.check import run_check, run_verify

__all__ = ["run_bump", "run_changelog", "run_check", "run_verify"]
