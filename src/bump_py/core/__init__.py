"""Core business logic for bump-py.

This module contains the fundamental building blocks:
- Conventional commit classification
- Commit range resolution per versioning scope
- Next-version computation and tag ordering checks
- Changelog rendering
- Hook resolution and execution
- Release orchestration
"""

from __future__ import annotations

from bump_py.core.changelog import Release, render_changelog, write_changelog
from bump_py.core.commits import (
    ClassifiedCommit,
    CommitType,
    classify,
    classify_commits,
    parse_conventional_commit,
)
from bump_py.core.engine import (
    BumpOutcome,
    BumpState,
    MonorepoOutcome,
    ReleaseEngine,
    RollbackResult,
)
from bump_py.core.hooks import HookOrchestrator, substitute, tokenize
from bump_py.core.invariants import ensure_advances, ensure_preconditions
from bump_py.core.ranges import RangeResolver, VersionScope
from bump_py.core.version import (
    BumpType,
    Tag,
    VersionIncrement,
    calculate_bump,
    resolve_next_version,
)

__all__ = [
    # Version
    "BumpType",
    # Engine
    "BumpOutcome",
    "BumpState",
    # Commits
    "ClassifiedCommit",
    "CommitType",
    # Hooks
    "HookOrchestrator",
    "MonorepoOutcome",
    # Ranges
    "RangeResolver",
    # Changelog
    "Release",
    "ReleaseEngine",
    "RollbackResult",
    "Tag",
    "VersionIncrement",
    "VersionScope",
    "calculate_bump",
    "classify",
    "classify_commits",
    # Invariants
    "ensure_advances",
    "ensure_preconditions",
    "parse_conventional_commit",
    "render_changelog",
    "resolve_next_version",
    "substitute",
    "tokenize",
    "write_changelog",
]
