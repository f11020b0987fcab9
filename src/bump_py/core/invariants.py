"""Checks that must hold before and during a bump."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from bump_py.exceptions import (
    BranchNotAllowedError,
    DirtyWorkingTreeError,
    VersionOrderingError,
)
from bump_py.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bump_py.config.models import BumpPyConfig
    from bump_py.core.version import Tag
    from bump_py.vcs.base import RevisionStore

logger = get_logger("invariants")


def branch_matches(branch: str, patterns: Sequence[str]) -> bool:
    """True if ``branch`` matches any glob pattern.

    ``*`` also matches ``/``, so ``release/**`` and ``release/*`` both
    cover ``release/1.0.0``.
    """
    return any(fnmatchcase(branch, pattern) for pattern in patterns)


def ensure_preconditions(repo: RevisionStore, config: BumpPyConfig) -> None:
    """Fail unless the tree is clean and the branch is allowed.

    Raises:
        DirtyWorkingTreeError: On staged or unstaged changes
        BranchNotAllowedError: If a whitelist is configured and the branch misses it
    """
    changes = repo.working_tree_status(include_untracked=not config.skip_untracked)
    if changes:
        raise DirtyWorkingTreeError(changes)

    if not config.branch_whitelist:
        return

    branch = repo.current_branch_name()
    if branch is None:
        # Detached HEAD (e.g. a CI checkout of a tag): nothing to match against.
        logger.warning("HEAD is detached, skipping branch whitelist check")
        return
    if not branch_matches(branch, config.branch_whitelist):
        raise BranchNotAllowedError(branch, config.branch_whitelist)


def ensure_advances(current: Tag, next_tag: Tag) -> None:
    """Fail unless ``next_tag`` is strictly greater than ``current``.

    Uses semver precedence, so pre-releases sort before their release.

    Raises:
        VersionOrderingError: If ``next_tag <= current``
    """
    if next_tag.version.compare(current.version) <= 0:
        raise VersionOrderingError(str(current), str(next_tag))
