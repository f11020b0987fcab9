"""Exception hierarchy for bump-py.

Every error raised by the library derives from :class:`BumpPyError`, so
callers can catch a single type. ``NothingToBumpError`` is the one
non-fatal member: it means "no release needed" rather than "something
went wrong".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bump_py.core.engine import RollbackResult


class BumpPyError(Exception):
    """Base class for all bump-py errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(BumpPyError):
    """Invalid or inconsistent configuration."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigError):
    """The [tool.bump-py] table failed validation."""


# =============================================================================
# Collaborators
# =============================================================================


class GitError(BumpPyError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class CommitParseError(BumpPyError):
    """A commit message does not follow the conventional commit format."""


class TagParseError(BumpPyError):
    """A tag or version literal is not a valid semantic version."""


# =============================================================================
# Preconditions and ordering
# =============================================================================


class PreconditionError(BumpPyError):
    """The repository is not in a state that allows a bump."""


class DirtyWorkingTreeError(PreconditionError):
    """The working tree has staged, unstaged or untracked changes."""

    def __init__(self, changes: Sequence[str]) -> None:
        self.changes = list(changes)
        listing = "\n".join(f"  {line}" for line in self.changes)
        super().__init__(
            f"Repository has uncommitted changes, bump is not allowed:\n{listing}"
        )


class BranchNotAllowedError(PreconditionError):
    """The current branch matches none of the allowed branch patterns."""

    def __init__(self, branch: str, patterns: Sequence[str]) -> None:
        self.branch = branch
        self.patterns = list(patterns)
        super().__init__(
            f"No patterns matched in {self.patterns!r} for branch '{branch}', "
            "bump is not allowed"
        )


class VersionOrderingError(BumpPyError):
    """The next version does not strictly exceed the current one."""

    def __init__(self, current: str, next_version: str) -> None:
        self.current = current
        self.next_version = next_version
        super().__init__(
            "SemVer Error: version MUST be greater than current one: "
            f"{current} <= {next_version}"
        )


class NothingToBumpError(BumpPyError):
    """Automatic mode found no commit that warrants a release."""


# =============================================================================
# Hooks and rollback
# =============================================================================


class HookConfigError(BumpPyError):
    """A hook template could not be resolved into a command."""

    def __init__(self, message: str, *, hook_type: str, scope: str, index: int) -> None:
        self.hook_type = hook_type
        self.scope = scope
        self.index = index
        super().__init__(f"Cannot parse {scope} {hook_type} hook at index {index}: {message}")


class HookExecutionError(BumpPyError):
    """A hook command exited non-zero or could not be started."""

    def __init__(
        self,
        *,
        hook_type: str,
        index: int,
        command: str,
        exit_code: int | None,
        output: str = "",
    ) -> None:
        self.hook_type = hook_type
        self.index = index
        self.command = command
        self.exit_code = exit_code
        self.output = output
        status = f"exit code {exit_code}" if exit_code is not None else "failed to start"
        super().__init__(f"{hook_type} hook at index {index} failed ({status}): {command}")


class BumpRolledBackError(BumpPyError):
    """A bump failed mid-flight and its change set was stashed."""

    def __init__(self, rollback: RollbackResult) -> None:
        self.rollback = rollback
        stash = rollback.stash_handle or "<nothing to stash>"
        state = "tag was created" if rollback.tagged else "no tag was created"
        super().__init__(
            f"Bump to {rollback.tag} failed ({state}): {rollback.cause}\n"
            f"Changes were stashed as {stash}"
        )
