"""Commit range resolution per versioning scope.

A range starts at the latest tag of its scope (exclusive) or, when the
scope has never been released, at the very first commit (inclusive), and
ends at ``to_ref`` or HEAD.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from bump_py.core.version import Tag
from bump_py.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from bump_py.config.models import BumpPyConfig
    from bump_py.vcs.base import Commit, RevisionStore

logger = get_logger("ranges")


class ScopeKind(Enum):
    REPOSITORY = "repository"
    PACKAGE = "package"
    GLOBAL = "global"


@dataclass(frozen=True)
class VersionScope:
    """The unit being versioned: the repository, one package, or the monorepo."""

    kind: ScopeKind
    package: str | None = None

    @classmethod
    def repository(cls) -> VersionScope:
        return cls(ScopeKind.REPOSITORY)

    @classmethod
    def for_package(cls, name: str) -> VersionScope:
        return cls(ScopeKind.PACKAGE, package=name)

    @classmethod
    def monorepo_global(cls) -> VersionScope:
        return cls(ScopeKind.GLOBAL)

    def __str__(self) -> str:
        if self.kind is ScopeKind.PACKAGE:
            return f"package '{self.package}'"
        return self.kind.value


@dataclass
class CommitRange:
    scope: VersionScope
    from_tag: Tag
    to_id: str
    commits: list[Commit] = field(default_factory=list)


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(path, pattern) for pattern in patterns)


def touches_package(commit: Commit, patterns: Sequence[str]) -> bool:
    return any(matches_any(path, patterns) for path in commit.files)


def touches_outside_packages(commit: Commit, all_patterns: Sequence[str]) -> bool:
    """True for commits with at least one path outside every package (or no paths)."""
    if not commit.files:
        return True
    return any(not matches_any(path, all_patterns) for path in commit.files)


class RangeResolver:
    """Resolves the ordered commits to consider for a scope."""

    def __init__(self, repo: RevisionStore, config: BumpPyConfig) -> None:
        self.repo = repo
        self.config = config

    def latest_tag(self, scope: VersionScope) -> Tag:
        """Highest tag of the scope, or the zero tag if there is none."""
        prefix = self.config.effective_tag_prefix
        package = scope.package if scope.kind is ScopeKind.PACKAGE else None
        tags = [
            tag
            for ref in self.repo.list_tags()
            if (tag := Tag.try_parse(ref.name, prefix, package, ref.commit_id)) is not None
        ]
        if not tags:
            return Tag.zero(prefix, package)
        return max(tags, key=lambda tag: tag.version)

    def resolve(
        self,
        scope: VersionScope,
        from_ref: str | None = None,
        to_ref: str | None = None,
    ) -> CommitRange:
        """Return the commits of ``scope`` between the boundaries, oldest first.

        An empty range is valid; it simply leads to nothing to bump.
        """
        to_id = self.repo.resolve_ref(to_ref) if to_ref else self.repo.head_commit_id()
        from_tag = self.latest_tag(scope)

        if from_ref is not None:
            commits = self.repo.commits_in_range(self.repo.resolve_ref(from_ref), to_id)
        elif from_tag.commit_id is not None:
            commits = self.repo.commits_in_range(from_tag.commit_id, to_id)
        else:
            first = self.repo.first_commit_id()
            commits = self.repo.commits_in_range(first, to_id, inclusive=True)

        commits = self._filter(scope, commits)
        logger.debug(
            "Resolved %d commit(s) for %s since %s",
            len(commits),
            scope,
            from_ref or from_tag,
        )
        return CommitRange(scope=scope, from_tag=from_tag, to_id=to_id, commits=commits)

    def _filter(self, scope: VersionScope, commits: list[Commit]) -> list[Commit]:
        if scope.kind is ScopeKind.PACKAGE:
            patterns = self.config.package(scope.package or "").include_patterns
            return [c for c in commits if touches_package(c, patterns)]
        if scope.kind is ScopeKind.GLOBAL:
            all_patterns = [
                pattern
                for package in self.config.packages.values()
                for pattern in package.include_patterns
            ]
            return [c for c in commits if touches_outside_packages(c, all_patterns)]
        return commits
