"""Tags, version increments and next-version resolution.

Semantic version parsing, formatting and precedence are delegated to the
``semver`` library. A scope without any release tag is represented by the
zero tag (``0.0.0``) so that comparisons are always defined.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

import semver

from bump_py.exceptions import NothingToBumpError, TagParseError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bump_py.core.commits import ClassifiedCommit

ZERO_VERSION = semver.Version(0, 0, 0)


class BumpType(int, Enum):
    """Version part to increment, ordered by significance."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


def parse_version(value: str, prefix: str = "") -> semver.Version:
    """Parse a semantic version, stripping ``prefix`` when present.

    Raises:
        TagParseError: If the value is not a valid semantic version
    """
    raw = value.strip()
    if prefix and raw.startswith(prefix):
        raw = raw[len(prefix) :]
    try:
        return semver.Version.parse(raw)
    except (ValueError, TypeError) as e:
        raise TagParseError(f"'{value}' is not SemVer compliant: {e}") from e


def apply_bump(version: semver.Version, bump: BumpType) -> semver.Version:
    if bump is BumpType.MAJOR:
        return version.bump_major()
    if bump is BumpType.MINOR:
        return version.bump_minor()
    if bump is BumpType.PATCH:
        return version.bump_patch()
    return version


@dataclass(frozen=True)
class Tag:
    """A release tag: ``[<package>-]<prefix><semver>``.

    ``commit_id`` is set for tags read from the revision store and is
    ``None`` for the zero tag and for tags computed but not yet created.
    """

    version: semver.Version = ZERO_VERSION
    prefix: str = ""
    package: str | None = None
    commit_id: str | None = None

    @classmethod
    def zero(cls, prefix: str = "", package: str | None = None) -> Tag:
        return cls(ZERO_VERSION, prefix=prefix, package=package)

    @classmethod
    def parse(
        cls,
        name: str,
        prefix: str = "",
        package: str | None = None,
        commit_id: str | None = None,
    ) -> Tag:
        """Parse a tag name belonging to ``package`` (or the repository).

        Raises:
            TagParseError: If the name does not belong to the scope or is not semver
        """
        raw = name
        if package is not None:
            package_prefix = f"{package}-"
            if not raw.startswith(package_prefix):
                raise TagParseError(f"tag '{name}' does not belong to package '{package}'")
            raw = raw[len(package_prefix) :]
        if prefix:
            if not raw.startswith(prefix):
                raise TagParseError(f"tag '{name}' does not start with prefix '{prefix}'")
            raw = raw[len(prefix) :]
        return cls(parse_version(raw), prefix=prefix, package=package, commit_id=commit_id)

    @classmethod
    def try_parse(
        cls,
        name: str,
        prefix: str = "",
        package: str | None = None,
        commit_id: str | None = None,
    ) -> Tag | None:
        try:
            return cls.parse(name, prefix, package, commit_id)
        except TagParseError:
            return None

    @property
    def name(self) -> str:
        base = f"{self.prefix}{self.version}"
        return f"{self.package}-{base}" if self.package else base

    @property
    def is_zero(self) -> bool:
        return self.version == ZERO_VERSION

    def with_version(self, version: semver.Version) -> Tag:
        return replace(self, version=version, commit_id=None)

    def __str__(self) -> str:
        return self.name


class IncrementKind(Enum):
    MANUAL = "manual"
    AUTO = "auto"
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    AUTO_PACKAGE = "auto-package"


_FORCED_BUMPS = {
    IncrementKind.MAJOR: BumpType.MAJOR,
    IncrementKind.MINOR: BumpType.MINOR,
    IncrementKind.PATCH: BumpType.PATCH,
}


@dataclass(frozen=True)
class VersionIncrement:
    """The single instruction that governs one bump invocation."""

    kind: IncrementKind
    version: str | None = None
    package: str | None = None

    @classmethod
    def manual(cls, version: str) -> VersionIncrement:
        return cls(IncrementKind.MANUAL, version=version)

    @classmethod
    def auto(cls) -> VersionIncrement:
        return cls(IncrementKind.AUTO)

    @classmethod
    def major(cls) -> VersionIncrement:
        return cls(IncrementKind.MAJOR)

    @classmethod
    def minor(cls) -> VersionIncrement:
        return cls(IncrementKind.MINOR)

    @classmethod
    def patch(cls) -> VersionIncrement:
        return cls(IncrementKind.PATCH)

    @classmethod
    def auto_package(cls, package: str) -> VersionIncrement:
        return cls(IncrementKind.AUTO_PACKAGE, package=package)

    @property
    def is_automatic(self) -> bool:
        return self.kind in (IncrementKind.AUTO, IncrementKind.AUTO_PACKAGE)

    def __str__(self) -> str:
        if self.kind is IncrementKind.MANUAL:
            return f"manual ({self.version})"
        if self.kind is IncrementKind.AUTO_PACKAGE:
            return f"auto ({self.package})"
        return self.kind.value


def calculate_bump(commits: Sequence[ClassifiedCommit]) -> BumpType:
    """Largest bump warranted by the commits.

    Breaking changes win over features, features over fixes. Other commit
    types never affect the result.
    """
    bump = BumpType.NONE
    for commit in commits:
        if commit.is_breaking:
            return BumpType.MAJOR
        if commit.is_feature:
            bump = max(bump, BumpType.MINOR)
        elif commit.is_fix:
            bump = max(bump, BumpType.PATCH)
    return bump


def resolve_next_version(
    current: semver.Version,
    commits: Sequence[ClassifiedCommit],
    increment: VersionIncrement,
    prefix: str = "",
) -> semver.Version:
    """Compute the next version.

    An explicit version is taken verbatim and forced parts ignore commit
    content; ordering against ``current`` is checked separately.

    Raises:
        NothingToBumpError: If automatic mode finds no bump-worthy commit
        TagParseError: If a manual version is not semver
    """
    if increment.kind is IncrementKind.MANUAL:
        if increment.version is None:
            raise TagParseError("manual increment requires a version")
        return parse_version(increment.version, prefix)

    if increment.kind in _FORCED_BUMPS:
        return apply_bump(current, _FORCED_BUMPS[increment.kind])

    bump = calculate_bump(commits)
    if bump is BumpType.NONE:
        scope = f" for package '{increment.package}'" if increment.package else ""
        raise NothingToBumpError(f"No commit found to bump current version {current}{scope}")
    return apply_bump(current, bump)


@dataclass
class BumpSummary:
    """What a commit sequence contributes to a bump, for reporting."""

    bump_commits: list[ClassifiedCommit] = field(default_factory=list)
    skipped: dict[str, int] = field(default_factory=dict)


def summarize_commits(commits: Sequence[ClassifiedCommit]) -> BumpSummary:
    """Split commits into bump-worthy ones and a per-type tally of the rest."""
    skipped: Counter[str] = Counter()
    bump_commits = []
    for commit in commits:
        if commit.is_bump_relevant:
            bump_commits.append(commit)
        else:
            skipped[commit.type_name] += 1
    return BumpSummary(bump_commits=bump_commits, skipped=dict(sorted(skipped.items())))
