"""Conventional commit parsing and classification.

A raw commit becomes a :class:`ClassifiedCommit` when its first line
follows ``<type>[(<scope>)][!]: <description>``. Anything else is rejected:
it never affects the computed version, but ``check`` reports it.

Commit types are an open set. The common ones are members of
:class:`CommitType`; anything else is kept as its lowercase string.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from bump_py.exceptions import CommitParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from bump_py.vcs.base import Commit

DEFAULT_BREAKING_PATTERN = r"BREAKING[ -]CHANGE"

_HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"
    r"(?:\((?P<scope>[^()\r\n]+)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>\S.*)$"
)
_FOOTER_RE = re.compile(r"^(?P<token>BREAKING[ -]CHANGE|[\w-]+)(?:: | #)(?P<value>.*)$")


class CommitType(str, Enum):
    """Well-known conventional commit types."""

    FEATURE = "feat"
    BUG_FIX = "fix"
    PERFORMANCE = "perf"
    REVERT = "revert"
    DOCUMENTATION = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"

    def __str__(self) -> str:
        return self.value


# A known type, or the raw (lowercased) name of a custom one.
AnyCommitType = CommitType | str


def commit_type_from_str(value: str) -> AnyCommitType:
    normalized = value.strip().lower()
    try:
        return CommitType(normalized)
    except ValueError:
        return normalized


def type_name(commit_type: AnyCommitType) -> str:
    return str(commit_type)


@dataclass(frozen=True)
class Footer:
    token: str
    value: str


@dataclass(frozen=True)
class ConventionalCommit:
    """Structured form of a conventional commit message."""

    commit_type: AnyCommitType
    description: str
    scope: str | None = None
    breaking_marker: bool = False
    body: str | None = None
    footers: tuple[Footer, ...] = field(default_factory=tuple)

    def is_breaking(self, breaking_pattern: str = DEFAULT_BREAKING_PATTERN) -> bool:
        """True for a ``!`` marker or a footer whose token matches ``breaking_pattern``."""
        if self.breaking_marker:
            return True
        breaking_re = re.compile(rf"^(?:{breaking_pattern})$")
        return any(breaking_re.match(footer.token) for footer in self.footers)


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit that passed classification. Immutable."""

    sha: str
    commit_type: AnyCommitType
    description: str
    scope: str | None = None
    is_breaking: bool = False

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def type_name(self) -> str:
        return type_name(self.commit_type)

    @property
    def is_feature(self) -> bool:
        return self.commit_type is CommitType.FEATURE

    @property
    def is_fix(self) -> bool:
        return self.commit_type is CommitType.BUG_FIX

    @property
    def is_bump_relevant(self) -> bool:
        return self.is_breaking or self.is_feature or self.is_fix


@dataclass
class ClassificationResult:
    classified: list[ClassifiedCommit] = field(default_factory=list)
    rejected: list[tuple[Commit, CommitParseError]] = field(default_factory=list)


def parse_conventional_commit(message: str) -> ConventionalCommit:
    """Parse a commit message.

    Raises:
        CommitParseError: If the message is not a conventional commit
    """
    if not message or not message.strip():
        raise CommitParseError("commit message is empty")

    lines = message.strip().splitlines()
    header = lines[0].strip()
    match = _HEADER_RE.match(header)
    if match is None:
        raise CommitParseError(
            f"'{header}' does not match '<type>[(<scope>)][!]: <description>'"
        )

    paragraphs = "\n".join(lines[1:]).strip().split("\n\n") if len(lines) > 1 else []
    footers = _parse_footers(paragraphs[-1]) if paragraphs else None
    if footers is not None:
        paragraphs = paragraphs[:-1]
    body_lines = [p for p in paragraphs if p.strip()]

    return ConventionalCommit(
        commit_type=commit_type_from_str(match["type"]),
        description=match["description"].strip(),
        scope=match["scope"].strip() if match["scope"] else None,
        breaking_marker=bool(match["breaking"]),
        body="\n\n".join(body_lines) or None,
        footers=tuple(footers or ()),
    )


def _parse_footers(paragraph: str) -> list[Footer] | None:
    """Parse the trailing paragraph as footers, or return None if it is body text.

    A footer starts at a ``token: value`` (or ``token #value``) line; the
    following lines continue its value until the next token.
    """
    entries: list[tuple[str, list[str]]] = []
    for line in paragraph.splitlines():
        match = _FOOTER_RE.match(line)
        if match:
            entries.append((match["token"], [match["value"]]))
        elif entries:
            entries[-1][1].append(line)
        else:
            return None
    if not entries:
        return None
    return [Footer(token, "\n".join(value).strip()) for token, value in entries]


def classify(
    commit: Commit, breaking_pattern: str = DEFAULT_BREAKING_PATTERN
) -> ClassifiedCommit:
    """Turn a raw commit into a classified one.

    A ``!`` after the type/scope and a footer whose token matches
    ``breaking_pattern`` both mark the commit as breaking.

    Raises:
        CommitParseError: If the commit message is not conventional
    """
    parsed = parse_conventional_commit(commit.message)
    return ClassifiedCommit(
        sha=commit.sha,
        commit_type=parsed.commit_type,
        description=parsed.description,
        scope=parsed.scope,
        is_breaking=parsed.is_breaking(breaking_pattern),
    )


def classify_commits(
    commits: Iterable[Commit], breaking_pattern: str = DEFAULT_BREAKING_PATTERN
) -> ClassificationResult:
    """Classify commits in order, collecting the ones that fail to parse."""
    result = ClassificationResult()
    for commit in commits:
        try:
            result.classified.append(classify(commit, breaking_pattern))
        except CommitParseError as e:
            result.rejected.append((commit, e))
    return result


def is_merge_commit(commit: Commit) -> bool:
    return commit.summary.startswith("Merge ")


def group_commits_by_type(
    commits: Sequence[ClassifiedCommit],
) -> dict[str, list[ClassifiedCommit]]:
    grouped: dict[str, list[ClassifiedCommit]] = defaultdict(list)
    for commit in commits:
        grouped[commit.type_name].append(commit)
    return dict(grouped)


def get_breaking_changes(commits: Sequence[ClassifiedCommit]) -> list[ClassifiedCommit]:
    return [c for c in commits if c.is_breaking]


def format_commit_for_changelog(
    commit: ClassifiedCommit,
    *,
    include_scope: bool = True,
    include_sha: bool = True,
) -> str:
    """Format a commit as a markdown list item."""
    parts = ["-"]
    if include_scope and commit.scope:
        parts.append(f"**{commit.scope}:**")
    if commit.is_breaking:
        parts.append("[BREAKING]")
    parts.append(commit.description)
    if include_sha:
        parts.append(f"({commit.short_sha})")
    return " ".join(parts)
