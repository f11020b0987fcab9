"""Changelog rendering from classified commits.

Rendering is a pure projection of a :class:`Release`: it never touches the
repository, so it can be used to preview a release whose tag does not
exist yet. Writing the result into a changelog file is a separate step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from bump_py.config.models import DEFAULT_COMMIT_TYPES
from bump_py.core.commits import (
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_type,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from bump_py.core.commits import ClassifiedCommit
    from bump_py.core.version import Tag
    from bump_py.vcs.base import Commit

UNRELEASED_LABEL = "Unreleased"

# Fixed group order after breaking changes; anything else follows alphabetically.
_PRIORITY_TYPES = ("feat", "fix")


@dataclass
class Release:
    """Commits of one scope plus the version they will be released as.

    ``version`` may be a tag that does not exist yet, or ``None`` for an
    unreleased preview.
    """

    commits: list[ClassifiedCommit] = field(default_factory=list)
    version: Tag | None = None
    rejected: list[Commit] = field(default_factory=list)
    package_tags: list[Tag] = field(default_factory=list)

    @property
    def label(self) -> str:
        return str(self.version) if self.version is not None else UNRELEASED_LABEL


def _ordered_types(
    grouped: Mapping[str, list[ClassifiedCommit]], labels: Mapping[str, str]
) -> list[str]:
    configured = [t for t in labels if t in grouped and t not in _PRIORITY_TYPES]
    custom = sorted(t for t in grouped if t not in labels and t not in _PRIORITY_TYPES)
    return [t for t in _PRIORITY_TYPES if t in grouped] + configured + custom


def render_changelog(
    release: Release,
    *,
    type_labels: Mapping[str, str] | None = None,
    release_date: date | None = None,
    include_rejected: bool = False,
) -> str:
    """Render a release as markdown.

    Breaking changes come first, then features, fixes and the remaining
    types. Breaking commits are listed only under breaking changes.
    Non-conforming commits are never released; previews may list them
    after everything else.

    Args:
        release: Release to render
        type_labels: Commit type to section heading; unknown types use the type name
        release_date: Date shown in the heading (defaults to today, UTC)
        include_rejected: List the release's non-conforming commits

    Returns:
        Markdown text, without a trailing newline
    """
    labels = dict(type_labels or DEFAULT_COMMIT_TYPES)
    day = release_date or datetime.now(UTC).date()

    lines = [f"## {release.label} - {day.isoformat()}", ""]

    breaking = get_breaking_changes(release.commits)
    if breaking:
        lines.append("### Breaking Changes")
        lines.append("")
        lines.extend(format_commit_for_changelog(c) for c in breaking)
        lines.append("")

    grouped = group_commits_by_type([c for c in release.commits if not c.is_breaking])
    for commit_type in _ordered_types(grouped, labels):
        lines.append(f"### {labels.get(commit_type, commit_type.capitalize())}")
        lines.append("")
        lines.extend(format_commit_for_changelog(c) for c in grouped[commit_type])
        lines.append("")

    if release.package_tags:
        lines.append("### Packages")
        lines.append("")
        lines.extend(f"- {tag}" for tag in release.package_tags)
        lines.append("")

    if len(lines) == 2:
        lines.extend(["No notable changes.", ""])

    if include_rejected and release.rejected:
        lines.append("### Non-conforming commits")
        lines.append("")
        lines.extend(f"- {commit.summary} ({commit.short_sha})" for commit in release.rejected)

    return "\n".join(lines).rstrip()


def write_changelog(path: Path, content: str, header: str = "# Changelog") -> Path:
    """Insert ``content`` at the top of a changelog file, below its header.

    The file (and its directory) is created when missing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not path.exists():
        path.write_text(f"{header}\n\n{content}\n", encoding="utf-8")
        return path

    existing = path.read_text(encoding="utf-8")
    if existing.startswith(header):
        rest = existing[len(header) :].lstrip("\n")
        new_content = f"{header}\n\n{content}\n\n{rest}" if rest else f"{header}\n\n{content}\n"
    else:
        new_content = f"{content}\n\n{existing}"

    path.write_text(new_content, encoding="utf-8")
    return path
