"""Tests for changelog rendering and file maintenance."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import semver

from bump_py.core.changelog import Release, render_changelog, write_changelog
from bump_py.core.commits import ClassifiedCommit, CommitType, classify_commits
from bump_py.core.version import Tag

if TYPE_CHECKING:
    from pathlib import Path

DAY = date(2024, 1, 15)


class TestRenderChangelog:
    """Tests for render_changelog()."""

    def test_heading_uses_tag_and_date(self):
        """The heading names the release tag and date."""
        release = Release(version=Tag(semver.Version(1, 2, 0), prefix="v"))

        content = render_changelog(release, release_date=DAY)

        assert content.startswith("## v1.2.0 - 2024-01-15")

    def test_unreleased_label(self):
        """A release without a version is unreleased."""
        content = render_changelog(Release(), release_date=DAY)

        assert content.startswith("## Unreleased - 2024-01-15")
        assert "No notable changes." in content

    def test_zero_tag_label(self):
        """The zero tag renders as 0.0.0."""
        content = render_changelog(Release(version=Tag.zero()), release_date=DAY)

        assert content.startswith("## 0.0.0 - 2024-01-15")

    def test_section_order(self, sample_commits):
        """Breaking changes first, then features, fixes and the rest."""
        release = Release(commits=classify_commits(sample_commits).classified)

        content = render_changelog(release, release_date=DAY)

        positions = [
            content.index(heading)
            for heading in (
                "### Breaking Changes",
                "### Features",
                "### Bug Fixes",
                "### Documentation",
                "### Miscellaneous Chores",
            )
        ]
        assert positions == sorted(positions)

    def test_breaking_listed_once(self, sample_commits):
        """Breaking commits only appear under breaking changes."""
        release = Release(commits=classify_commits(sample_commits).classified)

        content = render_changelog(release, release_date=DAY)

        assert content.count("drop v1 endpoints") == 1
        assert "- **api:** [BREAKING] drop v1 endpoints (brk789a)" in content

    def test_custom_types_after_configured(self):
        """Unknown types follow the configured ones, alphabetically."""
        commits = [
            ClassifiedCommit(sha="a" * 10, commit_type="zeta", description="z"),
            ClassifiedCommit(sha="b" * 10, commit_type="alpha", description="a"),
            ClassifiedCommit(sha="c" * 10, commit_type=CommitType.CHORE, description="c"),
        ]

        content = render_changelog(Release(commits=commits), release_date=DAY)

        assert content.index("### Miscellaneous Chores") < content.index("### Alpha")
        assert content.index("### Alpha") < content.index("### Zeta")

    def test_custom_labels(self):
        """Configured labels name the sections."""
        commits = [ClassifiedCommit(sha="a" * 10, commit_type="security", description="cve")]

        content = render_changelog(
            Release(commits=commits),
            type_labels={"security": "Security Fixes"},
            release_date=DAY,
        )

        assert "### Security Fixes" in content

    def test_package_tags_section(self):
        """Aggregate releases list the package tags."""
        release = Release(
            version=Tag(semver.Version(0, 1, 0)),
            package_tags=[Tag(semver.Version(0, 1, 0), package="one")],
        )

        content = render_changelog(release, release_date=DAY)

        assert "### Packages\n\n- one-0.1.0" in content
        assert "No notable changes." not in content

    def test_rejected_commits_listed_on_request(self, sample_commits):
        """Previews can list non-conforming commits after the release sections."""
        classification = classify_commits(sample_commits)
        release = Release(
            commits=classification.classified,
            rejected=[commit for commit, _ in classification.rejected],
        )

        content = render_changelog(release, release_date=DAY, include_rejected=True)

        assert content.endswith("### Non-conforming commits\n\n- Updated stuff (bad3333)")
        assert "Updated stuff" not in render_changelog(release, release_date=DAY)

    def test_only_rejected_commits(self, commit_factory):
        """Rejected commits alone are not notable changes."""
        release = Release(rejected=[commit_factory("wip", sha="0123456789")])

        content = render_changelog(release, release_date=DAY, include_rejected=True)

        assert content == (
            "## Unreleased - 2024-01-15\n\nNo notable changes.\n\n"
            "### Non-conforming commits\n\n- wip (0123456)"
        )

    def test_no_trailing_newline(self, feat_commit):
        """Rendered text is stripped at the end."""
        release = Release(commits=classify_commits([feat_commit]).classified)

        assert not render_changelog(release, release_date=DAY).endswith("\n")


class TestWriteChangelog:
    """Tests for write_changelog()."""

    def test_creates_file(self, tmp_path: Path):
        """A missing file is created with the header."""
        path = tmp_path / "docs" / "CHANGELOG.md"

        write_changelog(path, "## 0.1.0 - 2024-01-15")

        assert path.read_text() == "# Changelog\n\n## 0.1.0 - 2024-01-15\n"

    def test_inserts_below_header(self, tmp_path: Path):
        """New releases go above older ones, below the header."""
        path = tmp_path / "CHANGELOG.md"
        path.write_text("# Changelog\n\n## 0.1.0 - 2024-01-01\n\n- old\n")

        write_changelog(path, "## 0.2.0 - 2024-01-15")

        assert path.read_text() == (
            "# Changelog\n\n## 0.2.0 - 2024-01-15\n\n## 0.1.0 - 2024-01-01\n\n- old\n"
        )

    def test_prepends_without_header(self, tmp_path: Path):
        """Files without the header get the release prepended."""
        path = tmp_path / "HISTORY.md"
        path.write_text("legacy notes\n")

        write_changelog(path, "## 1.0.0 - 2024-01-15")

        assert path.read_text() == "## 1.0.0 - 2024-01-15\n\nlegacy notes\n"
