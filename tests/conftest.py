"""Shared test fixtures."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from bump_py.config.models import BumpPyConfig
from bump_py.core.engine import ReleaseEngine
from bump_py.core.hooks import ProcessResult
from bump_py.exceptions import GitError
from bump_py.vcs.base import Commit, TagRef

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

RELEASE_DATE = date(2024, 1, 15)


def make_commit(message: str, sha: str = "abc1234def", files: Iterable[str] = ()) -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime(2024, 1, 1, 12, 0, 0),
        files=tuple(files),
    )


class FakeRepository:
    """In-memory revision store with a linear history."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.commits: list[Commit] = []
        self.tags: dict[str, str] = {}
        self.status: list[str] = []
        self.branch: str | None = "main"
        self.stashes: list[str] = []
        self.changesets: list[str] = []
        self.fail_tagging = False

    # Test helpers

    def commit(self, message: str, files: Iterable[str] = ()) -> Commit:
        sha = f"{len(self.commits) + 1:04d}" + "f" * 36
        commit = make_commit(message, sha=sha, files=files)
        self.commits.append(commit)
        return commit

    def tag(self, name: str, sha: str | None = None) -> None:
        self.tags[name] = sha or self.commits[-1].sha

    def _index(self, sha: str) -> int:
        for index, commit in enumerate(self.commits):
            if commit.sha == sha:
                return index
        raise GitError(f"unknown revision {sha}")

    # RevisionStore

    def list_tags(self) -> list[TagRef]:
        return [TagRef(name, sha) for name, sha in self.tags.items()]

    def first_commit_id(self) -> str:
        if not self.commits:
            raise GitError("Repository has no commits")
        return self.commits[0].sha

    def head_commit_id(self) -> str:
        if not self.commits:
            raise GitError("Repository has no commits")
        return self.commits[-1].sha

    def resolve_ref(self, ref: str) -> str:
        if ref == "HEAD":
            return self.head_commit_id()
        if ref in self.tags:
            return self.tags[ref]
        for commit in self.commits:
            if commit.sha.startswith(ref):
                return commit.sha
        raise GitError(f"unknown revision {ref}")

    def commits_in_range(
        self, from_id: str | None, to_id: str, *, inclusive: bool = False
    ) -> list[Commit]:
        end = self._index(to_id) + 1
        if from_id is None:
            return self.commits[:end]
        start = self._index(from_id) + (0 if inclusive else 1)
        return self.commits[start:end]

    def working_tree_status(self, *, include_untracked: bool = True) -> list[str]:
        if include_untracked:
            return list(self.status)
        return [line for line in self.status if not line.startswith("??")]

    def current_branch_name(self) -> str | None:
        return self.branch

    def create_tag(self, name: str, message: str | None = None) -> None:
        if self.fail_tagging:
            raise GitError(f"git tag {name} failed")
        if name in self.tags:
            raise GitError(f"tag '{name}' already exists")
        self.tags[name] = self.head_commit_id()

    def commit_changeset(self, message: str) -> None:
        self.changesets.append(message)
        self.commit(message)

    def stash(self, label: str) -> str | None:
        self.stashes.append(label)
        return f"stash@{{{len(self.stashes) - 1}}}"


class RecordingRunner:
    """Process runner that records commands; ``false`` fails, ``missing`` cannot start."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[str, ...], Path]] = []

    @property
    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _ in self.calls]

    def execute(self, argv: Sequence[str], cwd: Path) -> ProcessResult:
        self.calls.append((tuple(argv), cwd))
        if argv[0] == "missing":
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        if argv[0] == "false":
            return ProcessResult(1, "hook failed")
        return ProcessResult(0, "ok")


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo handlers installed by CLI runs so caplog sees bump_py records."""
    yield
    logger = logging.getLogger("bump_py")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def commit_factory() -> Callable[..., Commit]:
    """Build raw commits: ``commit_factory(message, sha=..., files=...)``."""
    return make_commit


@pytest.fixture
def repo(tmp_path: Path) -> FakeRepository:
    return FakeRepository(tmp_path)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def make_engine(
    repo: FakeRepository, runner: RecordingRunner, tmp_path: Path
) -> Callable[..., ReleaseEngine]:
    """Build a ReleaseEngine over the fake repository."""

    def _make(config: BumpPyConfig | None = None) -> ReleaseEngine:
        return ReleaseEngine(
            repo,
            config or BumpPyConfig(),
            root=tmp_path,
            runner=runner,
            release_date=RELEASE_DATE,
        )

    return _make


@pytest.fixture
def monorepo_config() -> BumpPyConfig:
    return BumpPyConfig.model_validate(
        {
            "packages": {
                "one": {"path": "one"},
                "two": {"path": "two"},
            }
        }
    )


@pytest.fixture
def feat_commit() -> Commit:
    return make_commit("feat: add user authentication", sha="feat123abc")


@pytest.fixture
def fix_commit() -> Commit:
    return make_commit("fix(core): handle empty input", sha="fix456abc")


@pytest.fixture
def breaking_commit() -> Commit:
    return make_commit("feat(api)!: drop v1 endpoints", sha="brk789abc")


@pytest.fixture
def sample_commits(
    feat_commit: Commit, fix_commit: Commit, breaking_commit: Commit
) -> list[Commit]:
    return [
        feat_commit,
        fix_commit,
        breaking_commit,
        make_commit("docs: update readme", sha="docs111abc"),
        make_commit("chore: bump dependencies", sha="chore22abc"),
        make_commit("Updated stuff", sha="bad3333abc"),
    ]


@pytest.fixture
def temp_pyproject(tmp_path: Path) -> Path:
    """A project directory with a [tool.bump-py] table."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.bump-py]
tag_prefix = "v"
branch_whitelist = ["main", "release/**"]

[tool.bump-py.hooks]
pre_bump = ["echo {version}"]

[tool.bump-py.bump_profiles.ci]
post_bump = ["git push origin {tag}"]

[tool.bump-py.packages.one]
path = "packages/one"

[tool.bump-py.packages.two]
path = "packages/two"
include = ["packages/two/**", "shared/**"]
"""
    )
    return tmp_path
