"""Revision store contract and the raw records it produces."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class Commit:
    """A raw commit as read from the revision store."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime
    files: tuple[str, ...] = field(default_factory=tuple)

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def summary(self) -> str:
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True)
class TagRef:
    """A tag name and the commit it points at."""

    name: str
    commit_id: str


@runtime_checkable
class RevisionStore(Protocol):
    """Everything the release engine needs from version control.

    The engine assumes exclusive access to the repository for the duration
    of one bump. ``path`` is the repository root; hooks and changelog paths
    resolve against it.
    """

    path: Path

    def list_tags(self) -> list[TagRef]: ...

    def first_commit_id(self) -> str: ...

    def head_commit_id(self) -> str: ...

    def resolve_ref(self, ref: str) -> str: ...

    def commits_in_range(
        self, from_id: str | None, to_id: str, *, inclusive: bool = False
    ) -> list[Commit]: ...

    def working_tree_status(self, *, include_untracked: bool = True) -> list[str]: ...

    def current_branch_name(self) -> str | None: ...

    def create_tag(self, name: str, message: str | None = None) -> None: ...

    def commit_changeset(self, message: str) -> None: ...

    def stash(self, label: str) -> str | None: ...
