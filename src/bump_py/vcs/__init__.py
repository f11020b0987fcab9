"""Version control access for bump-py."""

from __future__ import annotations

from bump_py.vcs.base import Commit, RevisionStore, TagRef
from bump_py.vcs.git import GitRepository

__all__ = ["Commit", "GitRepository", "RevisionStore", "TagRef"]
