"""Revision store backed by the git command line.

All git access goes through :meth:`GitRepository._git`, which runs git as
a subprocess in the repository root and turns failures into
:class:`~bump_py.exceptions.GitError`.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

from bump_py.exceptions import GitError
from bump_py.logging import get_logger
from bump_py.vcs.base import Commit, TagRef

logger = get_logger("vcs.git")

# Record and field separators for `git log` output parsing.
_RS = "\x1e"
_FS = "\x1f"
_LOG_FORMAT = f"{_RS}%H{_FS}%an{_FS}%ae{_FS}%aI{_FS}%B{_FS}"


class GitRepository:
    """A git working copy."""

    def __init__(self, path: Path | str | None = None) -> None:
        start = Path(path) if path else Path.cwd()
        toplevel = self._run(["rev-parse", "--show-toplevel"], cwd=start)
        self.path = Path(toplevel)

    # -------------------------------------------------------------------------
    # Subprocess plumbing
    # -------------------------------------------------------------------------

    @staticmethod
    def _run(
        args: list[str], *, cwd: Path, check: bool = True, strip: bool = True
    ) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e

        if check and result.returncode != 0:
            raise GitError(f"git {' '.join(args)} failed", stderr=result.stderr)
        # \x1e and \x1f count as whitespace for str.strip(); log output keeps them.
        return result.stdout.strip() if strip else result.stdout

    def _git(self, *args: str, check: bool = True, strip: bool = True) -> str:
        logger.debug("git %s", " ".join(args))
        return self._run(list(args), cwd=self.path, check=check, strip=strip)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_tags(self) -> list[TagRef]:
        """List tags reachable from HEAD, peeling annotated tags to their commit."""
        output = self._git(
            "for-each-ref",
            "refs/tags",
            "--merged",
            "HEAD",
            "--format=%(refname:short)\t%(objectname)\t%(*objectname)",
        )
        tags = []
        for line in output.splitlines():
            name, objectname, peeled = (line.split("\t") + ["", ""])[:3]
            tags.append(TagRef(name=name, commit_id=peeled or objectname))
        return tags

    def first_commit_id(self) -> str:
        roots = self._git("rev-list", "--max-parents=0", "HEAD").splitlines()
        if not roots:
            raise GitError("Repository has no commits")
        return roots[-1]

    def head_commit_id(self) -> str:
        return self._git("rev-parse", "HEAD")

    def resolve_ref(self, ref: str) -> str:
        return self._git("rev-parse", "--verify", f"{ref}^{{commit}}")

    def commits_in_range(
        self, from_id: str | None, to_id: str, *, inclusive: bool = False
    ) -> list[Commit]:
        """Return commits oldest first.

        Args:
            from_id: Lower boundary; ``None`` means every ancestor of ``to_id``
            to_id: Upper boundary, always included
            inclusive: Include ``from_id`` itself in the result
        """
        if from_id is None:
            return self._log(to_id)

        commits = self._log(f"{from_id}..{to_id}")
        if inclusive:
            commits = self._log(from_id, "-1") + commits
        return commits

    def _log(self, *revs: str) -> list[Commit]:
        output = self._git(
            "log", "--reverse", f"--format={_LOG_FORMAT}", "--name-only", *revs, strip=False
        )
        return [_parse_log_record(record) for record in output.split(_RS)[1:]]

    def working_tree_status(self, *, include_untracked: bool = True) -> list[str]:
        args = ["status", "--porcelain"]
        if not include_untracked:
            args.append("--untracked-files=no")
        return [line for line in self._git(*args, strip=False).splitlines() if line.strip()]

    def current_branch_name(self) -> str | None:
        branch = self._git("symbolic-ref", "--short", "-q", "HEAD", check=False)
        return branch or None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_tag(self, name: str, message: str | None = None) -> None:
        if message:
            self._git("tag", "-a", name, "-m", message)
        else:
            self._git("tag", name)

    def commit_changeset(self, message: str) -> None:
        self._git("add", "--all")
        self._git("commit", "--allow-empty", "-m", message)

    def stash(self, label: str) -> str | None:
        """Stash all local changes, untracked files included.

        Returns:
            The stash reference, or ``None`` when there was nothing to stash
        """
        output = self._git("stash", "push", "--include-untracked", "-m", label)
        if "No local changes to save" in output:
            return None
        return "stash@{0}"


def _parse_log_record(record: str) -> Commit:
    sha, author_name, author_email, date, body, files = record.split(_FS, 5)
    return Commit(
        sha=sha.strip(),
        message=body.strip(),
        author_name=author_name,
        author_email=author_email,
        date=datetime.fromisoformat(date),
        files=tuple(line.strip() for line in files.splitlines() if line.strip()),
    )
