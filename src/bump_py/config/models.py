"""Pydantic models for the [tool.bump-py] configuration table."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bump_py.exceptions import ConfigError

HookType = Literal["pre_bump", "post_bump"]

DEFAULT_COMMIT_TYPES: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance Improvements",
    "revert": "Revert",
    "docs": "Documentation",
    "style": "Style",
    "refactor": "Refactoring",
    "test": "Tests",
    "build": "Build System",
    "ci": "Continuous Integration",
    "chore": "Miscellaneous Chores",
}


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class HooksConfig(_StrictModel):
    """Hook command templates for one hook set (default, profile or package)."""

    pre_bump: list[str] = Field(default_factory=list)
    post_bump: list[str] = Field(default_factory=list)

    def get(self, hook_type: HookType) -> list[str]:
        return self.pre_bump if hook_type == "pre_bump" else self.post_bump


class PackageConfig(_StrictModel):
    """A monorepo package.

    Attributes:
        path: Package directory, relative to the repository root. Package
              hooks run with this directory as their working directory.
        include: Glob patterns (relative to the repository root) a commit
                 must touch to count for this package. Defaults to
                 everything under ``path``.
        changelog_path: Changelog file for this package.
        hooks: Package hooks; they replace the repository hooks entirely.
        bump_profiles: Named alternative hook sets for this package.
    """

    path: Path
    include: list[str] = Field(default_factory=list)
    changelog_path: Path | None = None
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    bump_profiles: dict[str, HooksConfig] = Field(default_factory=dict)

    @property
    def include_patterns(self) -> list[str]:
        if self.include:
            return list(self.include)
        return [f"{self.path.as_posix().rstrip('/')}/**"]

    @property
    def effective_changelog_path(self) -> Path:
        return self.changelog_path or self.path / "CHANGELOG.md"


class CommitsConfig(_StrictModel):
    """Conventional commit interpretation."""

    breaking_pattern: str = r"BREAKING[ -]CHANGE"
    types: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMIT_TYPES))

    @field_validator("types")
    @classmethod
    def _normalize_types(cls, value: dict[str, str]) -> dict[str, str]:
        merged = dict(DEFAULT_COMMIT_TYPES)
        merged.update({key.lower(): label for key, label in value.items()})
        return merged


class ChangelogConfig(_StrictModel):
    """Changelog file settings."""

    enabled: bool = True
    path: Path = Path("CHANGELOG.md")
    header: str = "# Changelog"


class BumpPyConfig(_StrictModel):
    """Root configuration.

    Passed explicitly to the release engine and every component that needs
    it; there is no global settings object.
    """

    tag_prefix: str | None = None
    branch_whitelist: list[str] = Field(default_factory=list)
    skip_untracked: bool = False
    bump_commit_message: str = "chore(version): {tag}"
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    bump_profiles: dict[str, HooksConfig] = Field(default_factory=dict)
    packages: dict[str, PackageConfig] = Field(default_factory=dict)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)

    @model_validator(mode="after")
    def _check_packages(self) -> BumpPyConfig:
        for name in self.packages:
            if not name or "/" in name:
                raise ValueError(f"invalid package name {name!r}")
        return self

    @property
    def effective_tag_prefix(self) -> str:
        return self.tag_prefix or ""

    @property
    def is_monorepo(self) -> bool:
        return bool(self.packages)

    def package(self, name: str) -> PackageConfig:
        try:
            return self.packages[name]
        except KeyError:
            known = ", ".join(self.packages) or "<none>"
            raise ConfigError(f"Unknown package '{name}' (configured: {known})") from None
