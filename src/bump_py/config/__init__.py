"""Configuration management for bump-py."""

from __future__ import annotations

from bump_py.config.loader import load_config
from bump_py.config.models import (
    BumpPyConfig,
    ChangelogConfig,
    CommitsConfig,
    HooksConfig,
    PackageConfig,
)

__all__ = [
    "BumpPyConfig",
    "ChangelogConfig",
    "CommitsConfig",
    "HooksConfig",
    "PackageConfig",
    "load_config",
]
