"""bump-py: semantic version bumps derived from conventional commits."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from bump_py.config import BumpPyConfig, load_config
from bump_py.core.engine import BumpOutcome, MonorepoOutcome, ReleaseEngine
from bump_py.core.version import Tag, VersionIncrement
from bump_py.exceptions import BumpPyError, BumpRolledBackError, NothingToBumpError

try:
    __version__ = _pkg_version("bump-py")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"

__all__ = [
    "BumpOutcome",
    "BumpPyConfig",
    "BumpPyError",
    "BumpRolledBackError",
    "MonorepoOutcome",
    "NothingToBumpError",
    "ReleaseEngine",
    "Tag",
    "VersionIncrement",
    "__version__",
    "load_config",
]
