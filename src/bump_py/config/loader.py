"""Configuration loading from pyproject.toml.

bump-py reads its settings from the ``[tool.bump-py]`` table. When no
``pyproject.toml`` exists the defaults are used and a warning is logged,
since bumping with default settings is legal but rarely intended.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bump_py.config.models import BumpPyConfig
from bump_py.exceptions import ConfigNotFoundError, ConfigValidationError
from bump_py.logging import get_logger

TOOL_KEY = "bump-py"

logger = get_logger("config")


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, walking up from ``start``.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists in ``start`` or any parent
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_bump_py_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the [tool.bump-py] table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def parse_config(data: dict[str, Any], source: Path | str = "<config>") -> BumpPyConfig:
    try:
        return BumpPyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid [tool.{TOOL_KEY}] configuration in {source}:\n{e}"
        ) from e


def load_config(path: Path | None = None) -> BumpPyConfig:
    """Load configuration for the project at ``path``.

    Returns:
        The validated configuration; defaults when no pyproject.toml exists
    """
    try:
        pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        logger.warning(
            "Using 'bump-py' with the default configuration. "
            "Add a [tool.%s] table to pyproject.toml to configure bumps.",
            TOOL_KEY,
        )
        return BumpPyConfig()

    data = extract_bump_py_config(load_pyproject_toml(pyproject_path))
    if not data:
        logger.debug("No [tool.%s] table in %s, using defaults", TOOL_KEY, pyproject_path)
    return parse_config(data, pyproject_path)
