"""Tests for configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bump_py.config.loader import (
    extract_bump_py_config,
    find_pyproject_toml,
    load_config,
    load_pyproject_toml,
    parse_config,
)
from bump_py.config.models import (
    DEFAULT_COMMIT_TYPES,
    BumpPyConfig,
    ChangelogConfig,
    CommitsConfig,
    HooksConfig,
    PackageConfig,
)
from bump_py.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError


class TestBumpPyConfig:
    """Tests for BumpPyConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = BumpPyConfig()

        assert config.tag_prefix is None
        assert config.effective_tag_prefix == ""
        assert config.branch_whitelist == []
        assert config.skip_untracked is False
        assert config.bump_commit_message == "chore(version): {tag}"
        assert not config.is_monorepo

    def test_nested_defaults(self):
        """Nested configurations have defaults."""
        config = BumpPyConfig()

        assert config.hooks.pre_bump == []
        assert config.commits.breaking_pattern == r"BREAKING[ -]CHANGE"
        assert config.commits.types == DEFAULT_COMMIT_TYPES
        assert config.changelog.enabled is True
        assert config.changelog.path == Path("CHANGELOG.md")

    def test_config_is_immutable(self):
        """Config is frozen once validated."""
        config = BumpPyConfig()

        with pytest.raises(ValueError):
            config.tag_prefix = "v"

    def test_unknown_keys_rejected(self):
        """Typos in the table are errors, not silently ignored."""
        with pytest.raises(ValueError):
            BumpPyConfig.model_validate({"tag_prefx": "v"})

    def test_unknown_package(self, monorepo_config):
        """Looking up an unconfigured package fails."""
        with pytest.raises(ConfigError, match="Unknown package 'three'"):
            monorepo_config.package("three")

    def test_invalid_package_name(self):
        """Package names are used in tag names and must not contain '/'."""
        with pytest.raises(ValueError):
            BumpPyConfig.model_validate({"packages": {"a/b": {"path": "a"}}})


class TestPackageConfig:
    """Tests for PackageConfig model."""

    def test_default_include(self):
        """Without include patterns, everything under the path counts."""
        package = PackageConfig(path=Path("packages/one/"))

        assert package.include_patterns == ["packages/one/**"]
        assert package.effective_changelog_path == Path("packages/one/CHANGELOG.md")

    def test_explicit_include(self):
        """Explicit include patterns replace the default."""
        package = PackageConfig(path=Path("two"), include=["two/**", "shared/**"])

        assert package.include_patterns == ["two/**", "shared/**"]


class TestCommitsConfig:
    """Tests for CommitsConfig model."""

    def test_custom_types_merge_with_defaults(self):
        """Custom types extend the defaults and are lowercased."""
        config = CommitsConfig(types={"Security": "Security Fixes", "feat": "New Stuff"})

        assert config.types["security"] == "Security Fixes"
        assert config.types["feat"] == "New Stuff"
        assert config.types["fix"] == "Bug Fixes"


class TestHooksConfig:
    """Tests for HooksConfig model."""

    def test_get_by_type(self):
        """Hooks are looked up by hook type."""
        hooks = HooksConfig(pre_bump=["a"], post_bump=["b"])

        assert hooks.get("pre_bump") == ["a"]
        assert hooks.get("post_bump") == ["b"]


class TestChangelogConfig:
    """Tests for ChangelogConfig model."""

    def test_defaults(self):
        """The changelog header defaults to a level one heading."""
        assert ChangelogConfig().header == "# Changelog"


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml()."""

    def test_find_in_current_dir(self, temp_pyproject: Path):
        """Find pyproject.toml in current directory."""
        assert find_pyproject_toml(temp_pyproject) == temp_pyproject.resolve() / "pyproject.toml"

    def test_find_in_parent_dir(self, temp_pyproject: Path):
        """Find pyproject.toml in a parent directory."""
        subdir = temp_pyproject / "src" / "package"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == temp_pyproject.resolve() / "pyproject.toml"

    def test_not_found(self, tmp_path: Path, monkeypatch):
        """Raise error when not found."""
        with monkeypatch.context() as m, pytest.raises(ConfigNotFoundError):
            m.setattr(Path, "is_file", lambda self: False)
            find_pyproject_toml(tmp_path)


class TestLoadPyprojectToml:
    """Tests for load_pyproject_toml()."""

    def test_load_valid(self, temp_pyproject: Path):
        """Load valid pyproject.toml."""
        data = load_pyproject_toml(temp_pyproject / "pyproject.toml")

        assert data["project"]["name"] == "test-project"
        assert "bump-py" in data["tool"]

    def test_load_invalid_toml(self, tmp_path: Path):
        """Raise error for invalid TOML."""
        path = tmp_path / "pyproject.toml"
        path.write_text("invalid = [toml")

        with pytest.raises(ConfigValidationError, match="Invalid TOML"):
            load_pyproject_toml(path)

    def test_load_missing_file(self, tmp_path: Path):
        """Raise error for a missing file."""
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "pyproject.toml")


class TestExtractBumpPyConfig:
    """Tests for extract_bump_py_config()."""

    def test_extract_existing(self):
        """Extract existing config."""
        data = {"tool": {"bump-py": {"tag_prefix": "v"}}}

        assert extract_bump_py_config(data) == {"tag_prefix": "v"}

    def test_extract_missing(self):
        """Return empty dict for missing config."""
        assert extract_bump_py_config({"tool": {"ruff": {}}}) == {}
        assert extract_bump_py_config({}) == {}


class TestParseConfig:
    """Tests for parse_config()."""

    def test_validation_error_names_source(self):
        """Validation errors mention the table and the file."""
        with pytest.raises(ConfigValidationError, match=r"\[tool.bump-py\].*pyproject.toml"):
            parse_config({"branch_whitelist": "main"}, Path("pyproject.toml"))


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_full_config(self, temp_pyproject: Path):
        """Load the complete configuration."""
        config = load_config(temp_pyproject)

        assert config.effective_tag_prefix == "v"
        assert config.branch_whitelist == ["main", "release/**"]
        assert config.hooks.pre_bump == ["echo {version}"]
        assert config.bump_profiles["ci"].post_bump == ["git push origin {tag}"]
        assert list(config.packages) == ["one", "two"]
        assert config.package("one").include_patterns == ["packages/one/**"]
        assert config.package("two").include_patterns == ["packages/two/**", "shared/**"]

    def test_missing_table_uses_defaults(self, tmp_path: Path):
        """A pyproject.toml without the table gives defaults."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')

        assert load_config(tmp_path) == BumpPyConfig()

    def test_no_pyproject_warns(self, tmp_path: Path, monkeypatch, caplog):
        """Running without any pyproject.toml warns and uses defaults."""
        def not_found(start=None):
            raise ConfigNotFoundError("missing")

        monkeypatch.setattr("bump_py.config.loader.find_pyproject_toml", not_found)

        with caplog.at_level(logging.WARNING, logger="bump_py"):
            config = load_config(tmp_path)

        assert config == BumpPyConfig()
        assert "default configuration" in caplog.text
