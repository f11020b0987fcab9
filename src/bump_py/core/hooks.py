"""Pre- and post-bump hooks.

A hook is a command template such as ``cargo set-version {version}``.
Turning it into a process happens in two pure steps, placeholder
substitution then shell-style tokenization, followed by execution through
a :class:`ProcessRunner`. Every hook of a list is resolved before the first
one runs, so a bad template never leaves a half-run hook list behind.

Placeholders:
    {version}       next version
    {tag}           next tag name
    {latest}        current version (alias: {prev_version})
    {package}       package name, empty outside a package bump
"""

from __future__ import annotations

import shlex
import string
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple, Protocol

from bump_py.exceptions import ConfigError, HookConfigError, HookExecutionError
from bump_py.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bump_py.config.models import BumpPyConfig, HookType
    from bump_py.core.version import Tag

logger = get_logger("hooks")


class TemplateError(ValueError):
    """A hook template cannot be turned into a command."""


def hook_variables(
    current: Tag | None, next_tag: Tag, package: str | None = None
) -> dict[str, str]:
    variables = {
        "version": str(next_tag.version),
        "tag": str(next_tag),
        "package": package or "",
    }
    if current is not None:
        variables["latest"] = str(current.version)
        variables["prev_version"] = str(current.version)
    return variables


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace ``{name}`` placeholders; ``{{`` and ``}}`` are literal braces.

    Raises:
        TemplateError: On malformed braces or a placeholder with no value
    """
    try:
        fields = [name for _, name, _, _ in string.Formatter().parse(template) if name is not None]
    except ValueError as e:
        raise TemplateError(f"malformed template '{template}': {e}") from e

    for name in fields:
        if name not in variables:
            raise TemplateError(f"unresolvable placeholder '{{{name}}}' in '{template}'")
    return template.format_map(variables)


def tokenize(command: str) -> list[str]:
    """Split a command string into argv, honouring shell quoting.

    Raises:
        TemplateError: On unbalanced quotes or an empty command
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise TemplateError(f"cannot parse command '{command}': {e}") from e
    if not argv:
        raise TemplateError("empty command")
    return argv


@dataclass(frozen=True)
class Hook:
    """A hook resolved into a runnable command."""

    index: int
    template: str
    command: str
    argv: tuple[str, ...]


class ProcessResult(NamedTuple):
    exit_code: int
    output: str


class ProcessRunner(Protocol):
    def execute(self, argv: Sequence[str], cwd: Path) -> ProcessResult: ...


class SubprocessRunner:
    """Runs hook commands without a shell, stdout and stderr combined."""

    def execute(self, argv: Sequence[str], cwd: Path) -> ProcessResult:
        result = subprocess.run(
            list(argv),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
        return ProcessResult(result.returncode, result.stdout or "")


def _display_name(hook_type: HookType) -> str:
    return hook_type.replace("_", "-")


class HookOrchestrator:
    """Picks the hook list for a bump, resolves it and runs it in order."""

    def __init__(
        self, config: BumpPyConfig, root: Path, runner: ProcessRunner | None = None
    ) -> None:
        self.config = config
        self.root = root
        self.runner = runner or SubprocessRunner()

    def resolve_templates(
        self,
        hook_type: HookType,
        profile: str | None = None,
        package: str | None = None,
    ) -> tuple[str, list[str]]:
        """Return ``(scope description, templates)`` for a bump.

        The most specific configured list wins and replaces the broader
        ones: package profile, then package, then profile, then default.
        """
        if package is not None:
            package_config = self.config.package(package)
            if profile is not None and profile in package_config.bump_profiles:
                return (
                    f"package '{package}' bump profile '{profile}'",
                    package_config.bump_profiles[profile].get(hook_type),
                )
            return f"package '{package}'", package_config.hooks.get(hook_type)

        if profile is not None:
            if profile not in self.config.bump_profiles:
                raise ConfigError(f"Unknown bump profile '{profile}'")
            return f"bump profile '{profile}'", self.config.bump_profiles[profile].get(hook_type)

        return "default", self.config.hooks.get(hook_type)

    def prepare(
        self,
        hook_type: HookType,
        current: Tag | None,
        next_tag: Tag,
        profile: str | None = None,
        package: str | None = None,
    ) -> list[Hook]:
        """Resolve every hook of the applicable list.

        Raises:
            HookConfigError: For the first template that cannot be resolved
        """
        scope, templates = self.resolve_templates(hook_type, profile, package)
        variables = hook_variables(current, next_tag, package)

        hooks = []
        for index, template in enumerate(templates):
            try:
                command = substitute(template, variables)
                argv = tokenize(command)
            except TemplateError as e:
                raise HookConfigError(
                    str(e), hook_type=_display_name(hook_type), scope=scope, index=index
                ) from e
            hooks.append(Hook(index=index, template=template, command=command, argv=tuple(argv)))
        return hooks

    def working_directory(self, package: str | None = None) -> Path:
        if package is None:
            return self.root
        return self.root / self.config.package(package).path

    def run(
        self,
        hook_type: HookType,
        current: Tag | None,
        next_tag: Tag,
        profile: str | None = None,
        package: str | None = None,
    ) -> list[Hook]:
        """Run the applicable hooks sequentially, stopping at the first failure.

        Returns:
            The hooks that ran

        Raises:
            HookConfigError: If any template cannot be resolved (nothing runs)
            HookExecutionError: For the first hook that fails
        """
        hooks = self.prepare(hook_type, current, next_tag, profile, package)
        if not hooks:
            return []

        name = _display_name(hook_type)
        cwd = self.working_directory(package)
        logger.info("[bold underline]\\[%s%s][/]", name, f"-{package}" if package else "")

        for hook in hooks:
            logger.info("\\[%s]", hook.command)
            try:
                result = self.runner.execute(hook.argv, cwd)
            except OSError as e:
                raise HookExecutionError(
                    hook_type=name,
                    index=hook.index,
                    command=hook.command,
                    exit_code=None,
                    output=str(e),
                ) from e

            if result.output.strip():
                logger.debug(result.output.rstrip())
            if result.exit_code != 0:
                raise HookExecutionError(
                    hook_type=name,
                    index=hook.index,
                    command=hook.command,
                    exit_code=result.exit_code,
                    output=result.output,
                )
        return hooks
