"""Release engine: one bump from preflight checks to a committed tag.

Each bump walks the same states::

    PREFLIGHT_CHECKED -> RANGE_RESOLVED -> VERSION_COMPUTED -> PRE_HOOKS_RUN
        -> TAGGED -> POST_HOOKS_RUN -> COMMITTED

Nothing is written until the version is computed, ordered and every hook
template has been resolved. Once files start changing, a failure moves the
bump to ROLLED_BACK: the change set is stashed (never discarded) and a
:class:`RollbackResult` is reported through :class:`BumpRolledBackError`.

A monorepo bump plans every package and the aggregate version and resolves
all of their hooks first. It then runs the package state machines in
configuration order, followed by the aggregate one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from bump_py.core.changelog import Release, render_changelog, write_changelog
from bump_py.core.commits import classify_commits, is_merge_commit
from bump_py.core.hooks import HookOrchestrator, TemplateError, hook_variables, substitute
from bump_py.core.invariants import ensure_advances, ensure_preconditions
from bump_py.core.ranges import RangeResolver, ScopeKind, VersionScope
from bump_py.core.version import (
    BumpType,
    Tag,
    VersionIncrement,
    apply_bump,
    calculate_bump,
    parse_version,
    resolve_next_version,
    summarize_commits,
)
from bump_py.exceptions import (
    BumpPyError,
    BumpRolledBackError,
    CommitParseError,
    ConfigError,
    NothingToBumpError,
)
from bump_py.logging import get_logger

if TYPE_CHECKING:
    from datetime import date

    from bump_py.config.models import BumpPyConfig
    from bump_py.core.commits import ClassifiedCommit
    from bump_py.core.hooks import ProcessRunner
    from bump_py.vcs.base import Commit, RevisionStore

logger = get_logger("engine")


class BumpState(Enum):
    PREFLIGHT_CHECKED = "preflight-checked"
    RANGE_RESOLVED = "range-resolved"
    VERSION_COMPUTED = "version-computed"
    PRE_HOOKS_RUN = "pre-hooks-run"
    TAGGED = "tagged"
    POST_HOOKS_RUN = "post-hooks-run"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled-back"


@dataclass(frozen=True)
class RollbackResult:
    """Outcome of stashing a failed bump."""

    tag: Tag
    tagged: bool
    stash_handle: str | None
    cause: BaseException
    failed_in: BumpState | None = None


@dataclass
class BumpOutcome:
    """Result of one scope's bump (or its dry run)."""

    scope: VersionScope
    previous: Tag
    tag: Tag
    bump: BumpType
    release: Release
    changelog: str
    dry_run: bool = False
    states: list[BumpState] = field(default_factory=list)

    @property
    def state(self) -> BumpState | None:
        return self.states[-1] if self.states else None


@dataclass
class MonorepoOutcome:
    aggregate: BumpOutcome
    packages: list[BumpOutcome] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class _Plan:
    scope: VersionScope
    previous: Tag
    tag: Tag
    bump: BumpType
    release: Release
    commit_message: str
    states: list[BumpState]

    @property
    def package(self) -> str | None:
        return self.scope.package


class ReleaseEngine:
    """Coordinates range resolution, versioning, changelog, tagging and hooks."""

    def __init__(
        self,
        repo: RevisionStore,
        config: BumpPyConfig,
        *,
        root: Path | None = None,
        runner: ProcessRunner | None = None,
        release_date: date | None = None,
    ) -> None:
        self.repo = repo
        self.config = config
        self.root = root or Path(repo.path)
        self.ranges = RangeResolver(repo, config)
        self.hooks = HookOrchestrator(config, self.root, runner)
        self.release_date = release_date

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def check_preconditions(self) -> None:
        ensure_preconditions(self.repo, self.config)

    def bump(
        self,
        increment: VersionIncrement,
        *,
        profile: str | None = None,
        dry_run: bool = False,
    ) -> BumpOutcome:
        """Bump the repository-wide version."""
        self.check_preconditions()
        states = [BumpState.PREFLIGHT_CHECKED]
        plan = self._plan(VersionScope.repository(), increment, states)
        return self._execute(plan, profile, dry_run)

    def bump_package(
        self,
        name: str,
        increment: VersionIncrement | None = None,
        *,
        profile: str | None = None,
        dry_run: bool = False,
    ) -> BumpOutcome:
        """Bump one monorepo package; automatic mode only sees the package's commits."""
        self.config.package(name)
        if increment is None or increment.is_automatic:
            increment = VersionIncrement.auto_package(name)

        self.check_preconditions()
        states = [BumpState.PREFLIGHT_CHECKED]
        plan = self._plan(VersionScope.for_package(name), increment, states)
        return self._execute(plan, profile, dry_run)

    def bump_monorepo(
        self,
        increment: VersionIncrement,
        *,
        profile: str | None = None,
        dry_run: bool = False,
    ) -> MonorepoOutcome:
        """Bump every package that has changes, then the aggregate version.

        Packages always bump automatically; ``increment`` governs the
        aggregate. Any fatal error aborts the remaining packages and the
        aggregate tag.

        Raises:
            NothingToBumpError: If neither packages nor global commits warrant a release
        """
        if not self.config.is_monorepo:
            raise ConfigError("No packages configured, cannot run a monorepo bump")

        self.check_preconditions()

        plans: list[_Plan] = []
        skipped: list[str] = []
        for name in self.config.packages:
            states = [BumpState.PREFLIGHT_CHECKED]
            try:
                plans.append(
                    self._plan(
                        VersionScope.for_package(name),
                        VersionIncrement.auto_package(name),
                        states,
                    )
                )
            except NothingToBumpError as e:
                logger.info("Skipping package '%s': %s", name, e)
                skipped.append(name)

        states = [BumpState.PREFLIGHT_CHECKED]
        package_bump = max((p.bump for p in plans), default=BumpType.NONE)
        aggregate_plan = self._plan(
            VersionScope.monorepo_global(), increment, states, minimum_bump=package_bump
        )
        aggregate_plan.release.package_tags = [p.tag for p in plans]

        # Every hook of every scope resolves before the first package is written.
        if not dry_run:
            for plan in [*plans, aggregate_plan]:
                self._prepare_hooks(plan, profile)

        packages = [self._execute(plan, profile, dry_run) for plan in plans]
        aggregate = self._execute(aggregate_plan, profile, dry_run)
        return MonorepoOutcome(aggregate=aggregate, packages=packages, skipped=skipped)

    def rollback(
        self,
        tag: Tag,
        cause: BaseException,
        *,
        tagged: bool,
        failed_in: BumpState | None = None,
    ) -> RollbackResult:
        """Stash the in-progress change set of a failed bump."""
        handle = self.repo.stash(f"bump-py: failed bump to {tag}")
        result = RollbackResult(
            tag=tag, tagged=tagged, stash_handle=handle, cause=cause, failed_in=failed_in
        )
        logger.error(
            "Bump to %s failed: %s. Changes stashed as %s",
            tag,
            cause,
            handle or "<nothing to stash>",
        )
        return result

    def changelog(
        self,
        *,
        from_ref: str | None = None,
        to_ref: str | None = None,
        package: str | None = None,
        at: str | None = None,
    ) -> str:
        """Render the changelog of a range without touching the repository.

        Args:
            from_ref: Lower boundary, default the latest tag of the scope
            to_ref: Upper boundary, default HEAD
            package: Restrict to one package's commits
            at: Version label to render; "Unreleased" when omitted
        """
        if package is not None:
            self.config.package(package)
            scope = VersionScope.for_package(package)
        else:
            scope = VersionScope.repository()
        commit_range = self.ranges.resolve(scope, from_ref, to_ref)
        classification = classify_commits(
            commit_range.commits, self.config.commits.breaking_pattern
        )
        prefix = self.config.effective_tag_prefix
        version = (
            Tag(parse_version(at, prefix), prefix=prefix, package=package) if at else None
        )
        release = Release(
            commits=classification.classified,
            version=version,
            rejected=[commit for commit, _ in classification.rejected],
        )
        return self._render(release, include_rejected=True)

    def check_commits(
        self, *, from_latest_tag: bool = False
    ) -> list[tuple[Commit, CommitParseError]]:
        """Return non-conforming commits, merge commits excluded."""
        head = self.repo.head_commit_id()
        latest = self.ranges.latest_tag(VersionScope.repository())
        if from_latest_tag and latest.commit_id is not None:
            commits = self.repo.commits_in_range(latest.commit_id, head)
        else:
            commits = self.repo.commits_in_range(None, head)
        classification = classify_commits(commits, self.config.commits.breaking_pattern)
        return [(c, e) for c, e in classification.rejected if not is_merge_commit(c)]

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _plan(
        self,
        scope: VersionScope,
        increment: VersionIncrement,
        states: list[BumpState],
        *,
        minimum_bump: BumpType = BumpType.NONE,
    ) -> _Plan:
        commit_range = self.ranges.resolve(scope)
        states.append(BumpState.RANGE_RESOLVED)

        classification = classify_commits(
            commit_range.commits, self.config.commits.breaking_pattern
        )
        if classification.rejected:
            logger.warning(
                "%d commit(s) in %s do not follow the conventional commit format "
                "and were ignored",
                len(classification.rejected),
                scope,
            )
        commits = classification.classified
        _log_bump_summary(commits)

        previous = commit_range.from_tag
        prefix = self.config.effective_tag_prefix
        bump = calculate_bump(commits)
        if increment.is_automatic and max(bump, minimum_bump) is not BumpType.NONE:
            # Commits of this scope and the bumped packages both count.
            bump = max(bump, minimum_bump)
            next_version = apply_bump(previous.version, bump)
        else:
            next_version = resolve_next_version(previous.version, commits, increment, prefix)
        tag = previous.with_version(next_version)
        ensure_advances(previous, tag)
        states.append(BumpState.VERSION_COMPUTED)
        logger.info("Bumping %s: %s -> %s (%s)", scope, previous, tag, increment)

        try:
            message = substitute(
                self.config.bump_commit_message, hook_variables(previous, tag, scope.package)
            )
        except TemplateError as e:
            raise ConfigError(f"Invalid bump_commit_message: {e}") from e

        release = Release(
            commits=commits,
            version=tag,
            rejected=[commit for commit, _ in classification.rejected],
        )
        return _Plan(
            scope=scope,
            previous=previous,
            tag=tag,
            bump=bump,
            release=release,
            commit_message=message,
            states=states,
        )

    def _execute(self, plan: _Plan, profile: str | None, dry_run: bool) -> BumpOutcome:
        changelog = self._render(plan.release)
        outcome = BumpOutcome(
            scope=plan.scope,
            previous=plan.previous,
            tag=plan.tag,
            bump=plan.bump,
            release=plan.release,
            changelog=changelog,
            dry_run=dry_run,
            states=plan.states,
        )
        if dry_run:
            return outcome

        # Resolve both hook lists before anything is written.
        self._prepare_hooks(plan, profile)

        try:
            if self.config.changelog.enabled:
                write_changelog(
                    self._changelog_path(plan.scope), changelog, self.config.changelog.header
                )
            self.hooks.run("pre_bump", plan.previous, plan.tag, profile, plan.package)
            outcome.states.append(BumpState.PRE_HOOKS_RUN)

            self.repo.commit_changeset(plan.commit_message)
            self.repo.create_tag(plan.tag.name)
            outcome.states.append(BumpState.TAGGED)
            logger.info("Created tag %s", plan.tag)

            self.hooks.run("post_bump", plan.previous, plan.tag, profile, plan.package)
            outcome.states.append(BumpState.POST_HOOKS_RUN)
        except (BumpPyError, OSError) as e:
            failed_in = outcome.state
            tagged = BumpState.TAGGED in outcome.states
            rollback = self.rollback(plan.tag, e, tagged=tagged, failed_in=failed_in)
            outcome.states.append(BumpState.ROLLED_BACK)
            raise BumpRolledBackError(rollback) from e

        outcome.states.append(BumpState.COMMITTED)
        return outcome

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _prepare_hooks(self, plan: _Plan, profile: str | None) -> None:
        for hook_type in ("pre_bump", "post_bump"):
            self.hooks.prepare(hook_type, plan.previous, plan.tag, profile, plan.package)

    def _render(self, release: Release, *, include_rejected: bool = False) -> str:
        return render_changelog(
            release,
            type_labels=self.config.commits.types,
            release_date=self.release_date,
            include_rejected=include_rejected,
        )

    def _changelog_path(self, scope: VersionScope) -> Path:
        if scope.kind is ScopeKind.PACKAGE and scope.package is not None:
            return self.root / self.config.package(scope.package).effective_changelog_path
        return self.root / self.config.changelog.path


def _log_bump_summary(commits: list[ClassifiedCommit]) -> None:
    summary = summarize_commits(commits)
    if summary.skipped:
        lines = "\n".join(f"    - {name}: {count}" for name, count in summary.skipped.items())
        logger.info("Skipping irrelevant commits:\n%s", lines)

    for commit in summary.bump_commits:
        if commit.is_breaking:
            logger.info(
                "Found [red]BREAKING CHANGE[/] commit %s with type: %s",
                commit.short_sha,
                commit.type_name,
            )
        elif commit.is_feature:
            logger.info("Found feature commit %s", commit.short_sha)
        else:
            logger.info("Found bug fix commit %s", commit.short_sha)
