"""Install, diff and removal pipelines for deployable units.

Each call is independent: nothing is retried, nothing is cached between
calls, and every failure comes back as data on the returned outcome. The
exact command line of every external call that was actually issued is
recorded in order on the outcome.

Deploy state machine::

    START -> namespace ensured (fatal)
          -> release: repo add/update (best effort) -> dependency update (fatal)
                      -> template + write rendered/ (best effort) -> upgrade --install
          -> raw:     apply -f <unit> --recursive
          -> DONE
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, assert_never

from loguru import logger

from endfield.manifests.models import Origin

from .constants import DeploymentConstants, UnitPaths
from .rendering import RenderManager

if TYPE_CHECKING:
    from .shell_commands import CommandResult, ShellCommands

# =============================================================================
# Targets
# =============================================================================


@dataclass(frozen=True)
class RawTarget:
    """A unit whose manifests are authored as plain files under ``unit_dir``."""

    unit_dir: Path


@dataclass(frozen=True)
class ReleaseTarget:
    """A unit managed as a chart release.

    Attributes:
        unit_dir: Unit directory holding ``helm/`` and ``rendered/``
        release_name: Release name
        values_file: Values override; defaults to ``helm/values.yaml``
        repo_name: Chart repository name to register before deploying
        repo_url: Chart repository URL to register before deploying
    """

    unit_dir: Path
    release_name: str
    values_file: str | None = None
    repo_name: str | None = None
    repo_url: str | None = None


DeployTarget = RawTarget | ReleaseTarget


def target_origin(target: DeployTarget) -> Origin:
    match target:
        case RawTarget():
            return Origin.RAW
        case ReleaseTarget():
            return Origin.RELEASE
        case _:
            assert_never(target)


# =============================================================================
# Outcomes
# =============================================================================


@dataclass(frozen=True)
class DeployOutcome:
    """Result of one deploy or removal run.

    Attributes:
        resource_id: Unit the run was for
        namespace: Target namespace
        origin: raw or release
        stdout: Output of the terminal command
        stderr: Error output of the terminal or failing command
        success: Whether the run reached DONE without a fatal failure
        commands: Command lines issued, in execution order
        warnings: Non-fatal failures along the way
        error: The fatal failure, None on success
    """

    resource_id: str
    namespace: str
    origin: Origin
    stdout: str = ""
    stderr: str = ""
    success: bool = False
    commands: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class DiffOutcome:
    """Result of comparing a unit against live cluster state.

    ``has_changes`` is driven by the presence of diff text alone.
    """

    resource_id: str
    diff: str = ""
    has_changes: bool = False
    error: str | None = None
    commands: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class _CommandLog:
    """Ordered audit trail of issued command lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def record(self, result: CommandResult) -> CommandResult:
        self.lines.append(result.command)
        return result


# =============================================================================
# Orchestrator
# =============================================================================


class DeployOrchestrator:
    """Sequences helm and kubectl calls for deploy, diff and remove.

    Attributes:
        commands: Shell command executor
        renderer: Writes rendered output during release deploys
        install_wait: Block on release install until resources are ready
        install_timeout: Wait limit when ``install_wait`` is set
    """

    def __init__(
        self,
        commands: ShellCommands,
        *,
        renderer: RenderManager | None = None,
        install_wait: bool = False,
        install_timeout: str | None = None,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            commands: Shell command executor
            renderer: Optional render manager (built from commands if omitted)
            install_wait: Whether release installs wait for convergence
            install_timeout: Wait limit for release installs
            constants: Optional deployment constants
        """
        self.commands = commands
        self.constants = constants or DeploymentConstants()
        self.renderer = renderer or RenderManager(commands, self.constants)
        self.install_wait = install_wait
        self.install_timeout = install_timeout or self.constants.INSTALL_TIMEOUT

    def ensure_namespace(self, namespace: str, log: _CommandLog) -> str | None:
        """Create the namespace unless it already exists.

        Returns:
            Error text if creation failed, None otherwise
        """
        if log.record(self.commands.kubectl.get_namespace(namespace)).success:
            return None
        created = log.record(self.commands.kubectl.create_namespace(namespace))
        if created.success:
            logger.info(f"Created namespace {namespace}")
            return None
        return f"Cannot create namespace {namespace}: {created.stderr.strip()}"

    # =========================================================================
    # Deploy
    # =========================================================================

    def deploy(
        self, resource_id: str, namespace: str, target: DeployTarget
    ) -> DeployOutcome:
        """Install or upgrade a unit.

        Args:
            resource_id: Unit identifier, echoed on the outcome
            namespace: Target namespace, ensured first
            target: Raw or release target

        Returns:
            DeployOutcome with the full command log
        """
        log = _CommandLog()
        origin = target_origin(target)
        logger.info(f"Deploying {resource_id} ({origin}) to {namespace}")

        ns_error = self.ensure_namespace(namespace, log)
        if ns_error is not None:
            return DeployOutcome(
                resource_id=resource_id,
                namespace=namespace,
                origin=origin,
                stderr=ns_error,
                commands=log.lines,
                error=ns_error,
            )

        match target:
            case ReleaseTarget():
                return self._deploy_release(resource_id, namespace, target, log)
            case RawTarget():
                result = log.record(
                    self.commands.kubectl.apply(target.unit_dir, recursive=True)
                )
                return self._terminal(resource_id, namespace, origin, result, log)
            case _:
                assert_never(target)

    def _deploy_release(
        self,
        resource_id: str,
        namespace: str,
        target: ReleaseTarget,
        log: _CommandLog,
    ) -> DeployOutcome:
        paths = UnitPaths(target.unit_dir)
        values_file = paths.resolve_values(target.values_file)
        warnings: list[str] = []

        if target.repo_name and target.repo_url:
            added = log.record(
                self.commands.helm.repo_add(target.repo_name, target.repo_url)
            )
            if not added.success:
                warnings.append(f"helm repo add failed: {added.stderr.strip()}")
            updated = log.record(self.commands.helm.repo_update())
            if not updated.success:
                warnings.append(f"helm repo update failed: {updated.stderr.strip()}")

        deps = log.record(self.commands.helm.dependency_update(paths.chart_dir))
        if not deps.success:
            error = f"helm dependency update failed: {deps.stderr.strip()}"
            logger.warning(f"{resource_id}: {error}")
            return DeployOutcome(
                resource_id=resource_id,
                namespace=namespace,
                origin=Origin.RELEASE,
                stderr=error,
                commands=log.lines,
                warnings=warnings,
                error=error,
            )

        rendered = log.record(
            self.commands.helm.template(
                target.release_name, paths.chart_dir, namespace, values_file
            )
        )
        if rendered.success:
            outcome = self.renderer.write_output(paths.rendered_dir, rendered.stdout)
            warnings.extend(outcome.warnings)
            if outcome.error:
                warnings.append(outcome.error)
        else:
            warnings.append(f"helm template failed: {rendered.stderr.strip()}")
            logger.warning(f"{resource_id}: render skipped, continuing with install")

        installed = log.record(
            self.commands.helm.upgrade_install(
                target.release_name,
                paths.chart_dir,
                namespace,
                values_file,
                wait=self.install_wait,
                timeout=self.install_timeout,
            )
        )
        return self._terminal(
            resource_id, namespace, Origin.RELEASE, installed, log, warnings
        )

    def _terminal(
        self,
        resource_id: str,
        namespace: str,
        origin: Origin,
        result: CommandResult,
        log: _CommandLog,
        warnings: list[str] | None = None,
    ) -> DeployOutcome:
        if result.success:
            logger.info(f"{resource_id}: {result.command} succeeded")
        else:
            logger.warning(f"{resource_id}: {result.command} failed")
        return DeployOutcome(
            resource_id=resource_id,
            namespace=namespace,
            origin=origin,
            stdout=result.stdout,
            stderr=result.stderr,
            success=result.success,
            commands=log.lines,
            warnings=warnings or [],
            error=None if result.success else result.stderr.strip() or "command failed",
        )

    # =========================================================================
    # Remove
    # =========================================================================

    def remove(
        self, resource_id: str, namespace: str, target: DeployTarget
    ) -> DeployOutcome:
        """Remove a unit's resources from the cluster; files stay on disk.

        Removing something that is already gone succeeds.
        """
        log = _CommandLog()
        match target:
            case ReleaseTarget():
                result = log.record(
                    self.commands.helm.uninstall(target.release_name, namespace)
                )
            case RawTarget():
                result = log.record(
                    self.commands.kubectl.delete(target.unit_dir, recursive=True)
                )
            case _:
                assert_never(target)
        origin = target_origin(target)
        return self._terminal(resource_id, namespace, origin, result, log)

    # =========================================================================
    # Diff
    # =========================================================================

    def diff(
        self, resource_id: str, namespace: str, target: DeployTarget
    ) -> DiffOutcome:
        """Compare a unit with live cluster state.

        Release targets try the helm-diff plugin first and fall back to
        diffing the last rendered output. A non-zero exit from a diff tool
        only counts as an error when it produced no diff text.
        """
        log = _CommandLog()
        match target:
            case ReleaseTarget():
                return self._diff_release(resource_id, namespace, target, log)
            case RawTarget():
                result = log.record(
                    self.commands.kubectl.diff(target.unit_dir, recursive=True)
                )
                return self._diff_outcome(resource_id, result, log)
            case _:
                assert_never(target)

    def _diff_release(
        self,
        resource_id: str,
        namespace: str,
        target: ReleaseTarget,
        log: _CommandLog,
    ) -> DiffOutcome:
        paths = UnitPaths(target.unit_dir)
        helm_diff = log.record(
            self.commands.helm.diff_upgrade(
                target.release_name,
                paths.chart_dir,
                namespace,
                paths.resolve_values(target.values_file),
            )
        )
        if helm_diff.success or helm_diff.stdout.strip():
            return self._diff_outcome(resource_id, helm_diff, log)

        helm_error = helm_diff.stderr.strip() or "no output"
        if not paths.rendered_dir.is_dir():
            return DiffOutcome(
                resource_id=resource_id,
                error=(
                    f"helm diff failed ({helm_error}) and no rendered output "
                    f"exists at {paths.rendered_dir}"
                ),
                commands=log.lines,
            )

        fallback = log.record(self.commands.kubectl.diff(paths.rendered_dir))
        return self._diff_outcome(
            resource_id,
            fallback,
            log,
            warnings=[f"helm diff unavailable, compared rendered output: {helm_error}"],
        )

    def _diff_outcome(
        self,
        resource_id: str,
        result: CommandResult,
        log: _CommandLog,
        warnings: list[str] | None = None,
    ) -> DiffOutcome:
        has_changes = bool(result.stdout.strip())
        error = None
        if not has_changes and result.stderr.strip():
            error = result.stderr.strip()
        return DiffOutcome(
            resource_id=resource_id,
            diff=result.stdout,
            has_changes=has_changes,
            error=error,
            commands=log.lines,
            warnings=warnings or [],
        )
