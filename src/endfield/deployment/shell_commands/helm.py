"""Helm command abstractions.

Chart commands run with the unit's chart directory as working directory and
address the chart as ``.``, so logged command lines stay short and stable.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Tool availability (version)
    - Repository management (repo add, repo update)
    - Chart preparation (dependency update, template)
    - Release management (upgrade --install, uninstall, diff upgrade)
    """

    def __init__(self, runner: CommandRunner, binary: str = "helm") -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
            binary: Helm executable name or path
        """
        self._runner = runner
        self._binary = binary

    def _cmd(self, *args: str) -> list[str]:
        return [self._binary, *args]

    def version(self) -> CommandResult:
        """Check that helm is installed (``helm version --short``)."""
        return self._runner.run(self._cmd("version", "--short"))

    # =========================================================================
    # Repositories
    # =========================================================================

    def repo_add(self, name: str, url: str) -> CommandResult:
        return self._runner.run(self._cmd("repo", "add", name, url))

    def repo_update(self) -> CommandResult:
        return self._runner.run(self._cmd("repo", "update"))

    # =========================================================================
    # Chart Preparation
    # =========================================================================

    def dependency_update(self, chart_dir: Path) -> CommandResult:
        """Download the chart's declared dependencies into ``charts/``."""
        return self._runner.run(self._cmd("dependency", "update", "."), cwd=chart_dir)

    def template(
        self,
        release_name: str,
        chart_dir: Path,
        namespace: str,
        values_file: str,
    ) -> CommandResult:
        """Render the chart to multi-document text on stdout, CRDs included.

        Args:
            release_name: Release name used for rendering
            chart_dir: Chart directory (the working directory)
            namespace: Namespace passed to the templates
            values_file: Values file applied to the render

        Returns:
            CommandResult whose stdout holds the rendered documents
        """
        cmd = self._cmd(
            "template",
            release_name,
            ".",
            "--namespace",
            namespace,
            "--values",
            values_file,
            "--include-crds",
        )
        return self._runner.run(cmd, cwd=chart_dir)

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(
        self,
        release_name: str,
        chart_dir: Path,
        namespace: str,
        values_file: str,
        *,
        wait: bool = False,
        timeout: str = "5m",
    ) -> CommandResult:
        """Deploy or upgrade a release.

        Without ``wait`` the call returns as soon as the cluster accepts the
        manifests; convergence is not awaited.

        Args:
            release_name: Name for the release
            chart_dir: Chart directory (the working directory)
            namespace: Target namespace, created if missing
            values_file: Values file for the release
            wait: Whether to block until resources are ready
            timeout: Maximum wait, only used with ``wait``

        Returns:
            CommandResult with deployment status
        """
        cmd = self._cmd(
            "upgrade",
            "--install",
            release_name,
            ".",
            "--namespace",
            namespace,
            "--create-namespace",
            "--values",
            values_file,
            "--atomic=false",
        )
        if wait:
            cmd.extend(["--wait", "--timeout", timeout])
        return self._runner.run(cmd, cwd=chart_dir)

    def uninstall(self, release_name: str, namespace: str) -> CommandResult:
        """Uninstall a release; an absent release is not an error."""
        cmd = self._cmd(
            "uninstall", release_name, "--namespace", namespace, "--ignore-not-found"
        )
        return self._runner.run(cmd)

    def diff_upgrade(
        self,
        release_name: str,
        chart_dir: Path,
        namespace: str,
        values_file: str,
    ) -> CommandResult:
        """Diff a pending upgrade against the live release.

        Requires the helm-diff plugin; without it the command fails.
        """
        cmd = self._cmd(
            "diff",
            "upgrade",
            release_name,
            ".",
            "--namespace",
            namespace,
            "--values",
            values_file,
            "--allow-unreleased",
        )
        return self._runner.run(cmd, cwd=chart_dir)
