"""Shell command abstractions for helm and kubectl.

This package wraps the two external command-line collaborators:

- helm: chart repositories, dependency resolution, rendering, releases
- kubectl: namespaces, apply/diff/delete, queries and logs

Design Principles:
- Single Responsibility: Each module focuses on one tool
- Consistent Return Types: every call returns a CommandResult, never raises
  for a failing or missing tool
- Auditability: every result carries the exact command line that was run

Usage:
    from endfield.deployment.shell_commands import ShellCommands

    commands = ShellCommands(project_root=Path("."))
    if commands.kubectl.get_namespace("demo").success:
        print("namespace exists")
"""

from pathlib import Path

from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .types import CommandResult

__all__ = [
    "ShellCommands",
    "CommandRunner",
    "CommandResult",
    "HelmCommands",
    "KubectlCommands",
]


class ShellCommands:
    """Unified interface for helm and kubectl.

    Attributes:
        helm: Helm-related commands
        kubectl: Kubernetes kubectl commands

    Example:
        >>> commands = ShellCommands(Path("."))
        >>> commands.helm.version().success
        True
    """

    def __init__(
        self,
        project_root: Path,
        *,
        helm_binary: str = "helm",
        kubectl_binary: str = "kubectl",
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
            helm_binary: Helm executable name or path
            kubectl_binary: kubectl executable name or path
            runner: Pre-built runner, mainly for tests
        """
        self._project_root = Path(project_root)
        self._runner = runner or CommandRunner(self._project_root)

        self.helm = HelmCommands(self._runner, helm_binary)
        self.kubectl = KubectlCommands(self._runner, kubectl_binary)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root
