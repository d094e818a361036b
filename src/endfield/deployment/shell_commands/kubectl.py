"""Kubectl command abstractions.

Every method issues exactly one kubectl call through the runner and returns
its CommandResult. Parsing of tabular output lives with the callers.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner

IGNORE_NOT_FOUND = "--ignore-not-found=true"


class KubectlCommands:
    """Kubectl-related shell commands.

    Provides operations for:
    - Client availability
    - Namespace management
    - Applying, diffing and deleting manifests by file or label
    - Pod, workload, event, service and ingress queries
    - Pod logs
    """

    def __init__(self, runner: CommandRunner, binary: str = "kubectl") -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
            binary: kubectl executable name or path
        """
        self._runner = runner
        self._binary = binary

    def _run(self, *args: str, input_data: str | None = None) -> CommandResult:
        return self._runner.run([self._binary, *args], input_data=input_data)

    def version(self) -> CommandResult:
        """Check that the client is installed (``kubectl version --client``)."""
        return self._run("version", "--client")

    # =========================================================================
    # Namespace Management
    # =========================================================================

    def get_namespace(self, namespace: str) -> CommandResult:
        return self._run("get", "namespace", namespace)

    def create_namespace(self, namespace: str) -> CommandResult:
        return self._run("create", "namespace", namespace)

    def list_namespaces(self) -> CommandResult:
        return self._run(
            "get",
            "namespaces",
            "--no-headers",
            "-o",
            "custom-columns=NAME:.metadata.name",
        )

    # =========================================================================
    # Manifests
    # =========================================================================

    def apply(self, path: Path | str, *, recursive: bool = False) -> CommandResult:
        """Apply a manifest file, or every manifest under a directory."""
        args = ["apply", "-f", str(path)]
        if recursive:
            args.append("--recursive")
        return self._run(*args)

    def apply_server_side(self, manifest: str, field_manager: str) -> CommandResult:
        """Server-side apply of manifest text passed on stdin."""
        return self._run(
            "apply",
            "--server-side",
            f"--field-manager={field_manager}",
            "-f",
            "-",
            input_data=manifest,
        )

    def diff(self, path: Path | str, *, recursive: bool = False) -> CommandResult:
        """Diff local manifests against live state.

        kubectl exits with status 1 when differences exist, so callers should
        judge the outcome by stdout, not by ``success``.
        """
        args = ["diff", "-f", str(path)]
        if recursive:
            args.append("--recursive")
        return self._run(*args)

    def delete(self, path: Path | str, *, recursive: bool = False) -> CommandResult:
        """Delete the resources declared in a file or directory, if present."""
        args = ["delete", "-f", str(path)]
        if recursive:
            args.append("--recursive")
        args.append(IGNORE_NOT_FOUND)
        return self._run(*args)

    def delete_by_label(self, app_label: str, namespace: str) -> CommandResult:
        """Delete all common resources labeled ``app=<app_label>``."""
        return self._run(
            "delete",
            "all",
            "-l",
            f"app={app_label}",
            "-n",
            namespace,
            IGNORE_NOT_FOUND,
        )

    def delete_ingress(self, name: str, namespace: str) -> CommandResult:
        return self._run("delete", "ingress", name, "-n", namespace, IGNORE_NOT_FOUND)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_pods_by_app(self, namespace: str, app_label: str) -> CommandResult:
        """Pod names and phases for ``app=<app_label>``, one per line."""
        return self._run(
            "get",
            "pods",
            "-n",
            namespace,
            "-l",
            f"app={app_label}",
            "--no-headers",
            "-o",
            "custom-columns=NAME:.metadata.name,STATUS:.status.phase",
        )

    def get_all(self, resource: str) -> CommandResult:
        """List a resource type across all namespaces without headers."""
        return self._run("get", resource, "--all-namespaces", "--no-headers")

    def get_events(self, namespace: str | None = None) -> CommandResult:
        """Events sorted by last timestamp, for one namespace or all of them."""
        scope = ["-n", namespace] if namespace else ["--all-namespaces"]
        return self._run(
            "get", "events", *scope, "--sort-by=.lastTimestamp", "--no-headers"
        )

    def get_services(self, namespace: str) -> CommandResult:
        """Service names with their ports, one service per line."""
        return self._run(
            "get",
            "services",
            "-n",
            namespace,
            "--no-headers",
            "-o",
            "custom-columns=NAME:.metadata.name,PORTS:.spec.ports[*].port",
        )

    def get_json(
        self,
        resource: str,
        *,
        namespace: str | None = None,
        selector: str | None = None,
    ) -> CommandResult:
        """Get a resource (type or ``type/name``) as JSON.

        Without a namespace the query spans all namespaces.
        """
        args = ["get", resource]
        args.extend(["-n", namespace] if namespace else ["--all-namespaces"])
        if selector:
            args.extend(["-l", selector])
        args.extend(["-o", "json"])
        return self._run(*args)

    def jsonpath(
        self,
        resource: str,
        expression: str,
        *,
        namespace: str | None = None,
        selector: str | None = None,
    ) -> CommandResult:
        """Evaluate a jsonpath expression against a resource query."""
        args = ["get", resource]
        if namespace:
            args.extend(["-n", namespace])
        if selector:
            args.extend(["-l", selector])
        args.extend(["-o", f"jsonpath={expression}"])
        return self._run(*args)

    def logs(
        self,
        namespace: str,
        pod: str,
        *,
        tail: int = 100,
        previous: bool = False,
    ) -> CommandResult:
        args = ["logs", "-n", namespace, pod, f"--tail={tail}"]
        if previous:
            args.append("--previous")
        return self._run(*args)
