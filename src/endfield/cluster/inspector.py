"""Read-only queries against the live cluster.

All parsing works on kubectl's ``--no-headers`` tabular output, split on
whitespace. Lines with too few columns are skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from endfield.deployment.shell_commands import CommandResult

from .models import ClusterStatus, PodInfo, ServiceInfo, StatusColor, WorkloadStatus

if TYPE_CHECKING:
    from endfield.deployment.shell_commands import KubectlCommands

ALL_NAMESPACES = "all"
NONE_MARKER = "<none>"

# resource type -> workload kind
WORKLOAD_RESOURCES = {
    "deployments": "Deployment",
    "statefulsets": "StatefulSet",
}


def parse_ready(value: str) -> tuple[int, int]:
    """Parse a ``ready/total`` column.

    Example:
        >>> parse_ready("2/3")
        (2, 3)
        >>> parse_ready("garbage")
        (0, 1)
    """
    parts = value.split("/")
    if len(parts) != 2:
        return 0, 1
    ready = int(parts[0]) if parts[0].isdigit() else 0
    total = int(parts[1]) if parts[1].isdigit() else 1
    return ready, total


def compute_status(ready: int, desired: int) -> StatusColor:
    if desired == 0:
        return StatusColor.GRAY
    if ready == 0:
        return StatusColor.RED
    if ready < desired:
        return StatusColor.YELLOW
    return StatusColor.GREEN


def parse_pods(raw: str) -> list[PodInfo]:
    """Parse ``get pods --all-namespaces --no-headers`` output."""
    pods: list[PodInfo] = []
    for line in raw.splitlines():
        cols = line.split()
        if len(cols) < 5:
            continue
        ready, total = parse_ready(cols[2])
        pods.append(
            PodInfo(
                namespace=cols[0],
                name=cols[1],
                phase=cols[3],
                ready=ready,
                total=total,
                restarts=int(cols[4]) if cols[4].isdigit() else 0,
            )
        )
    return pods


def parse_workloads(
    raw: str, resource: str, pods: list[PodInfo]
) -> list[WorkloadStatus]:
    """Parse ``get deployments|statefulsets --all-namespaces --no-headers``.

    Deployments carry an AVAILABLE column; statefulsets report ready as
    available.
    """
    workloads: list[WorkloadStatus] = []
    for line in raw.splitlines():
        cols = line.split()
        if len(cols) < 4:
            continue
        namespace, name = cols[0], cols[1]
        ready, desired = parse_ready(cols[2])
        available = ready
        if resource == "deployments" and len(cols) >= 5 and cols[4].isdigit():
            available = int(cols[4])

        workloads.append(
            WorkloadStatus(
                label=name,
                namespace=namespace,
                kind=WORKLOAD_RESOURCES.get(resource, resource),
                desired=desired,
                ready=ready,
                available=available,
                status=compute_status(ready, desired),
                pods=[
                    pod
                    for pod in pods
                    if pod.namespace == namespace and pod.name.startswith(name)
                ],
            )
        )
    return workloads


def parse_services(raw: str) -> list[ServiceInfo]:
    """Parse NAME,PORTS custom-column output; ``<none>`` means no ports."""
    services: list[ServiceInfo] = []
    for line in raw.splitlines():
        parts = line.strip().split(None, 1)
        if not parts or parts[0] == NONE_MARKER:
            continue
        ports_text = parts[1].strip() if len(parts) > 1 else ""
        ports = (
            []
            if ports_text in ("", NONE_MARKER)
            else [p.strip() for p in ports_text.split(",") if p.strip()]
        )
        services.append(ServiceInfo(name=parts[0], ports=ports))
    return services


class ClusterInspector:
    """Status, logs, events and listings from the current kube context."""

    def __init__(self, kubectl: KubectlCommands, default_tail: int = 100) -> None:
        self.kubectl = kubectl
        self.default_tail = default_tail

    def kubectl_available(self) -> bool:
        return self.kubectl.version().success

    def status(self) -> ClusterStatus:
        """Workload health across all namespaces.

        A failing workload query contributes nothing; a failing pod query
        is reported as the status error.
        """
        if not self.kubectl_available():
            return ClusterStatus(kubectl_available=False, error="kubectl not found")

        pods_result = self.kubectl.get_all("pods")
        if not pods_result.success:
            return ClusterStatus(error=pods_result.stderr.strip() or "pod query failed")
        pods = parse_pods(pods_result.stdout)

        workloads: list[WorkloadStatus] = []
        for resource in WORKLOAD_RESOURCES:
            result = self.kubectl.get_all(resource)
            if not result.success:
                logger.debug(f"Listing {resource} failed: {result.stderr.strip()}")
                continue
            workloads.extend(parse_workloads(result.stdout, resource, pods))
        return ClusterStatus(workloads=workloads)

    def field_logs(
        self,
        field_id: str,
        namespace: str,
        *,
        tail: int | None = None,
        previous: bool = False,
    ) -> CommandResult:
        """Logs of a field's pod, chosen by the ``app=<field_id>`` label.

        A Running pod is preferred; otherwise the first listed pod is used.
        """
        listing = self.kubectl.get_pods_by_app(namespace, field_id)
        if not listing.success:
            return listing

        rows = [line.split() for line in listing.stdout.splitlines() if line.split()]
        running = [row[0] for row in rows if len(row) >= 2 and row[1] == "Running"]
        candidates = running or [row[0] for row in rows]
        if not candidates:
            return CommandResult(
                success=False,
                stderr=f"No pods found for app={field_id} in {namespace}",
                returncode=1,
                command=listing.command,
            )

        return self.kubectl.logs(
            namespace,
            candidates[0],
            tail=tail or self.default_tail,
            previous=previous,
        )

    def pod_logs(
        self, namespace: str, pod: str, tail: int | None = None
    ) -> CommandResult:
        return self.kubectl.logs(namespace, pod, tail=tail or self.default_tail)

    def events(self, namespace: str = ALL_NAMESPACES) -> CommandResult:
        """Events for one namespace, or every namespace when given ``all``."""
        scope = None if namespace == ALL_NAMESPACES else namespace
        return self.kubectl.get_events(scope)

    def namespaces(self) -> list[str]:
        result = self.kubectl.list_namespaces()
        if not result.success:
            logger.debug(f"Listing namespaces failed: {result.stderr.strip()}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def services(self, namespace: str) -> list[ServiceInfo]:
        result = self.kubectl.get_services(namespace)
        if not result.success:
            logger.debug(f"Listing services in {namespace} failed")
            return []
        return parse_services(result.stdout)
