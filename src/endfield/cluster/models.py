"""Value objects for live cluster state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class StatusColor(StrEnum):
    """Health of a workload from ready vs desired replicas."""

    GRAY = "gray"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


@dataclass(frozen=True)
class PodInfo:
    namespace: str
    name: str
    phase: str
    ready: int
    total: int
    restarts: int = 0


@dataclass(frozen=True)
class WorkloadStatus:
    """One deployment or statefulset with the pods that belong to it.

    Pods are attributed by name prefix within the same namespace.
    """

    label: str
    namespace: str
    kind: str
    desired: int
    ready: int
    available: int
    status: StatusColor
    pods: list[PodInfo] = field(default_factory=list)


@dataclass(frozen=True)
class ClusterStatus:
    workloads: list[WorkloadStatus] = field(default_factory=list)
    kubectl_available: bool = True
    error: str | None = None


@dataclass(frozen=True)
class ServiceInfo:
    name: str
    ports: list[str] = field(default_factory=list)
