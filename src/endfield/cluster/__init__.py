"""Live cluster inspection through kubectl."""

from .inspector import ClusterInspector, compute_status, parse_ready
from .models import ClusterStatus, PodInfo, ServiceInfo, StatusColor, WorkloadStatus

__all__ = [
    "ClusterInspector",
    "ClusterStatus",
    "PodInfo",
    "ServiceInfo",
    "StatusColor",
    "WorkloadStatus",
    "compute_status",
    "parse_ready",
]
