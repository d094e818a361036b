"""Value objects produced by scanning and generation.

Everything in this module is an immutable value handed to the caller. The
scanner, deduplicator and generators never keep references to what they return.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# =============================================================================
# Enumerations
# =============================================================================


class Category(StrEnum):
    """Advisory visual grouping of a graph node.

    Inferred from image or chart names; never drives deploy behavior.
    """

    GATEWAY = "gateway"
    CACHE = "cache"
    DATABASE = "database"
    QUEUE = "queue"
    MONITORING = "monitoring"
    INFRA = "infra"
    CONFIG = "config"
    SERVICE = "service"


class Origin(StrEnum):
    """How a unit's resources are produced."""

    RAW = "raw"
    RELEASE = "release"


WORKLOAD_KINDS: tuple[str, ...] = (
    "Deployment",
    "StatefulSet",
    "DaemonSet",
    "Job",
    "CronJob",
    "ReplicaSet",
    "Pod",
)

RELEASE_KIND = "HelmRelease"


# =============================================================================
# Graph Nodes
# =============================================================================


@dataclass(frozen=True)
class ReleaseMeta:
    """Metadata for a chart-managed release node.

    Attributes:
        release_name: Release name (the unit directory name)
        namespace: Target namespace of the release
        chart_name: Name of the dependency chart
        chart_version: Version constraint of the dependency chart
        repository: Chart repository URL
        values_path: Values file used for template and install
        output_dir: Directory receiving rendered manifests
    """

    release_name: str
    namespace: str
    chart_name: str
    chart_version: str
    repository: str
    values_path: str
    output_dir: str


@dataclass(frozen=True)
class GraphNode:
    """A workload or infrastructure unit surfaced in the visual graph.

    Attributes:
        id: Stable identifier, unique within one scan result after dedup
        label: Display label (the resource name)
        kind: Resource kind (Deployment, StatefulSet, ..., HelmRelease)
        image: Primary container image, may be empty
        category: Advisory category, see Category
        namespace: Namespace of the resource
        file_path: Originating file, or chart descriptor for releases
        replicas: Replica count when declared
        origin: raw text file or externally-managed release
        release: Release metadata, only for release origin
        x: Layout x coordinate (opaque to this package)
        y: Layout y coordinate (opaque to this package)
    """

    id: str
    label: str
    kind: str
    image: str
    category: Category
    namespace: str
    file_path: str
    replicas: int | None = None
    origin: Origin = Origin.RAW
    release: ReleaseMeta | None = None
    x: float = 0.0
    y: float = 0.0
    group_x: float | None = None
    group_y: float | None = None

    @property
    def is_workload(self) -> bool:
        """Whether the node's kind represents running replicas."""
        return self.kind in WORKLOAD_KINDS


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning a project tree."""

    nodes: list[GraphNode]
    project_path: str
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Generation Outcomes
# =============================================================================


@dataclass(frozen=True)
class GenerateOutcome:
    """Result of writing a unit's manifests to disk.

    Warnings are non-fatal; an outcome with warnings but no error is a success.
    """

    generated_files: list[str]
    namespace: str
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None
