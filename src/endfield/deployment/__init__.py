"""Deploy orchestration over helm and kubectl.

- orchestrator: install, diff and removal pipelines per unit
- rendering: chart render into a unit's output directory
- image_deploy: server-side apply of an image without a unit on disk
- ingress: field routes, discovery and controller detection
- cleanup: disk removal, label deletes and replica apply
- worker: off-thread execution with per-resource serialization
"""

from .cleanup import CleanupManager, DeleteOutcome
from .constants import DeploymentConstants, UnitPaths
from .image_deploy import ImageDeployer, ImageDeployOutcome, build_image_manifests
from .ingress import DiscoveredRoute, IngressControllerStatus, IngressManager
from .orchestrator import (
    DeployOrchestrator,
    DeployOutcome,
    DeployTarget,
    DiffOutcome,
    RawTarget,
    ReleaseTarget,
)
from .rendering import RenderManager, RenderOutcome
from .shell_commands import CommandResult, ShellCommands
from .worker import OperationWorker

__all__ = [
    "CleanupManager",
    "CommandResult",
    "DeleteOutcome",
    "DeployOrchestrator",
    "DeployOutcome",
    "DeployTarget",
    "DeploymentConstants",
    "DiffOutcome",
    "DiscoveredRoute",
    "ImageDeployOutcome",
    "ImageDeployer",
    "IngressControllerStatus",
    "IngressManager",
    "OperationWorker",
    "RawTarget",
    "ReleaseTarget",
    "RenderManager",
    "RenderOutcome",
    "ShellCommands",
    "UnitPaths",
    "build_image_manifests",
]
