"""Direct deployment of a container image without a unit on disk.

Manifests are generated in memory and applied one by one with server-side
apply in the order Namespace, Secret, Deployment, Service. A namespace
failure stops the run; any later failure marks the run failed while the
remaining manifests are still attempted. Re-running with changed image,
env or replicas updates the live objects in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from endfield.manifests.generator import (
    image_deployment_manifest,
    image_namespace_manifest,
    image_secret_manifest,
    image_secret_name,
    image_service_manifest,
)

from .constants import DeploymentConstants

if TYPE_CHECKING:
    from endfield.manifests.specs import ImageDeployRequest

    from .shell_commands import ShellCommands


@dataclass(frozen=True)
class ImageManifests:
    """Manifest text generated for an image deploy; absent parts are None."""

    deployment: str
    namespace: str | None = None
    secret: str | None = None
    service: str | None = None

    def in_apply_order(self) -> list[tuple[str, str]]:
        parts = [
            ("Namespace", self.namespace),
            ("Secret", self.secret),
            ("Deployment", self.deployment),
            ("Service", self.service),
        ]
        return [(kind, text) for kind, text in parts if text is not None]


@dataclass(frozen=True)
class ImageDeployOutcome:
    success: bool
    deployment_name: str
    namespace: str
    manifests: ImageManifests
    secret_name: str | None = None
    service_name: str | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    commands: list[str] = field(default_factory=list)


def build_image_manifests(request: ImageDeployRequest) -> ImageManifests:
    return ImageManifests(
        namespace=(
            image_namespace_manifest(request.namespace)
            if request.create_namespace
            else None
        ),
        secret=image_secret_manifest(request) if request.secret_env else None,
        deployment=image_deployment_manifest(request),
        service=image_service_manifest(request),
    )


class ImageDeployer:
    """Applies generated image manifests with server-side apply."""

    def __init__(
        self,
        commands: ShellCommands,
        field_manager: str | None = None,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.commands = commands
        self.constants = constants or DeploymentConstants()
        self.field_manager = field_manager or self.constants.FIELD_MANAGER

    def deploy(self, request: ImageDeployRequest) -> ImageDeployOutcome:
        """Generate and apply the manifests for ``request``.

        Without ``create_namespace`` the namespace is only ensured on a
        best-effort basis (get, else create) and a failure there is ignored.

        Args:
            request: Validated image deploy request

        Returns:
            ImageDeployOutcome including the generated manifest text
        """
        manifests = build_image_manifests(request)
        stdout: list[str] = []
        stderr: list[str] = []
        commands: list[str] = []

        if manifests.namespace is None:
            probe = self.commands.kubectl.get_namespace(request.namespace)
            commands.append(probe.command)
            if not probe.success:
                created = self.commands.kubectl.create_namespace(request.namespace)
                commands.append(created.command)
                if not created.success:
                    logger.warning(
                        f"Could not create namespace {request.namespace}: "
                        f"{created.stderr.strip()}"
                    )

        success = True
        for kind, text in manifests.in_apply_order():
            result = self.commands.kubectl.apply_server_side(text, self.field_manager)
            commands.append(result.command)
            if result.success:
                stdout.append(result.stdout.strip())
                continue
            success = False
            stderr.append(result.stderr.strip())
            logger.warning(f"Applying {kind} {request.name} failed")
            if kind == "Namespace":
                break

        return ImageDeployOutcome(
            success=success,
            deployment_name=request.name,
            namespace=request.namespace,
            manifests=manifests,
            secret_name=image_secret_name(request.name) if request.secret_env else None,
            service_name=request.name if request.ports else None,
            stdout="\n".join(stdout),
            stderr="\n".join(stderr),
            error=None if success else "\n".join(stderr),
            commands=commands,
        )
