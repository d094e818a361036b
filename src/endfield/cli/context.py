"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from endfield.cluster import ClusterInspector
from endfield.config import EndfieldSettings, get_settings, load_settings
from endfield.deployment import (
    CleanupManager,
    DeployOrchestrator,
    DeploymentConstants,
    ImageDeployer,
    IngressManager,
    RenderManager,
    ShellCommands,
)

from .console import CLIConsole, console


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    settings: EndfieldSettings
    commands: ShellCommands
    constants: DeploymentConstants

    def orchestrator(self) -> DeployOrchestrator:
        return DeployOrchestrator(
            self.commands,
            renderer=self.renderer(),
            install_wait=self.settings.install_wait,
            install_timeout=self.settings.install_timeout,
            constants=self.constants,
        )

    def renderer(self) -> RenderManager:
        return RenderManager(self.commands, self.constants)

    def image_deployer(self) -> ImageDeployer:
        return ImageDeployer(
            self.commands, self.settings.field_manager, self.constants
        )

    def ingress(self) -> IngressManager:
        return IngressManager(
            self.commands, self.settings.field_manager, self.constants
        )

    def cleanup(self) -> CleanupManager:
        return CleanupManager(self.commands)

    def inspector(self) -> ClusterInspector:
        return ClusterInspector(
            self.commands.kubectl, default_tail=self.constants.DEFAULT_LOG_TAIL
        )


def build_cli_context(project_root: Path | None = None) -> CLIContext:
    """Build a fresh CLIContext for a project directory (default: cwd).

    Settings for the working directory are loaded once per process; an
    explicit project root is always read fresh.

    Raises:
        ConfigurationError: If the project's settings cannot be loaded
    """
    if project_root is None:
        root = Path.cwd().resolve()
        settings = get_settings()
    else:
        root = project_root.resolve()
        settings = load_settings(root)
    constants = DeploymentConstants(FIELD_MANAGER=settings.field_manager)

    return CLIContext(
        console=console,
        project_root=root,
        settings=settings,
        commands=ShellCommands(
            root,
            helm_binary=settings.helm_binary,
            kubectl_binary=settings.kubectl_binary,
        ),
        constants=constants,
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
