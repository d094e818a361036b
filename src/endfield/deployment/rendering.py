"""Rendering of chart-managed units into their output directory.

The output directory of a unit is regenerated wholesale on every render:
everything except the sentinel file is removed before the new, ordered
files are written. Callers must not render the same unit concurrently.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from endfield.manifests.splitter import split_rendered

from .constants import DeploymentConstants, UnitPaths

if TYPE_CHECKING:
    from .shell_commands import ShellCommands


@dataclass(frozen=True)
class RenderOutcome:
    """Result of writing rendered manifests.

    Attributes:
        rendered_files: Paths written, in apply order
        warnings: Non-fatal problems (individual files that could not be
            removed or written)
        error: Terminal failure, None on success
    """

    rendered_files: list[str]
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class RenderManager:
    """Renders releases and maintains their output directories."""

    def __init__(
        self,
        commands: ShellCommands,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the render manager.

        Args:
            commands: Shell command executor
            constants: Optional deployment constants
        """
        self.commands = commands
        self.constants = constants or DeploymentConstants()

    def clear_output(self, output_dir: Path) -> list[str]:
        """Remove everything in ``output_dir`` except the sentinel file.

        Returns:
            Warnings for entries that could not be removed
        """
        warnings: list[str] = []
        for entry in sorted(output_dir.iterdir()):
            if entry.name == self.constants.SENTINEL_FILE:
                continue
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as exc:
                warnings.append(f"Cannot remove {entry}: {exc}")
        return warnings

    def write_output(self, output_dir: Path, raw: str) -> RenderOutcome:
        """Replace the contents of ``output_dir`` with the split render.

        Args:
            output_dir: Unit output directory, created if missing
            raw: Multi-document template output

        Returns:
            RenderOutcome listing the files written
        """
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            warnings = self.clear_output(output_dir)
        except OSError as exc:
            return RenderOutcome(
                rendered_files=[], error=f"Cannot prepare {output_dir}: {exc}"
            )

        rendered: list[str] = []
        for filename, content in split_rendered(raw):
            path = output_dir / filename
            try:
                path.write_text(content, encoding="utf-8")
            except OSError as exc:
                warnings.append(f"Cannot write {filename}: {exc}")
                continue
            rendered.append(str(path))

        logger.info(f"Wrote {len(rendered)} rendered manifests to {output_dir}")
        return RenderOutcome(rendered_files=rendered, warnings=warnings)

    def render_release(
        self,
        unit_dir: Path,
        release_name: str,
        namespace: str,
        values_file: str | None = None,
    ) -> RenderOutcome:
        """Render a release without installing it.

        Unlike the render step of a deploy, every failure here is terminal.

        Args:
            unit_dir: Unit directory holding ``helm/`` and ``rendered/``
            release_name: Release name used for rendering
            namespace: Namespace passed to the templates
            values_file: Values override; defaults to ``helm/values.yaml``

        Returns:
            RenderOutcome for the refreshed output directory
        """
        paths = UnitPaths(unit_dir)

        if not self.commands.helm.version().success:
            return RenderOutcome(
                rendered_files=[],
                error="helm CLI not found; install helm 3 to render templates",
            )

        deps = self.commands.helm.dependency_update(paths.chart_dir)
        if not deps.success:
            return RenderOutcome(
                rendered_files=[],
                error=f"helm dependency update failed: {deps.stderr.strip()}",
            )

        result = self.commands.helm.template(
            release_name,
            paths.chart_dir,
            namespace,
            paths.resolve_values(values_file),
        )
        if not result.success:
            return RenderOutcome(
                rendered_files=[],
                error=f"helm template failed: {result.stderr.strip()}",
            )

        return self.write_output(paths.rendered_dir, result.stdout)
