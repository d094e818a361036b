"""Deployment constants and unit path resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from endfield.manifests.chart_release import (
    CHART_DIR,
    RENDERED_DIR,
    SENTINEL_FILE,
    VALUES_FILE,
)


@dataclass(frozen=True)
class DeploymentConstants:
    """Defaults for external tool invocations.

    Values here are fallbacks; EndfieldSettings overrides them per project.
    """

    FIELD_MANAGER: str = "endfield"
    INSTALL_TIMEOUT: str = "5m"
    DEFAULT_LOG_TAIL: int = 100

    CHART_DIR: str = CHART_DIR
    RENDERED_DIR: str = RENDERED_DIR
    VALUES_FILE: str = VALUES_FILE
    SENTINEL_FILE: str = SENTINEL_FILE


class UnitPaths:
    """Path resolver for one unit directory.

    Example:
        >>> paths = UnitPaths(Path("infra/redis"))
        >>> paths.chart_dir
        PosixPath('infra/redis/helm')
    """

    def __init__(self, unit_dir: Path) -> None:
        self.unit_dir = unit_dir
        self.chart_dir = unit_dir / CHART_DIR
        self.rendered_dir = unit_dir / RENDERED_DIR

    @property
    def values_file(self) -> Path:
        """Default values file inside the chart directory."""
        return self.chart_dir / VALUES_FILE

    def resolve_values(self, override: str | None) -> str:
        """Absolute values file: the override when given, else the default.

        helm runs inside the chart directory, so a relative path is anchored
        to the current working directory here instead.
        """
        if override:
            return str(Path(override).expanduser().absolute())
        return str(self.values_file.absolute())
