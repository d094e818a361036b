"""Per-project canvas layout persisted as ``<project>/.endfield``.

Only field positions are stored; everything else about a field is
re-derived from the manifests on every scan.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from endfield.errors import EndfieldError, LayoutNotFoundError

LAYOUT_FILE = ".endfield"
LAYOUT_VERSION = 1


class FieldPosition(BaseModel):
    id: str = Field(description="Graph node id")
    x: float = Field(default=0.0, description="Canvas x coordinate")
    y: float = Field(default=0.0, description="Canvas y coordinate")
    label: str = Field(default="", description="Display label at save time")


class ProjectLayout(BaseModel):
    version: int = Field(default=LAYOUT_VERSION, description="Layout file format")
    project_path: str = Field(description="Project root the layout belongs to")
    fields: list[FieldPosition] = Field(default_factory=list)

    def position_of(self, node_id: str) -> FieldPosition | None:
        return next((f for f in self.fields if f.id == node_id), None)


def layout_path(project_path: str | Path) -> Path:
    return Path(project_path) / LAYOUT_FILE


def save_layout(layout: ProjectLayout) -> Path:
    """Write the layout as indented JSON into its project directory.

    Raises:
        EndfieldError: If the file cannot be written
    """
    path = layout_path(layout.project_path)
    try:
        path.write_text(layout.model_dump_json(indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise EndfieldError(f"Cannot write layout {path}", details=str(exc)) from exc
    logger.debug(f"Saved layout with {len(layout.fields)} fields to {path}")
    return path


def load_layout(project_path: str | Path) -> ProjectLayout:
    """Read a project's layout file.

    Raises:
        LayoutNotFoundError: If the project has no layout file yet
        EndfieldError: If the file is unreadable or malformed
    """
    path = layout_path(project_path)
    if not path.is_file():
        raise LayoutNotFoundError(f"No layout file at {path}")
    try:
        return ProjectLayout.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise EndfieldError(f"Cannot read layout {path}", details=str(exc)) from exc
    except ValidationError as exc:
        raise EndfieldError(f"Invalid layout file {path}", details=str(exc)) from exc
