"""Detection of chart-managed release units.

A release unit is a directory laid out as::

    <unit>/
      namespace.yaml        (optional, metadata.name is the namespace)
      helm/Chart.yaml       (declares one chart dependency)
      helm/values.yaml
      rendered/             (output of the last render)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .classifier import chart_to_category
from .fields import extract_metadata_field, strip_quotes
from .models import RELEASE_KIND, GraphNode, Origin, ReleaseMeta

CHART_DIR = "helm"
CHART_FILE = "Chart.yaml"
VALUES_FILE = "values.yaml"
NAMESPACE_FILE = "namespace.yaml"
RENDERED_DIR = "rendered"
# Keeps an otherwise empty rendered directory; survives every re-render.
SENTINEL_FILE = ".gitkeep"


@dataclass(frozen=True)
class ChartDependency:
    """The dependency declared by a unit's chart descriptor."""

    name: str
    version: str = ""
    repository: str = ""


def _value_after(trimmed: str, prefix: str) -> str:
    return strip_quotes(trimmed[len(prefix) :].strip())


def parse_chart_dependency(chart_content: str) -> ChartDependency | None:
    """Read the first dependency from a chart descriptor.

    Only the first ``- name:`` entry after ``dependencies:`` is captured;
    later entries are ignored.

    Args:
        chart_content: Text of the chart descriptor

    Returns:
        The dependency, or None if no dependency name was found
    """
    name = ""
    version = ""
    repository = ""
    in_dependencies = False
    extra_entries = 0

    for line in chart_content.splitlines():
        trimmed = line.strip()
        if trimmed == "dependencies:":
            in_dependencies = True
            continue
        if not in_dependencies:
            continue
        # A new top-level key closes the dependencies block.
        if trimmed and not line[0].isspace() and not trimmed.startswith(("-", "#")):
            in_dependencies = False
            continue

        if trimmed.startswith("- name:"):
            if name:
                extra_entries += 1
                continue
            name = _value_after(trimmed, "- name:")
        elif name and extra_entries == 0:
            if trimmed.startswith("version:"):
                version = _value_after(trimmed, "version:")
            elif trimmed.startswith("repository:"):
                repository = _value_after(trimmed, "repository:")

    if not name:
        return None
    if extra_entries:
        logger.debug(
            f"Chart declares {extra_entries + 1} dependencies, using '{name}' only"
        )
    return ChartDependency(name=name, version=version, repository=repository)


def detect_release(unit_dir: Path) -> GraphNode | None:
    """Synthesize a release node for a directory holding a chart descriptor.

    Args:
        unit_dir: Candidate unit directory

    Returns:
        A GraphNode with release origin, or None if the directory is not a
        release unit (no descriptor, unreadable, or no dependency declared)
    """
    chart_path = unit_dir / CHART_DIR / CHART_FILE
    if not chart_path.is_file():
        return None

    try:
        chart_content = chart_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Cannot read chart descriptor {chart_path}: {exc}")
        return None

    dependency = parse_chart_dependency(chart_content)
    if dependency is None:
        return None

    release_name = unit_dir.name
    namespace = _release_namespace(unit_dir, release_name)

    release = ReleaseMeta(
        release_name=release_name,
        namespace=namespace,
        chart_name=dependency.name,
        chart_version=dependency.version,
        repository=dependency.repository,
        values_path=str(unit_dir / CHART_DIR / VALUES_FILE),
        output_dir=str(unit_dir / RENDERED_DIR),
    )
    logger.debug(f"Detected release {release_name} ({dependency.name}) in {unit_dir}")

    return GraphNode(
        id=f"release-{release_name}",
        label=release_name,
        kind=RELEASE_KIND,
        image=f"chart:{dependency.name}/{dependency.version}",
        category=chart_to_category(dependency.name),
        namespace=namespace,
        file_path=str(chart_path),
        origin=Origin.RELEASE,
        release=release,
    )


def _release_namespace(unit_dir: Path, release_name: str) -> str:
    ns_path = unit_dir / NAMESPACE_FILE
    if ns_path.is_file():
        try:
            name = extract_metadata_field(ns_path.read_text(encoding="utf-8"), "name")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Cannot read {ns_path}: {exc}")
            name = None
        if name:
            return name
    return f"infra-{release_name}"
