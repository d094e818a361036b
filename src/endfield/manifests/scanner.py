"""Best-effort walk of a project tree into graph nodes.

The walk never aborts: unreadable directories and files are reported as
human-readable error strings next to whatever could be parsed.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .chart_release import detect_release
from .classifier import classify_document
from .dedup import deduplicate
from .fields import split_documents
from .models import GraphNode, ScanResult

MANIFEST_SUFFIXES = (".yaml", ".yml")

# Directories never descended into.
IGNORED_DIRS = frozenset({"node_modules", "vendor", "charts", "rendered"})

# Generated or vendored manifests, skipped at any depth.
GENERATED_PATH_PARTS = frozenset({"rendered", "charts"})


def _is_ignored_dir(name: str) -> bool:
    return name.startswith(".") or name in IGNORED_DIRS


def _sorted_entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def parse_manifest_file(path: Path) -> list[GraphNode]:
    """Classify every document in a manifest file.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    content = path.read_text(encoding="utf-8")
    nodes = []
    for index, doc in enumerate(split_documents(content)):
        node = classify_document(doc.strip(), path, index)
        if node is not None:
            nodes.append(node)
    return nodes


def walk_project(root: Path) -> tuple[list[GraphNode], list[str]]:
    """Collect raw (not yet deduplicated) nodes under ``root``.

    A directory holding a chart-managed release yields exactly one release
    node and is not descended into.

    Args:
        root: Project root directory

    Returns:
        Tuple of (nodes in walk order, error strings)
    """
    nodes: list[GraphNode] = []
    errors: list[str] = []
    _walk(root, root, nodes, errors)
    return nodes, errors


def _walk(
    root: Path, directory: Path, nodes: list[GraphNode], errors: list[str]
) -> None:
    try:
        entries = _sorted_entries(directory)
    except OSError as exc:
        errors.append(f"Cannot read: {directory}: {exc}")
        return

    for entry in entries:
        if entry.is_dir():
            if entry.is_symlink() or _is_ignored_dir(entry.name):
                continue
            try:
                release_node = detect_release(entry)
            except OSError as exc:
                errors.append(f"Cannot read: {entry}: {exc}")
                continue
            if release_node is not None:
                nodes.append(release_node)
                continue
            _walk(root, entry, nodes, errors)
        elif entry.is_file() and entry.suffix in MANIFEST_SUFFIXES:
            relative_parts = entry.relative_to(root).parts
            if GENERATED_PATH_PARTS.intersection(relative_parts):
                continue
            try:
                nodes.extend(parse_manifest_file(entry))
            except (OSError, UnicodeDecodeError) as exc:
                errors.append(f"{entry}: {exc}")


def scan_project(folder: str | Path) -> ScanResult:
    """Scan a project folder and return deduplicated graph nodes.

    Args:
        folder: Project root

    Returns:
        ScanResult with deduplicated nodes and any errors collected on the way
    """
    root = Path(folder)
    if not root.is_dir():
        return ScanResult(
            nodes=[],
            project_path=str(folder),
            errors=[f"Path does not exist: {folder}"],
        )

    raw_nodes, errors = walk_project(root)
    nodes = deduplicate(raw_nodes)
    logger.info(
        f"Scanned {root}: {len(raw_nodes)} nodes, {len(nodes)} after dedup, "
        f"{len(errors)} errors"
    )
    return ScanResult(nodes=nodes, project_path=str(folder), errors=errors)


def list_manifest_files(folder: str | Path) -> list[str]:
    """List every YAML file under a folder for the explorer tree.

    Unlike the node scan, no kind filtering happens and rendered/charts
    directories are included; only hidden entries and dependency caches
    are skipped.
    """
    files: list[str] = []
    _collect_files(Path(folder), files)
    return files


def _collect_files(directory: Path, files: list[str]) -> None:
    try:
        entries = _sorted_entries(directory)
    except OSError:
        return
    for entry in entries:
        if entry.name.startswith(".") or entry.name in ("node_modules", "vendor"):
            continue
        if entry.is_dir():
            _collect_files(entry, files)
        elif entry.is_file() and entry.suffix in MANIFEST_SUFFIXES:
            files.append(str(entry))
