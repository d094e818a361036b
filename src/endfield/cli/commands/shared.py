"""Shared helpers for CLI commands.

Result objects from the library are rendered here so every command reports
warnings, errors and command logs the same way.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from rich.table import Table

from endfield.deployment import (
    DeployTarget,
    OperationWorker,
    RawTarget,
    ReleaseTarget,
)
from endfield.errors import EndfieldError
from endfield.manifests import EnvEntry, detect_release
from endfield.manifests.chart_release import NAMESPACE_FILE
from endfield.manifests.fields import extract_metadata_field

from ..console import console

T = TypeVar("T")


def parse_env(pairs: list[str] | None) -> list[EnvEntry]:
    """Parse ``KEY=VALUE`` options into env entries.

    Raises:
        EndfieldError: If an entry has no ``=`` or an empty key
    """
    entries: list[EnvEntry] = []
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise EndfieldError(f"Invalid env entry '{pair}'", "Expected KEY=VALUE")
        entries.append(EnvEntry(key=key.strip(), value=value))
    return entries


def resolve_target(
    unit_dir: Path,
    values_file: str | None = None,
    repo_name: str | None = None,
    repo_url: str | None = None,
) -> DeployTarget:
    """Release target when the unit declares a chart dependency, raw otherwise.

    Raises:
        EndfieldError: If the unit directory does not exist
    """
    if not unit_dir.is_dir():
        raise EndfieldError(f"Unit directory not found: {unit_dir}")

    node = detect_release(unit_dir)
    if node is None or node.release is None:
        return RawTarget(unit_dir=unit_dir)
    return ReleaseTarget(
        unit_dir=unit_dir,
        release_name=node.release.release_name,
        values_file=values_file,
        repo_name=repo_name,
        repo_url=repo_url,
    )


def default_namespace(unit_dir: Path) -> str:
    """Namespace a unit declares for itself, else the directory name."""
    node = detect_release(unit_dir)
    if node is not None:
        return node.namespace
    ns_file = unit_dir / NAMESPACE_FILE
    if ns_file.is_file():
        name = extract_metadata_field(ns_file.read_text(encoding="utf-8"), "name")
        if name:
            return name
    return unit_dir.name


def print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        console.warn(warning)


def print_command_log(commands: list[str]) -> None:
    if not commands:
        return
    table = Table(show_header=True, header_style="bold", title="Commands")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Command", style="cyan")
    for i, command in enumerate(commands, 1):
        table.add_row(str(i), command)
    console.print(table)


def run_operation(
    label: str, resource_id: str, fn: Callable[..., T], *args: Any
) -> T:
    """Run a long operation on a worker thread behind a status spinner."""
    with OperationWorker(max_workers=1) as worker:
        future = worker.submit(resource_id, fn, *args)
        with console.status(label):
            return future.result()
