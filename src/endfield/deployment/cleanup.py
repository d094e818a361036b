"""Disk and cluster cleanup, plus the replica apply shortcut.

Cluster removal through the orchestrator never touches files. Deleting a
unit's files from disk is this module's job and is origin-agnostic.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from endfield.manifests.replicas import patch_replicas

if TYPE_CHECKING:
    from .shell_commands import CommandResult, ShellCommands


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of deleting paths from the cluster and from disk.

    Cluster and disk failures are reported independently.
    """

    deleted_files: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    file_errors: list[str] = field(default_factory=list)
    cluster_output: str | None = None
    cluster_error: str | None = None


class CleanupManager:
    """Manages explicit removal of unit files and labeled resources.

    Handles:
    - Best-effort cluster delete followed by disk delete, per path
    - Removal of an emptied parent directory after a file delete
    - Bulk delete of resources carrying an ``app`` label
    - Replica patch followed by apply
    """

    def __init__(self, commands: ShellCommands) -> None:
        """Initialize the cleanup manager.

        Args:
            commands: Shell command executor
        """
        self.commands = commands

    def delete_from_disk(
        self, paths: list[str], *, delete_from_cluster: bool = True
    ) -> DeleteOutcome:
        """Delete files or directories, optionally deleting their resources first.

        Args:
            paths: Files or unit directories to remove
            delete_from_cluster: Run ``kubectl delete -f`` on each path first

        Returns:
            DeleteOutcome; missing paths are listed, never raised
        """
        deleted: list[str] = []
        missing: list[str] = []
        file_errors: list[str] = []
        cluster_out: list[str] = []
        cluster_err: list[str] = []

        for raw_path in paths:
            path = Path(raw_path)
            if not path.exists():
                missing.append(raw_path)
                continue

            is_dir = path.is_dir()
            if delete_from_cluster:
                result = self.commands.kubectl.delete(path, recursive=is_dir)
                if result.success:
                    if result.stdout.strip():
                        cluster_out.append(f"{raw_path}: {result.stdout.strip()}")
                else:
                    cluster_err.append(f"{raw_path}: {result.stderr.strip()}")

            try:
                if is_dir:
                    shutil.rmtree(path)
                else:
                    path.unlink()
            except OSError as exc:
                file_errors.append(f"{raw_path}: {exc}")
                continue

            deleted.append(raw_path)
            logger.info(f"Deleted {raw_path}")
            if not is_dir:
                self._remove_if_empty(path.parent)

        return DeleteOutcome(
            deleted_files=deleted,
            missing_files=missing,
            file_errors=file_errors,
            cluster_output="\n".join(cluster_out) or None,
            cluster_error="\n".join(cluster_err) or None,
        )

    def _remove_if_empty(self, directory: Path) -> None:
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                logger.debug(f"Removed empty directory {directory}")
        except OSError as exc:
            logger.debug(f"Could not remove {directory}: {exc}")

    def delete_by_label(self, app_label: str, namespace: str) -> CommandResult:
        """Delete every common resource labeled ``app=<app_label>`` in a namespace."""
        return self.commands.kubectl.delete_by_label(app_label, namespace)

    def apply_replicas(
        self, file_path: str, label: str, replicas: int
    ) -> CommandResult:
        """Patch a workload's replica count on disk, then apply the file.

        Raises:
            ReplicaPatchError: If the file could not be patched; nothing is
                applied in that case
        """
        patch_replicas(file_path, label, replicas)
        return self.commands.kubectl.apply(file_path)
