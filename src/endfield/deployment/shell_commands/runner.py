"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
the helm and kubectl command modules.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .types import NOT_FOUND_RETURNCODE, CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    A missing binary never raises: it is reported as a failed CommandResult
    with exit status 127 and ``"<tool> not found: <reason>"`` as stderr.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the command runner.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self.project_root = project_root

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        input_data: str | None = None,
    ) -> CommandResult:
        """Execute a command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            capture_output: Whether to capture stdout/stderr
            input_data: Optional text written to the command's stdin

        Returns:
            CommandResult with success status, output, return code and the
            quoted command line
        """
        argv = list(cmd)
        command = shlex.join(argv)
        workdir = cwd or self.project_root
        logger.debug(f"$ {command}")

        if not workdir.is_dir():
            return CommandResult(
                success=False,
                stderr=f"Working directory does not exist: {workdir}",
                returncode=1,
                command=command,
            )

        try:
            result = subprocess.run(
                argv,
                cwd=workdir,
                capture_output=capture_output,
                text=True,
                input=input_data,
                check=False,
            )
        except FileNotFoundError as exc:
            logger.warning(f"{argv[0]} not found: {exc}")
            return CommandResult(
                success=False,
                stderr=f"{argv[0]} not found: {exc}",
                returncode=NOT_FOUND_RETURNCODE,
                command=command,
            )

        if result.returncode != 0:
            logger.debug(f"{argv[0]} exited with {result.returncode}")
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
            command=command,
        )
