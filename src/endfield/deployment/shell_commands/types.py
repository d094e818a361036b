"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandResult", "NOT_FOUND_RETURNCODE"]

# Conventional shell exit status for "command not found".
NOT_FOUND_RETURNCODE = 127


@dataclass(frozen=True)
class CommandResult:
    """Result of a command execution.

    Attributes:
        success: Whether the command exited with status 0
        stdout: Captured standard output
        stderr: Captured standard error, or the launch failure text
        returncode: Exit status
        command: The argument list as a shell-quoted line, for audit logs
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    command: str = ""

    @property
    def output(self) -> str:
        """stdout on success, stderr otherwise."""
        return self.stdout if self.success else self.stderr
