"""Shared test fixtures."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest
from loguru import logger

from endfield.deployment.shell_commands import CommandResult, ShellCommands


@dataclass
class _Response:
    prefix: tuple[str, ...]
    success: bool
    stdout: str
    stderr: str
    contains: str | None


class FakeRunner:
    """Stand-in for CommandRunner that records calls and replays scripted results.

    Unscripted commands succeed with empty output. When several responses
    match, the most recently added one wins.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.inputs: list[str | None] = []
        self._responses: list[_Response] = []

    def respond(
        self,
        *prefix: str,
        success: bool = True,
        stdout: str = "",
        stderr: str = "",
        contains: str | None = None,
    ) -> None:
        """Script the result for commands starting with ``prefix``.

        Args:
            prefix: Leading argv tokens, binary included
            contains: Extra text that must appear in the command line or stdin
        """
        self._responses.append(_Response(prefix, success, stdout, stderr, contains))

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        input_data: str | None = None,
    ) -> CommandResult:
        argv = list(cmd)
        command = shlex.join(argv)
        self.calls.append(argv)
        self.inputs.append(input_data)

        for response in reversed(self._responses):
            if tuple(argv[: len(response.prefix)]) != response.prefix:
                continue
            if response.contains is not None and not (
                response.contains in command or response.contains in (input_data or "")
            ):
                continue
            return CommandResult(
                success=response.success,
                stdout=response.stdout,
                stderr=response.stderr,
                returncode=0 if response.success else 1,
                command=command,
            )
        return CommandResult(success=True, command=command)

    def heads(self, size: int = 3) -> list[tuple[str, ...]]:
        """Leading tokens of every recorded call, for ordering assertions."""
        return [tuple(argv[:size]) for argv in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def commands(tmp_path: Path, fake_runner: FakeRunner) -> ShellCommands:
    """ShellCommands rooted at tmp_path and backed by the fake runner."""
    return ShellCommands(tmp_path, runner=fake_runner)  # type: ignore[arg-type]


@pytest.fixture
def caplog_loguru(caplog: pytest.LogCaptureFixture):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)
