"""Tests for helm command construction."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from endfield.deployment.shell_commands.helm import HelmCommands
from endfield.deployment.shell_commands.types import CommandResult


class TestHelmCommands:
    """Argument lists passed to the runner."""

    @pytest.fixture
    def mock_runner(self) -> MagicMock:
        runner = MagicMock()
        runner.run.return_value = CommandResult(success=True)
        return runner

    @pytest.fixture
    def helm_commands(self, mock_runner: MagicMock) -> HelmCommands:
        return HelmCommands(mock_runner)

    def test_dependency_update_runs_in_chart_dir(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.dependency_update(Path("/p/infra/cache/helm"))

        cmd = mock_runner.run.call_args[0][0]
        assert cmd == ["helm", "dependency", "update", "."]
        assert mock_runner.run.call_args.kwargs["cwd"] == Path("/p/infra/cache/helm")

    def test_template_includes_crds(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.template("cache", Path("/c"), "infra-cache", "values.yaml")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:4] == ["helm", "template", "cache", "."]
        assert "--include-crds" in cmd
        assert cmd[cmd.index("--namespace") + 1] == "infra-cache"
        assert cmd[cmd.index("--values") + 1] == "values.yaml"

    def test_upgrade_install_without_wait(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.upgrade_install("cache", Path("/c"), "infra-cache", "v.yaml")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:4] == ["helm", "upgrade", "--install", "cache"]
        assert "--create-namespace" in cmd
        assert "--atomic=false" in cmd
        assert "--wait" not in cmd

    def test_upgrade_install_with_wait(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.upgrade_install(
            "cache", Path("/c"), "infra-cache", "v.yaml", wait=True, timeout="10m"
        )

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[-3:] == ["--wait", "--timeout", "10m"]

    def test_uninstall_ignores_missing_release(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.uninstall("cache", "infra-cache")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd == [
            "helm",
            "uninstall",
            "cache",
            "--namespace",
            "infra-cache",
            "--ignore-not-found",
        ]

    def test_diff_upgrade_allows_unreleased(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        helm_commands.diff_upgrade("cache", Path("/c"), "infra-cache", "v.yaml")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:3] == ["helm", "diff", "upgrade"]
        assert "--allow-unreleased" in cmd

    def test_custom_binary(self, mock_runner: MagicMock) -> None:
        HelmCommands(mock_runner, binary="/opt/helm").repo_update()

        assert mock_runner.run.call_args[0][0] == ["/opt/helm", "repo", "update"]
