"""Tests for the deploy, remove and diff pipelines."""

from dataclasses import replace
from pathlib import Path

import pytest

from endfield.deployment.orchestrator import (
    DeployOrchestrator,
    RawTarget,
    ReleaseTarget,
    target_origin,
)
from endfield.deployment.shell_commands import ShellCommands
from endfield.manifests.models import Origin

RENDERED = """\
apiVersion: v1
kind: Service
metadata:
  name: cache-redis
---
apiVersion: v1
kind: Namespace
metadata:
  name: infra-cache
"""


@pytest.fixture
def orchestrator(commands: ShellCommands) -> DeployOrchestrator:
    return DeployOrchestrator(commands)


@pytest.fixture
def release(tmp_path: Path) -> ReleaseTarget:
    unit_dir = tmp_path / "infra" / "cache"
    (unit_dir / "helm").mkdir(parents=True)
    return ReleaseTarget(
        unit_dir=unit_dir,
        release_name="cache",
        repo_name="bitnami",
        repo_url="https://charts.bitnami.com/bitnami",
    )


class TestDeployRaw:
    def test_applies_unit_directory(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        unit_dir = tmp_path / "apps" / "api"

        outcome = orchestrator.deploy("api", "shop", RawTarget(unit_dir))

        assert outcome.success
        assert outcome.origin == Origin.RAW
        assert fake_runner.calls == [
            ["kubectl", "get", "namespace", "shop"],
            ["kubectl", "apply", "-f", str(unit_dir), "--recursive"],
        ]
        assert outcome.commands == [
            "kubectl get namespace shop",
            f"kubectl apply -f {unit_dir} --recursive",
        ]

    def test_creates_missing_namespace(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.respond("kubectl", "get", "namespace", success=False)

        outcome = orchestrator.deploy("api", "shop", RawTarget(tmp_path))

        assert outcome.success
        assert fake_runner.heads() == [
            ("kubectl", "get", "namespace"),
            ("kubectl", "create", "namespace"),
            ("kubectl", "apply", "-f"),
        ]

    def test_namespace_failure_is_fatal(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.respond("kubectl", "get", "namespace", success=False)
        fake_runner.respond(
            "kubectl", "create", "namespace", success=False, stderr="forbidden\n"
        )

        outcome = orchestrator.deploy("api", "shop", RawTarget(tmp_path))

        assert not outcome.success
        assert outcome.error == "Cannot create namespace shop: forbidden"
        assert len(fake_runner.calls) == 2

    def test_apply_failure(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.respond("kubectl", "apply", success=False, stderr="invalid")

        outcome = orchestrator.deploy("api", "shop", RawTarget(tmp_path))

        assert not outcome.success
        assert outcome.error == "invalid"
        assert outcome.stderr == "invalid"


class TestDeployRelease:
    def test_full_flow_order(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        fake_runner.respond("helm", "template", stdout=RENDERED)

        outcome = orchestrator.deploy("cache", "infra-cache", release)

        assert outcome.success
        assert outcome.origin == Origin.RELEASE
        assert fake_runner.heads() == [
            ("kubectl", "get", "namespace"),
            ("helm", "repo", "add"),
            ("helm", "repo", "update"),
            ("helm", "dependency", "update"),
            ("helm", "template", "cache"),
            ("helm", "upgrade", "--install"),
        ]
        assert len(outcome.commands) == 6
        rendered = sorted(p.name for p in (release.unit_dir / "rendered").iterdir())
        assert rendered == [
            "00-namespace-infra-cache.yaml",
            "01-service-cache-redis.yaml",
        ]

    def test_default_values_file(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        orchestrator.deploy("cache", "infra-cache", release)

        install = fake_runner.calls[-1]
        values = install[install.index("--values") + 1]
        assert values == str(release.unit_dir / "helm" / "values.yaml")

    def test_relative_values_override_is_made_absolute(
        self,
        orchestrator: DeployOrchestrator,
        fake_runner,
        release: ReleaseTarget,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        target = replace(release, values_file="overrides/redis.yaml")

        orchestrator.deploy("cache", "infra-cache", target)

        expected = str(tmp_path / "overrides" / "redis.yaml")
        helm_calls = [
            argv
            for argv in fake_runner.calls
            if argv[:2] in (["helm", "template"], ["helm", "upgrade"])
        ]
        assert len(helm_calls) == 2
        for argv in helm_calls:
            assert argv[argv.index("--values") + 1] == expected

    def test_dependency_failure_stops_before_install(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        fake_runner.respond(
            "helm", "dependency", "update", success=False, stderr="no repository"
        )

        outcome = orchestrator.deploy("cache", "infra-cache", release)

        assert not outcome.success
        assert outcome.error == "helm dependency update failed: no repository"
        assert ("helm", "template", "cache") not in fake_runner.heads()
        assert ("helm", "upgrade", "--install") not in fake_runner.heads()

    def test_repo_and_template_failures_are_warnings(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        fake_runner.respond("helm", "repo", "add", success=False, stderr="exists")
        fake_runner.respond("helm", "template", success=False, stderr="bad values")

        outcome = orchestrator.deploy("cache", "infra-cache", release)

        assert outcome.success
        assert outcome.warnings == [
            "helm repo add failed: exists",
            "helm template failed: bad values",
        ]
        assert fake_runner.heads()[-1] == ("helm", "upgrade", "--install")

    def test_repo_skipped_without_url(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        target = ReleaseTarget(unit_dir=release.unit_dir, release_name="cache")

        orchestrator.deploy("cache", "infra-cache", target)

        assert ("helm", "repo", "add") not in fake_runner.heads()

    def test_install_wait(
        self, commands: ShellCommands, fake_runner, release: ReleaseTarget
    ) -> None:
        orchestrator = DeployOrchestrator(
            commands, install_wait=True, install_timeout="2m"
        )

        orchestrator.deploy("cache", "infra-cache", release)

        assert fake_runner.calls[-1][-3:] == ["--wait", "--timeout", "2m"]


class TestRemove:
    def test_release_is_uninstalled(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        outcome = orchestrator.remove("cache", "infra-cache", release)

        assert outcome.success
        assert fake_runner.calls == [
            [
                "helm",
                "uninstall",
                "cache",
                "--namespace",
                "infra-cache",
                "--ignore-not-found",
            ]
        ]

    def test_raw_unit_is_deleted_recursively(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        outcome = orchestrator.remove("api", "shop", RawTarget(tmp_path))

        assert outcome.success
        assert outcome.origin == Origin.RAW
        assert fake_runner.calls[0][:2] == ["kubectl", "delete"]
        assert "--recursive" in fake_runner.calls[0]
        assert tmp_path.exists()


class TestDiff:
    def test_raw_diff_with_changes(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.respond("kubectl", "diff", success=False, stdout="-replicas: 1\n")

        outcome = orchestrator.diff("api", "shop", RawTarget(tmp_path))

        assert outcome.has_changes
        assert outcome.error is None
        assert outcome.diff == "-replicas: 1\n"

    def test_raw_diff_error_without_output(
        self, orchestrator: DeployOrchestrator, fake_runner, tmp_path: Path
    ) -> None:
        fake_runner.respond("kubectl", "diff", success=False, stderr="no context")

        outcome = orchestrator.diff("api", "shop", RawTarget(tmp_path))

        assert not outcome.has_changes
        assert outcome.error == "no context"

    def test_release_uses_helm_diff(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        fake_runner.respond("helm", "diff", stdout="+ image: redis:7.2\n")

        outcome = orchestrator.diff("cache", "infra-cache", release)

        assert outcome.has_changes
        assert fake_runner.heads(2) == [("helm", "diff")]

    def test_release_falls_back_to_rendered_output(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        (release.unit_dir / "rendered").mkdir()
        fake_runner.respond("helm", "diff", success=False, stderr="unknown command")

        outcome = orchestrator.diff("cache", "infra-cache", release)

        assert outcome.error is None
        assert not outcome.has_changes
        assert fake_runner.calls[-1] == [
            "kubectl",
            "diff",
            "-f",
            str(release.unit_dir / "rendered"),
        ]
        assert outcome.warnings == [
            "helm diff unavailable, compared rendered output: unknown command"
        ]

    def test_release_without_rendered_output(
        self, orchestrator: DeployOrchestrator, fake_runner, release: ReleaseTarget
    ) -> None:
        fake_runner.respond("helm", "diff", success=False, stderr="unknown command")

        outcome = orchestrator.diff("cache", "infra-cache", release)

        assert outcome.error.startswith("helm diff failed (unknown command)")
        assert len(outcome.commands) == 1


def test_target_origin() -> None:
    assert target_origin(RawTarget(Path("."))) == Origin.RAW
    assert target_origin(ReleaseTarget(Path("."), "x")) == Origin.RELEASE
