"""Tests for rendered output management."""

from pathlib import Path

import pytest

from endfield.deployment.rendering import RenderManager
from endfield.deployment.shell_commands import ShellCommands

RENDERED = """\
---
# Source: cache/templates/deployment.yaml
apiVersion: apps/v1
kind: Deployment
metadata:
  name: cache
---
# Source: cache/templates/serviceaccount.yaml
apiVersion: v1
kind: ServiceAccount
metadata:
  name: cache
"""


@pytest.fixture
def renderer(commands: ShellCommands) -> RenderManager:
    return RenderManager(commands)


class TestWriteOutput:
    def test_replaces_previous_output(
        self, renderer: RenderManager, tmp_path: Path
    ) -> None:
        output = tmp_path / "rendered"
        output.mkdir()
        (output / ".gitkeep").touch()
        (output / "00-old.yaml").write_text("kind: Old\n")
        (output / "nested").mkdir()

        outcome = renderer.write_output(output, RENDERED)

        assert outcome.success
        assert sorted(p.name for p in output.iterdir()) == [
            ".gitkeep",
            "00-serviceaccount-cache.yaml",
            "01-deployment-cache.yaml",
        ]
        assert [Path(p).name for p in outcome.rendered_files] == [
            "00-serviceaccount-cache.yaml",
            "01-deployment-cache.yaml",
        ]

    def test_creates_missing_directory(
        self, renderer: RenderManager, tmp_path: Path
    ) -> None:
        output = tmp_path / "infra" / "cache" / "rendered"

        outcome = renderer.write_output(output, "")

        assert outcome.success
        assert outcome.rendered_files == []
        assert output.is_dir()

    def test_unusable_directory_is_an_error(
        self, renderer: RenderManager, tmp_path: Path
    ) -> None:
        output = tmp_path / "rendered"
        output.write_text("a file")

        outcome = renderer.write_output(output, RENDERED)

        assert not outcome.success
        assert outcome.error.startswith(f"Cannot prepare {output}")


class TestRenderRelease:
    @pytest.fixture
    def unit_dir(self, tmp_path: Path) -> Path:
        unit = tmp_path / "infra" / "cache"
        (unit / "helm").mkdir(parents=True)
        return unit

    def test_renders_into_unit(
        self, renderer: RenderManager, fake_runner, unit_dir: Path
    ) -> None:
        fake_runner.respond("helm", "template", stdout=RENDERED)

        outcome = renderer.render_release(unit_dir, "cache", "infra-cache")

        assert outcome.success
        assert len(outcome.rendered_files) == 2
        assert fake_runner.heads(2) == [
            ("helm", "version"),
            ("helm", "dependency"),
            ("helm", "template"),
        ]

    def test_missing_helm(
        self, renderer: RenderManager, fake_runner, unit_dir: Path
    ) -> None:
        fake_runner.respond("helm", "version", success=False)

        outcome = renderer.render_release(unit_dir, "cache", "infra-cache")

        assert outcome.error == "helm CLI not found; install helm 3 to render templates"
        assert len(fake_runner.calls) == 1

    def test_template_failure_is_terminal(
        self, renderer: RenderManager, fake_runner, unit_dir: Path
    ) -> None:
        fake_runner.respond("helm", "template", success=False, stderr="parse error")

        outcome = renderer.render_release(unit_dir, "cache", "infra-cache")

        assert outcome.error == "helm template failed: parse error"
        assert not (unit_dir / "rendered").exists()

    def test_values_override(
        self, renderer: RenderManager, fake_runner, unit_dir: Path
    ) -> None:
        renderer.render_release(unit_dir, "cache", "infra-cache", "/p/redis.yaml")

        template = fake_runner.calls[-1]
        assert template[template.index("--values") + 1] == "/p/redis.yaml"

    def test_relative_values_override_is_made_absolute(
        self,
        renderer: RenderManager,
        fake_runner,
        unit_dir: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)

        renderer.render_release(unit_dir, "cache", "infra-cache", "redis.yaml")

        template = fake_runner.calls[-1]
        assert template[template.index("--values") + 1] == str(tmp_path / "redis.yaml")
