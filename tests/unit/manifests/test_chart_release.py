"""Tests for chart-managed release detection."""

from pathlib import Path

from endfield.manifests.chart_release import detect_release, parse_chart_dependency
from endfield.manifests.models import RELEASE_KIND, Category, Origin

CHART = """\
apiVersion: v2
name: cache
version: 0.1.0
dependencies:
  - name: redis
    version: "19.0.0"
    repository: "https://charts.bitnami.com/bitnami"
  - name: other
    version: 1.0.0
"""


def _make_unit(root: Path, name: str, chart: str = CHART) -> Path:
    unit = root / name
    (unit / "helm").mkdir(parents=True)
    (unit / "helm" / "Chart.yaml").write_text(chart)
    return unit


class TestParseChartDependency:
    def test_first_dependency_wins(self) -> None:
        dependency = parse_chart_dependency(CHART)

        assert dependency is not None
        assert dependency.name == "redis"
        assert dependency.version == "19.0.0"
        assert dependency.repository == "https://charts.bitnami.com/bitnami"

    def test_no_dependencies(self) -> None:
        assert parse_chart_dependency("apiVersion: v2\nname: x\n") is None

    def test_top_level_key_closes_block(self) -> None:
        chart = "dependencies:\nname: x\n  - name: late\n"
        assert parse_chart_dependency(chart) is None


class TestDetectRelease:
    def test_no_descriptor(self, tmp_path: Path) -> None:
        assert detect_release(tmp_path) is None

    def test_release_node(self, tmp_path: Path) -> None:
        unit = _make_unit(tmp_path, "cache")

        node = detect_release(unit)

        assert node is not None
        assert node.kind == RELEASE_KIND
        assert node.origin == Origin.RELEASE
        assert node.category == Category.CACHE
        assert node.namespace == "infra-cache"
        assert node.release is not None
        assert node.release.release_name == "cache"
        assert node.release.chart_name == "redis"
        assert node.release.values_path == str(unit / "helm" / "values.yaml")
        assert node.release.output_dir == str(unit / "rendered")

    def test_namespace_from_namespace_file(self, tmp_path: Path) -> None:
        unit = _make_unit(tmp_path, "cache")
        (unit / "namespace.yaml").write_text(
            "apiVersion: v1\nkind: Namespace\nmetadata:\n  name: data-plane\n"
        )

        node = detect_release(unit)

        assert node is not None
        assert node.namespace == "data-plane"
        assert node.release is not None
        assert node.release.namespace == "data-plane"

    def test_descriptor_without_dependency(self, tmp_path: Path) -> None:
        unit = _make_unit(tmp_path, "plain", chart="apiVersion: v2\nname: plain\n")
        assert detect_release(unit) is None
