"""Tests for writing generated units to disk."""

from pathlib import Path

from endfield.manifests.specs import ChartSource, EnvEntry, FieldSpec, InfraSpec
from endfield.manifests.units import generate_field, generate_infra


def _chart(**kwargs) -> ChartSource:
    return ChartSource(
        repo_name="bitnami",
        repo_url="https://charts.bitnami.com/bitnami",
        chart_name="redis",
        chart_version="19.0.0",
        **kwargs,
    )


class TestGenerateField:
    def test_writes_unit_files(self, tmp_path: Path) -> None:
        spec = FieldSpec(
            id="api",
            image="myorg/api:1.0",
            env=[EnvEntry(key="API_KEY", value="k")],
            project_path=str(tmp_path),
        )

        outcome = generate_field(spec)

        unit = tmp_path / "apps" / "api"
        assert outcome.success
        assert outcome.namespace == f"{tmp_path.name}-api"
        assert [Path(p).name for p in outcome.generated_files] == [
            "namespace.yaml",
            "api-secret.yaml",
            "deployment.yaml",
            "service.yaml",
            "configmap.yaml",
        ]
        assert (unit / "namespace.yaml").read_text().startswith("apiVersion: v1\n")
        assert outcome.warnings == []

    def test_unit_directory_cannot_be_created(self, tmp_path: Path) -> None:
        (tmp_path / "apps").write_text("not a directory")
        spec = FieldSpec(id="api", image="nginx", project_path=str(tmp_path))

        outcome = generate_field(spec)

        assert not outcome.success
        assert outcome.error.startswith("Cannot create directory")
        assert outcome.generated_files == []


class TestGenerateInfra:
    def test_chart_unit_layout(self, tmp_path: Path) -> None:
        spec = InfraSpec(
            id="cache", source="chart", chart=_chart(), project_path=str(tmp_path)
        )

        outcome = generate_infra(spec)

        unit = tmp_path / "infra" / "cache"
        assert outcome.success
        assert outcome.namespace == "infra-cache"
        assert (unit / "helm" / "Chart.yaml").is_file()
        assert (unit / "helm" / "values.yaml").is_file()
        assert (unit / "rendered" / ".gitkeep").is_file()
        assert str(unit / "rendered") in outcome.generated_files

    def test_values_override_skips_values_file(self, tmp_path: Path) -> None:
        spec = InfraSpec(
            id="cache",
            source="chart",
            namespace="data",
            chart=_chart(values_path="config/redis.yaml"),
            project_path=str(tmp_path),
        )

        outcome = generate_infra(spec)

        assert outcome.namespace == "data"
        assert not (tmp_path / "infra" / "cache" / "helm" / "values.yaml").exists()

    def test_chart_source_requires_descriptor(self, tmp_path: Path) -> None:
        spec = InfraSpec(id="cache", source="chart", project_path=str(tmp_path))

        outcome = generate_infra(spec)

        assert outcome.error == "source=chart but chart descriptor is missing"
        assert not (tmp_path / "infra").exists()

    def test_raw_source_requires_path(self, tmp_path: Path) -> None:
        spec = InfraSpec(id="mq", source="raw-file", project_path=str(tmp_path))

        outcome = generate_infra(spec)

        assert outcome.error == "source=raw-file but no path was provided"

    def test_missing_raw_path_is_a_warning(self, tmp_path: Path) -> None:
        spec = InfraSpec(
            id="mq",
            source="raw-file",
            raw_path="vendor/mq.yaml",
            project_path=str(tmp_path),
        )

        outcome = generate_infra(spec)

        assert outcome.success
        assert [Path(p).name for p in outcome.generated_files] == ["namespace.yaml"]
        assert outcome.warnings == [
            f"Raw manifest path does not exist: {tmp_path / 'vendor/mq.yaml'}"
        ]
