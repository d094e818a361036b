"""Writing generated units to the project tree.

Field units live in ``<project>/apps/<id>/`` and infra units in
``<project>/infra/<id>/``. Failing to create the unit directory or its
namespace file is terminal; any later per-file failure becomes a warning.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .chart_release import (
    CHART_DIR,
    CHART_FILE,
    NAMESPACE_FILE,
    RENDERED_DIR,
    SENTINEL_FILE,
    VALUES_FILE,
)
from .generator import (
    chart_descriptor,
    chart_values,
    field_bundle,
    namespace_manifest,
    resolve_namespace,
)
from .models import GenerateOutcome
from .specs import FieldSpec, InfraSpec

APPS_DIR = "apps"
INFRA_DIR = "infra"


def _write_file(
    path: Path, content: str, generated: list[str], warnings: list[str]
) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        warnings.append(f"Cannot write {path.name}: {exc}")
        logger.warning(f"Cannot write {path}: {exc}")
        return
    generated.append(str(path))


def _start_unit(unit_dir: Path, namespace: str) -> tuple[list[str], str | None]:
    """Create the unit directory and its namespace file.

    Returns:
        Tuple of (generated paths, terminal error or None)
    """
    try:
        unit_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return [], f"Cannot create directory {unit_dir}: {exc}"

    ns_path = unit_dir / NAMESPACE_FILE
    try:
        ns_path.write_text(namespace_manifest(namespace), encoding="utf-8")
    except OSError as exc:
        return [], f"Cannot write {NAMESPACE_FILE}: {exc}"
    return [str(ns_path)], None


def generate_field(spec: FieldSpec) -> GenerateOutcome:
    """Write a workload unit: namespace, optional secret, workload, service, config.

    Args:
        spec: Field intent

    Returns:
        GenerateOutcome listing every file written
    """
    namespace = resolve_namespace(spec)
    unit_dir = Path(spec.project_path) / APPS_DIR / spec.id

    generated, error = _start_unit(unit_dir, namespace)
    if error is not None:
        return GenerateOutcome(
            generated_files=generated, namespace=namespace, error=error
        )

    warnings: list[str] = []
    for filename, content in field_bundle(spec, namespace):
        _write_file(unit_dir / filename, content, generated, warnings)

    logger.info(f"Generated field {spec.id} in {unit_dir} ({len(generated)} files)")
    return GenerateOutcome(
        generated_files=generated, namespace=namespace, warnings=warnings
    )


def generate_infra(spec: InfraSpec) -> GenerateOutcome:
    """Write an infra unit backed by a published chart or by raw manifests.

    Chart units get ``helm/Chart.yaml``, ``helm/values.yaml`` (unless a values
    override is given) and an empty ``rendered/`` directory kept by a sentinel.
    Raw-file units only get their namespace file; the referenced manifests
    are expected to exist already.

    Args:
        spec: Infra intent

    Returns:
        GenerateOutcome; a missing chart descriptor or raw path is an error
    """
    namespace = spec.namespace or f"infra-{spec.id}"

    if spec.source == "chart" and spec.chart is None:
        return GenerateOutcome(
            generated_files=[],
            namespace=namespace,
            error="source=chart but chart descriptor is missing",
        )
    if spec.source == "raw-file" and not spec.raw_path:
        return GenerateOutcome(
            generated_files=[],
            namespace=namespace,
            error="source=raw-file but no path was provided",
        )

    unit_dir = Path(spec.project_path) / INFRA_DIR / spec.id
    generated, error = _start_unit(unit_dir, namespace)
    if error is not None:
        return GenerateOutcome(
            generated_files=generated, namespace=namespace, error=error
        )

    warnings: list[str] = []
    if spec.chart is not None and spec.source == "chart":
        chart_dir = unit_dir / CHART_DIR
        try:
            chart_dir.mkdir(exist_ok=True)
        except OSError as exc:
            return GenerateOutcome(
                generated_files=generated,
                namespace=namespace,
                warnings=warnings,
                error=f"Cannot create {CHART_DIR}/: {exc}",
            )

        descriptor = chart_descriptor(spec, spec.chart)
        _write_file(chart_dir / CHART_FILE, descriptor, generated, warnings)
        if spec.chart.values_path is None:
            values = chart_values(spec, spec.chart)
            _write_file(chart_dir / VALUES_FILE, values, generated, warnings)

        rendered_dir = unit_dir / RENDERED_DIR
        try:
            rendered_dir.mkdir(exist_ok=True)
            (rendered_dir / SENTINEL_FILE).touch()
        except OSError as exc:
            warnings.append(f"Cannot create {RENDERED_DIR}/: {exc}")
        else:
            generated.append(str(rendered_dir))
    elif spec.raw_path:
        raw_path = Path(spec.project_path) / spec.raw_path
        if not raw_path.exists():
            warnings.append(f"Raw manifest path does not exist: {raw_path}")

    logger.info(f"Generated infra {spec.id} ({spec.source}) in {unit_dir}")
    return GenerateOutcome(
        generated_files=generated, namespace=namespace, warnings=warnings
    )
