"""Manifest intelligence: scanning, classification and generation.

- fields: line-oriented scalar extraction from raw YAML text
- classifier: one document to zero-or-one graph node
- chart_release: release units backed by a published chart
- scanner / dedup: project walk and collision resolution
- generator / units: canonical resource text and unit directories
- splitter: ordered files from rendered template output
- replicas: in-place replica count rewrite

Usage:
    from endfield.manifests import scan_project

    result = scan_project("/path/to/project")
    for node in result.nodes:
        print(node.id, node.kind, node.category)
"""

from .chart_release import detect_release
from .classifier import chart_to_category, classify_document, image_to_category
from .dedup import deduplicate
from .models import (
    Category,
    GenerateOutcome,
    GraphNode,
    Origin,
    ReleaseMeta,
    ScanResult,
)
from .replicas import patch_replicas
from .scanner import list_manifest_files, scan_project
from .specs import (
    ChartSource,
    ContainerPort,
    EnvEntry,
    FieldSpec,
    ImageDeployRequest,
    InfraSpec,
    IngressRoute,
    ResourceOverrides,
)
from .splitter import split_rendered
from .units import generate_field, generate_infra

__all__ = [
    # Models
    "Category",
    "Origin",
    "GraphNode",
    "ReleaseMeta",
    "ScanResult",
    "GenerateOutcome",
    # Intent
    "EnvEntry",
    "FieldSpec",
    "ChartSource",
    "InfraSpec",
    "ContainerPort",
    "ResourceOverrides",
    "ImageDeployRequest",
    "IngressRoute",
    # Operations
    "scan_project",
    "list_manifest_files",
    "classify_document",
    "image_to_category",
    "chart_to_category",
    "detect_release",
    "deduplicate",
    "split_rendered",
    "patch_replicas",
    "generate_field",
    "generate_infra",
]
