"""Classification of single YAML documents into graph nodes.

Category inference is a pure keyword-substring heuristic over image
repositories and chart names. It only feeds visual grouping.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .fields import (
    extract_field,
    extract_images,
    extract_metadata_field,
    extract_replicas,
)
from .models import WORKLOAD_KINDS, Category, GraphNode, Origin

# Ordered: the first matching category wins.
IMAGE_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.GATEWAY, ("nginx", "traefik", "haproxy", "envoy")),
    (Category.CACHE, ("redis",)),
    (
        Category.DATABASE,
        (
            "postgres",
            "mysql",
            "mongo",
            "mariadb",
            "cockroach",
            "cassandra",
            "clickhouse",
        ),
    ),
    (
        Category.QUEUE,
        ("kafka", "rabbitmq", "nats", "pulsar", "activemq", "redpanda"),
    ),
    (
        Category.MONITORING,
        ("prometheus", "grafana", "jaeger", "elasticsearch", "kibana", "fluentd"),
    ),
    (Category.INFRA, ("cert-manager", "certmanager")),
)

CHART_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.GATEWAY, ("nginx", "traefik", "ingress")),
    (Category.CACHE, ("redis",)),
    (Category.DATABASE, ("postgres", "mysql", "mongo", "mariadb")),
    (Category.QUEUE, ("kafka", "rabbitmq", "nats", "redpanda")),
    (Category.MONITORING, ("prometheus", "grafana", "loki")),
    (Category.INFRA, ("cert-manager", "vault", "external-secrets")),
)

# Fallback when a document declares no usable image.
KIND_CATEGORY_DEFAULTS: dict[str, Category] = {
    "Service": Category.GATEWAY,
    "Ingress": Category.GATEWAY,
    "ConfigMap": Category.CONFIG,
    "Secret": Category.CONFIG,
}


def _match_keywords(
    text: str, table: tuple[tuple[Category, tuple[str, ...]], ...]
) -> Category:
    for category, keywords in table:
        if any(keyword in text for keyword in keywords):
            return category
    return Category.SERVICE


def image_repository(image: str) -> str:
    """Return the lowercased repository segment of an image reference.

    ``"ghcr.io/Acme/Widget:1.0"`` becomes ``"widget"``.
    """
    last_segment = image.lower().rsplit("/", 1)[-1]
    return last_segment.split(":", 1)[0].split("@", 1)[0]


def image_to_category(image: str) -> Category:
    """Infer a category from a container image reference (case-insensitive)."""
    return _match_keywords(image_repository(image), IMAGE_KEYWORDS)


def chart_to_category(chart_name: str) -> Category:
    """Infer a category from a chart name (case-insensitive)."""
    return _match_keywords(chart_name.lower(), CHART_KEYWORDS)


def sanitize_name(name: str) -> str:
    """Replace characters that are unsafe in identifiers and file names."""
    return name.replace("/", "-").replace(".", "-")


def classify_document(doc: str, path: Path, index: int) -> GraphNode | None:
    """Turn one YAML document into a workload graph node.

    Args:
        doc: Trimmed document text
        path: File the document was read from
        index: Zero-based position of the document within the file

    Returns:
        A GraphNode for workload kinds, None for anything else
    """
    kind = extract_field(doc, "kind")
    if kind is None or kind not in WORKLOAD_KINDS:
        return None

    name = extract_metadata_field(doc, "name") or "unknown"
    namespace = extract_metadata_field(doc, "namespace") or "default"
    images = extract_images(doc)

    if images:
        image = images[0]
        category = image_to_category(image)
    else:
        image = ""
        category = KIND_CATEGORY_DEFAULTS.get(kind, Category.SERVICE)

    node_id = f"{sanitize_name(name)}-{path.stem or 'f'}-{index}"
    logger.debug(f"Classified {kind}/{name} in {path} as {category}")

    return GraphNode(
        id=node_id,
        label=name,
        kind=kind,
        image=image,
        category=category,
        namespace=namespace,
        file_path=str(path),
        replicas=extract_replicas(doc),
        origin=Origin.RAW,
    )
