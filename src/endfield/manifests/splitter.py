"""Splitting of multi-document template output into ordered files."""

from __future__ import annotations

from .classifier import sanitize_name
from .fields import extract_field, extract_metadata_field, split_documents

UNRANKED = 50

# Apply order expected by the cluster: namespaces and RBAC before workloads.
KIND_RANK: dict[str, int] = {
    "Namespace": 0,
    "ServiceAccount": 1,
    "ClusterRole": 2,
    "ClusterRoleBinding": 3,
    "Role": 4,
    "RoleBinding": 5,
    "ConfigMap": 6,
    "Secret": 7,
    "PersistentVolumeClaim": 8,
    "Service": 9,
    "Deployment": 10,
    "StatefulSet": 11,
    "DaemonSet": 12,
    "Job": 13,
    "CronJob": 14,
    "Ingress": 15,
    "IngressClass": 16,
    "CustomResourceDefinition": 17,
}


def kind_rank(kind: str) -> int:
    return KIND_RANK.get(kind, UNRANKED)


def _is_blank_document(doc: str) -> bool:
    return all(
        not line.strip() or line.strip().startswith("#") for line in doc.splitlines()
    )


def _drop_leading_marker(doc: str) -> str:
    # Output that begins with "---" keeps the marker in its first document.
    first, _, rest = doc.partition("\n")
    if first.strip() == "---":
        return rest.strip()
    return doc


def split_rendered(raw: str) -> list[tuple[str, str]]:
    """Split rendered output into sequence-numbered (filename, content) pairs.

    Filenames look like ``00-namespace-demo.yaml``. Content is the trimmed
    document followed by a single newline.

    Args:
        raw: Concatenated template output

    Returns:
        Pairs sorted by kind rank, then by unnumbered filename
    """
    entries: list[tuple[int, str, str]] = []
    for doc in split_documents(raw):
        trimmed = _drop_leading_marker(doc.strip())
        if _is_blank_document(trimmed):
            continue
        kind = extract_field(trimmed, "kind") or "Unknown"
        name = extract_metadata_field(trimmed, "name") or "resource"
        filename = f"{kind.lower()}-{sanitize_name(name)}.yaml"
        entries.append((kind_rank(kind), filename, trimmed))

    entries.sort(key=lambda entry: (entry[0], entry[1]))
    return [
        (f"{position:02d}-{filename}", f"{content}\n")
        for position, (_, filename, content) in enumerate(entries)
    ]
