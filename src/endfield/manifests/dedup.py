"""Merging of multiple on-disk representations of one logical workload."""

from __future__ import annotations

from dataclasses import replace

from .models import GraphNode, Origin

RELEASE_PRIORITY = 0
DEFAULT_PRIORITY = 8

KIND_PRIORITY: dict[str, int] = {
    "StatefulSet": 1,
    "Deployment": 2,
    "DaemonSet": 3,
    "ReplicaSet": 4,
    "Job": 5,
    "CronJob": 6,
    "Pod": 7,
}


def node_priority(node: GraphNode) -> int:
    """Lower wins. Release origin beats every raw kind."""
    if node.origin == Origin.RELEASE:
        return RELEASE_PRIORITY
    return KIND_PRIORITY.get(node.kind, DEFAULT_PRIORITY)


def identity_key(node: GraphNode) -> tuple[str, ...]:
    """Key under which two nodes count as the same logical workload.

    Workloads and releases share the (label, namespace) shape so a release
    collides with a raw workload of the same name.
    """
    if node.origin == Origin.RELEASE or node.is_workload:
        return ("workload", node.label, node.namespace)
    return ("other", node.kind, node.label, node.namespace)


def deduplicate(nodes: list[GraphNode]) -> list[GraphNode]:
    """Resolve collisions by priority and make identifiers globally unique.

    A winning node takes over the slot of the node it replaces, so output
    order follows first appearance of each key. Ties keep the earlier node.

    Args:
        nodes: Raw nodes in scan order

    Returns:
        New list of nodes whose ids carry their final index as a suffix
    """
    slots: dict[tuple[str, ...], int] = {}
    resolved: list[GraphNode] = []

    for node in nodes:
        key = identity_key(node)
        index = slots.get(key)
        if index is None:
            slots[key] = len(resolved)
            resolved.append(node)
        elif node_priority(node) < node_priority(resolved[index]):
            resolved[index] = node

    return [replace(node, id=f"{node.id}-{i}") for i, node in enumerate(resolved)]
