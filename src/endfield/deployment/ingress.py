"""Ingress routes owned by fields.

Routes are stamped with the managed-by label plus field and route id
annotations, which is what discovery keys on when reading them back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger

from endfield.manifests.generator import (
    FIELD_ID_ANNOTATION,
    MANAGED_BY,
    MANAGED_BY_LABEL,
    ROUTE_ID_ANNOTATION,
    ingress_manifest,
)

from .constants import DeploymentConstants

if TYPE_CHECKING:
    from endfield.manifests.specs import IngressRoute

    from .shell_commands import ShellCommands

DEFAULT_INGRESS_CLASS = "nginx"


@dataclass(frozen=True)
class IngressRouteOutcome:
    route_id: str
    ingress_name: str
    namespace: str
    success: bool
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class DiscoveredRoute:
    """A managed ingress read back from the cluster."""

    route_id: str
    field_id: str
    ingress_name: str
    ingress_namespace: str
    host: str | None
    path: str
    path_type: str
    target_service: str
    target_port_number: int | None
    target_port_name: str | None
    ingress_class_name: str
    tls_secret: str | None
    address: str | None


@dataclass(frozen=True)
class IngressControllerStatus:
    ingress_class_name: str
    controller_service_name: str
    endpoint: str | None
    ready: bool


def _first(items: list[Any] | None) -> dict[str, Any]:
    return items[0] if items else {}


def parse_discovered_route(item: dict[str, Any]) -> DiscoveredRoute | None:
    """Build a DiscoveredRoute from one ingress object.

    Returns:
        None when the ingress lacks the field or route id annotation
    """
    metadata = item.get("metadata", {})
    annotations = metadata.get("annotations") or {}
    field_id = annotations.get(FIELD_ID_ANNOTATION, "")
    route_id = annotations.get(ROUTE_ID_ANNOTATION, "")
    if not field_id or not route_id:
        return None

    spec = item.get("spec", {})
    rule = _first(spec.get("rules"))
    path_entry = _first(rule.get("http", {}).get("paths"))
    service = path_entry.get("backend", {}).get("service", {})
    port = service.get("port", {})
    tls = _first(spec.get("tls"))
    lb = _first(item.get("status", {}).get("loadBalancer", {}).get("ingress"))
    namespace = metadata.get("namespace", "")

    return DiscoveredRoute(
        route_id=route_id,
        field_id=field_id,
        ingress_name=metadata.get("name", ""),
        ingress_namespace=namespace,
        host=rule.get("host") or None,
        path=path_entry.get("path") or "/",
        path_type=path_entry.get("pathType") or "Prefix",
        target_service=service.get("name", ""),
        target_port_number=port.get("number"),
        target_port_name=port.get("name") or None,
        ingress_class_name=spec.get("ingressClassName") or DEFAULT_INGRESS_CLASS,
        tls_secret=tls.get("secretName") or None,
        address=lb.get("ip") or None,
    )


class IngressManager:
    """Generates, applies, deletes and discovers field ingress routes."""

    def __init__(
        self,
        commands: ShellCommands,
        field_manager: str | None = None,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.commands = commands
        self.constants = constants or DeploymentConstants()
        self.field_manager = field_manager or self.constants.FIELD_MANAGER

    def generate(self, route: IngressRoute) -> str:
        return ingress_manifest(route)

    def apply(self, route: IngressRoute) -> IngressRouteOutcome:
        """Apply a route; the ingress namespace is ensured best-effort first."""
        kubectl = self.commands.kubectl
        if not kubectl.get_namespace(route.ingress_namespace).success:
            kubectl.create_namespace(route.ingress_namespace)

        result = kubectl.apply_server_side(self.generate(route), self.field_manager)
        if not result.success:
            logger.warning(f"Applying ingress {route.ingress_name} failed")
        return IngressRouteOutcome(
            route_id=route.route_id,
            ingress_name=route.ingress_name,
            namespace=route.ingress_namespace,
            success=result.success,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def delete(self, ingress_name: str, namespace: str) -> IngressRouteOutcome:
        result = self.commands.kubectl.delete_ingress(ingress_name, namespace)
        return IngressRouteOutcome(
            route_id="",
            ingress_name=ingress_name,
            namespace=namespace,
            success=result.success,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def discover(self) -> list[DiscoveredRoute]:
        """Managed routes across all namespaces; empty when the query fails."""
        result = self.commands.kubectl.get_json(
            "ingress", selector=f"{MANAGED_BY_LABEL}={MANAGED_BY}"
        )
        if not result.success:
            logger.debug(f"Ingress discovery failed: {result.stderr.strip()}")
            return []
        try:
            items = json.loads(result.stdout).get("items", [])
        except json.JSONDecodeError as exc:
            logger.warning(f"Unreadable ingress list: {exc}")
            return []

        routes = [parse_discovered_route(item) for item in items]
        return [route for route in routes if route is not None]

    def detect_controller(
        self, namespace: str, release_name: str
    ) -> IngressControllerStatus:
        """Locate an ingress controller installed as ``release_name``.

        The endpoint is the controller service's load-balancer IP, else its
        hostname.
        """
        kubectl = self.commands.kubectl
        selector = f"app.kubernetes.io/instance={release_name}"

        found_class = kubectl.jsonpath(
            "ingressclass", "{.items[0].metadata.name}", selector=selector
        )
        ingress_class = (
            found_class.stdout.strip() if found_class.success else ""
        ) or DEFAULT_INGRESS_CLASS

        found_svc = kubectl.jsonpath(
            "service",
            "{.items[0].metadata.name}",
            namespace=namespace,
            selector=selector,
        )
        service_name = found_svc.stdout.strip() if found_svc.success else ""

        endpoint = None
        if service_name:
            for field_name in ("ip", "hostname"):
                lookup = kubectl.jsonpath(
                    f"service/{service_name}",
                    f"{{.status.loadBalancer.ingress[0].{field_name}}}",
                    namespace=namespace,
                )
                if lookup.success and lookup.stdout.strip():
                    endpoint = lookup.stdout.strip()
                    break

        return IngressControllerStatus(
            ingress_class_name=ingress_class,
            controller_service_name=service_name,
            endpoint=endpoint,
            ready=bool(service_name),
        )
