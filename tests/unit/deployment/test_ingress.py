"""Tests for field ingress routes."""

import json

import pytest

from endfield.deployment.ingress import IngressManager, parse_discovered_route
from endfield.deployment.shell_commands import ShellCommands
from endfield.manifests.specs import IngressRoute

INGRESS_ITEM = {
    "metadata": {
        "name": "api-route",
        "namespace": "shop-api",
        "annotations": {
            "endfield.io/fieldId": "api",
            "endfield.io/routeId": "api-route",
        },
    },
    "spec": {
        "ingressClassName": "traefik",
        "tls": [{"hosts": ["api.example.com"], "secretName": "api-tls"}],
        "rules": [
            {
                "host": "api.example.com",
                "http": {
                    "paths": [
                        {
                            "path": "/v1",
                            "pathType": "Exact",
                            "backend": {
                                "service": {"name": "api", "port": {"number": 8080}}
                            },
                        }
                    ]
                },
            }
        ],
    },
    "status": {"loadBalancer": {"ingress": [{"ip": "10.0.0.5"}]}},
}


@pytest.fixture
def manager(commands: ShellCommands) -> IngressManager:
    return IngressManager(commands)


def _route() -> IngressRoute:
    return IngressRoute(
        route_id="api-route",
        field_id="api",
        target_namespace="shop-api",
        target_service="api",
        target_port_number=8080,
        ingress_name="api-route",
        ingress_namespace="edge",
    )


class TestParseDiscoveredRoute:
    def test_full_item(self) -> None:
        route = parse_discovered_route(INGRESS_ITEM)

        assert route is not None
        assert route.field_id == "api"
        assert route.host == "api.example.com"
        assert route.path == "/v1"
        assert route.path_type == "Exact"
        assert route.target_port_number == 8080
        assert route.target_port_name is None
        assert route.ingress_class_name == "traefik"
        assert route.tls_secret == "api-tls"
        assert route.address == "10.0.0.5"

    def test_missing_annotations(self) -> None:
        assert parse_discovered_route({"metadata": {"name": "x"}}) is None

    def test_sparse_item_uses_defaults(self) -> None:
        item = {"metadata": INGRESS_ITEM["metadata"], "spec": {}}

        route = parse_discovered_route(item)

        assert route.path == "/"
        assert route.path_type == "Prefix"
        assert route.host is None
        assert route.ingress_class_name == "nginx"
        assert route.address is None


class TestIngressManager:
    def test_apply_ensures_namespace(
        self, manager: IngressManager, fake_runner
    ) -> None:
        fake_runner.respond("kubectl", "get", "namespace", success=False)

        outcome = manager.apply(_route())

        assert outcome.success
        assert outcome.namespace == "edge"
        assert fake_runner.heads() == [
            ("kubectl", "get", "namespace"),
            ("kubectl", "create", "namespace"),
            ("kubectl", "apply", "--server-side"),
        ]
        assert "endfield.io/routeId: api-route" in fake_runner.inputs[-1]

    def test_delete(self, manager: IngressManager, fake_runner) -> None:
        outcome = manager.delete("api-route", "edge")

        assert outcome.success
        assert fake_runner.calls[0][:4] == ["kubectl", "delete", "ingress", "api-route"]

    def test_discover(self, manager: IngressManager, fake_runner) -> None:
        payload = {"items": [INGRESS_ITEM, {"metadata": {"name": "foreign"}}]}
        fake_runner.respond("kubectl", "get", "ingress", stdout=json.dumps(payload))

        routes = manager.discover()

        assert [route.route_id for route in routes] == ["api-route"]
        assert "app.kubernetes.io/managed-by=endfield" in fake_runner.calls[0]

    def test_discover_failures_are_empty(
        self, manager: IngressManager, fake_runner
    ) -> None:
        fake_runner.respond("kubectl", "get", "ingress", success=False)
        assert manager.discover() == []

        fake_runner.respond("kubectl", "get", "ingress", stdout="not json")
        assert manager.discover() == []

    def test_detect_controller(self, manager: IngressManager, fake_runner) -> None:
        fake_runner.respond("kubectl", "get", "service", stdout="edge-controller")
        fake_runner.respond(
            "kubectl",
            "get",
            "service/edge-controller",
            contains=".hostname",
            stdout="lb.example.com",
        )

        status = manager.detect_controller("edge", "edge")

        assert status.ready
        assert status.controller_service_name == "edge-controller"
        assert status.ingress_class_name == "nginx"
        assert status.endpoint == "lb.example.com"

    def test_detect_controller_absent(
        self, manager: IngressManager, fake_runner
    ) -> None:
        status = manager.detect_controller("edge", "edge")

        assert not status.ready
        assert status.endpoint is None
