"""Tests for document classification and category inference."""

from pathlib import Path

import pytest

from endfield.manifests.classifier import (
    chart_to_category,
    classify_document,
    image_repository,
    image_to_category,
    sanitize_name,
)
from endfield.manifests.models import Category, Origin


class TestImageCategory:
    @pytest.mark.parametrize(
        ("image", "expected"),
        [
            ("nginx:1.27", Category.GATEWAY),
            ("MYORG/Some-Redis:7", Category.CACHE),
            ("postgres:16", Category.DATABASE),
            ("bitnami/kafka:3.7", Category.QUEUE),
            ("grafana/grafana", Category.MONITORING),
            ("quay.io/jetstack/cert-manager-controller:v1.14", Category.INFRA),
            ("ghcr.io/acme/widget:2.0", Category.SERVICE),
        ],
    )
    def test_keyword_match_on_repository(self, image: str, expected: Category) -> None:
        assert image_to_category(image) == expected

    def test_registry_path_is_not_matched(self) -> None:
        # "redis" only appears in the registry host, not in the repository
        assert image_to_category("redis.example.com/team/api:1") == Category.SERVICE

    def test_repository_segment(self) -> None:
        assert image_repository("ghcr.io/Acme/Widget:1.0") == "widget"
        assert image_repository("localhost:5000/app") == "app"
        assert image_repository("api@sha256:abc") == "api"

    def test_chart_ingress_is_gateway(self) -> None:
        assert chart_to_category("ingress-nginx") == Category.GATEWAY
        assert chart_to_category("Loki-Stack") == Category.MONITORING
        assert chart_to_category("my-app") == Category.SERVICE


class TestClassifyDocument:
    def test_deployment_becomes_node(self) -> None:
        doc = (
            "kind: Deployment\n"
            "metadata:\n"
            "  name: web.v2\n"
            "spec:\n"
            "  replicas: 2\n"
            "  template:\n"
            "    spec:\n"
            "      containers:\n"
            "        - image: nginx:1.27\n"
        )

        node = classify_document(doc, Path("/p/apps/web.yaml"), 1)

        assert node is not None
        assert node.id == "web-v2-web-1"
        assert node.label == "web.v2"
        assert node.namespace == "default"
        assert node.category == Category.GATEWAY
        assert node.replicas == 2
        assert node.origin == Origin.RAW
        assert node.file_path == "/p/apps/web.yaml"

    def test_non_workload_kind_is_ignored(self) -> None:
        doc = "kind: Service\nmetadata:\n  name: web\n"
        assert classify_document(doc, Path("svc.yaml"), 0) is None

    def test_missing_kind_is_ignored(self) -> None:
        assert classify_document("metadata:\n  name: x\n", Path("x.yaml"), 0) is None

    def test_defaults_without_name_or_image(self) -> None:
        node = classify_document("kind: Job\n", Path("job.yaml"), 0)

        assert node is not None
        assert node.label == "unknown"
        assert node.image == ""
        assert node.category == Category.SERVICE
        assert node.replicas is None

    def test_sanitize_name(self) -> None:
        assert sanitize_name("a/b.c") == "a-b-c"
