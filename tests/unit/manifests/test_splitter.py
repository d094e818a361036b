"""Tests for splitting rendered template output."""

from endfield.manifests.splitter import kind_rank, split_rendered

RENDERED = """\
---
# Source: cache/charts/redis/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: cache-redis
---
# Source: cache/templates/namespace.yaml
apiVersion: v1
kind: Namespace
metadata:
  name: infra-cache
---
# Source: empty.yaml
---
apiVersion: example.io/v1
kind: Widget
metadata:
  name: w.1
"""


def test_namespace_is_ordered_before_service() -> None:
    files = split_rendered(RENDERED)

    names = [name for name, _ in files]
    assert names == [
        "00-namespace-infra-cache.yaml",
        "01-service-cache-redis.yaml",
        "02-widget-w-1.yaml",
    ]


def test_content_is_trimmed_with_single_newline() -> None:
    files = dict(split_rendered(RENDERED))

    content = files["00-namespace-infra-cache.yaml"]
    assert content.startswith("# Source: cache/templates/namespace.yaml\n")
    assert content.endswith("name: infra-cache\n")
    assert not content.endswith("\n\n")


def test_leading_marker_is_dropped() -> None:
    files = dict(split_rendered(RENDERED))
    assert not files["01-service-cache-redis.yaml"].startswith("---")


def test_defaults_for_missing_kind_and_name() -> None:
    files = split_rendered("data:\n  a: b\n")
    assert files == [("00-unknown-resource.yaml", "data:\n  a: b\n")]


def test_empty_output() -> None:
    assert split_rendered("") == []
    assert split_rendered("---\n# only a comment\n") == []


def test_unranked_kinds_sort_last() -> None:
    assert kind_rank("Namespace") < kind_rank("Deployment") < kind_rank("Widget")
