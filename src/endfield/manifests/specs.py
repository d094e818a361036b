"""Pydantic models for user-authored generation and deploy intent.

These models validate shape only. Cross-field requirements (a chart source
needs a chart descriptor, a raw-file source needs a path) are checked when
the unit is generated and reported through ``GenerateOutcome.error``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_CPU_REQUEST = "100m"
DEFAULT_MEM_REQUEST = "128Mi"
DEFAULT_CPU_LIMIT = "500m"
DEFAULT_MEM_LIMIT = "512Mi"

# =============================================================================
# Field (workload) Units
# =============================================================================


class EnvEntry(BaseModel):
    """A single environment variable."""

    key: str
    value: str = ""


class FieldSpec(BaseModel):
    """Intent for a new workload unit under ``apps/<id>/``."""

    id: str = Field(description="Unit id, also used as the resource name")
    label: str = Field(default="", description="Human-readable display name")
    namespace: str = Field(
        default="",
        description="Target namespace; empty derives <project-name>-<id>",
    )
    image: str = Field(description="Container image, e.g. 'myorg/api:latest'")
    replicas: int = Field(default=1, ge=0)
    port: int = Field(default=8080, ge=1, le=65535)
    env: list[EnvEntry] = Field(default_factory=list)
    project_path: str = Field(description="Absolute path to the project root")


# =============================================================================
# Infra Units
# =============================================================================


class ChartSource(BaseModel):
    """Published chart an infra unit depends on."""

    repo_name: str
    repo_url: str
    chart_name: str
    chart_version: str
    values_path: str | None = Field(
        default=None,
        description="Values override file relative to the project root",
    )


class InfraSpec(BaseModel):
    """Intent for a new infra unit under ``infra/<id>/``."""

    id: str = Field(description="Unit id, also the release name")
    label: str = ""
    source: Literal["chart", "raw-file"]
    namespace: str | None = None
    chart: ChartSource | None = None
    raw_path: str | None = Field(
        default=None,
        description="Raw manifest path relative to the project root",
    )
    project_path: str


# =============================================================================
# Image Deploy Requests
# =============================================================================


class ContainerPort(BaseModel):
    container_port: int = Field(ge=1, le=65535)
    name: str | None = None


class ResourceOverrides(BaseModel):
    """Per-value overrides; anything left unset falls back to the defaults."""

    cpu_request: str | None = None
    mem_request: str | None = None
    cpu_limit: str | None = None
    mem_limit: str | None = None


class ImageDeployRequest(BaseModel):
    """Direct deployment of a container image without writing a unit to disk."""

    namespace: str
    name: str
    image: str
    replicas: int = Field(default=1, ge=0)
    env: list[EnvEntry] = Field(default_factory=list)
    secret_env: list[EnvEntry] = Field(default_factory=list)
    ports: list[ContainerPort] = Field(default_factory=list)
    service_type: str = "ClusterIP"
    resources: ResourceOverrides | None = None
    image_pull_secret: str | None = None
    create_namespace: bool = False


# =============================================================================
# Ingress Routes
# =============================================================================


class IngressRoute(BaseModel):
    """One externally exposed route owned by a field."""

    route_id: str
    field_id: str
    target_namespace: str
    target_service: str
    target_port_number: int | None = None
    target_port_name: str | None = None
    host: str | None = None
    path: str = "/"
    path_type: str = "Prefix"
    tls_secret: str | None = None
    tls_hosts: list[str] = Field(default_factory=list)
    annotations: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Extra annotations, written after the ownership ones in order",
    )
    ingress_class_name: str = "nginx"
    ingress_name: str
    ingress_namespace: str
