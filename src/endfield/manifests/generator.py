"""Canonical resource text for generated units.

Manifests are assembled line by line so that output is byte-for-byte
predictable and diffs cleanly between generations. Every resource carries
the ``app.kubernetes.io/managed-by: endfield`` label.
"""

from __future__ import annotations

from pathlib import Path

from .classifier import image_repository
from .specs import (
    DEFAULT_CPU_LIMIT,
    DEFAULT_CPU_REQUEST,
    DEFAULT_MEM_LIMIT,
    DEFAULT_MEM_REQUEST,
    ChartSource,
    ContainerPort,
    EnvEntry,
    FieldSpec,
    ImageDeployRequest,
    InfraSpec,
    IngressRoute,
    ResourceOverrides,
)

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY = "endfield"
IMAGE_DEPLOY_TYPE_LABEL = "endfield/type"
FIELD_ID_ANNOTATION = "endfield.io/fieldId"
ROUTE_ID_ANNOTATION = "endfield.io/routeId"

SENSITIVE_MARKERS = ("PASSWORD", "SECRET", "KEY", "TOKEN", "PASS")

STATEFUL_IMAGE_KEYWORDS = (
    "postgres",
    "mysql",
    "mongo",
    "mariadb",
    "redis",
    "kafka",
    "redpanda",
    "cassandra",
    "clickhouse",
    "rabbitmq",
    "nats",
    "elasticsearch",
)

VOLUME_CLAIM_NAME = "data"
VOLUME_SIZE = "10Gi"

CHART_VERSION = "0.1.0"


# =============================================================================
# Helpers
# =============================================================================


def quote(value: str) -> str:
    """Render a YAML double-quoted scalar."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def is_sensitive(key: str) -> bool:
    upper = key.upper()
    return any(marker in upper for marker in SENSITIVE_MARKERS)


def is_stateful_image(image: str) -> bool:
    """Whether an image should run as a StatefulSet with persistent storage."""
    repository = image_repository(image)
    return any(keyword in repository for keyword in STATEFUL_IMAGE_KEYWORDS)


def derive_namespace(project_path: str, unit_id: str) -> str:
    return f"{Path(project_path).name}-{unit_id}"


def resolve_namespace(spec: FieldSpec) -> str:
    return spec.namespace or derive_namespace(spec.project_path, spec.id)


def secret_name(unit_id: str) -> str:
    return f"{unit_id}-secret"


def _render(lines: list[str]) -> str:
    return "\n".join(lines) + "\n"


def _field_metadata(name: str, namespace: str, app: str | None = None) -> list[str]:
    return [
        "metadata:",
        f"  name: {name}",
        f"  namespace: {namespace}",
        "  labels:",
        f"    app: {app or name}",
        f"    {MANAGED_BY_LABEL}: {MANAGED_BY}",
    ]


def _resources(overrides: ResourceOverrides | None, indent: str) -> list[str]:
    overrides = overrides or ResourceOverrides()
    return [
        f"{indent}resources:",
        f"{indent}  requests:",
        f"{indent}    cpu: {quote(overrides.cpu_request or DEFAULT_CPU_REQUEST)}",
        f"{indent}    memory: {quote(overrides.mem_request or DEFAULT_MEM_REQUEST)}",
        f"{indent}  limits:",
        f"{indent}    cpu: {quote(overrides.cpu_limit or DEFAULT_CPU_LIMIT)}",
        f"{indent}    memory: {quote(overrides.mem_limit or DEFAULT_MEM_LIMIT)}",
    ]


def _plain_env(entry: EnvEntry, indent: str) -> list[str]:
    return [f"{indent}- name: {entry.key}", f"{indent}  value: {quote(entry.value)}"]


def _secret_env(entry: EnvEntry, secret: str, indent: str) -> list[str]:
    return [
        f"{indent}- name: {entry.key}",
        f"{indent}  valueFrom:",
        f"{indent}    secretKeyRef:",
        f"{indent}      name: {secret}",
        f"{indent}      key: {entry.key}",
    ]


def _field_env(spec: FieldSpec) -> list[str]:
    if not spec.env:
        return []
    lines = ["          env:"]
    for entry in spec.env:
        if is_sensitive(entry.key):
            lines.extend(_secret_env(entry, secret_name(spec.id), "            "))
        else:
            lines.extend(_plain_env(entry, "            "))
    return lines


def _field_container(spec: FieldSpec) -> list[str]:
    return [
        "      containers:",
        f"        - name: {spec.id}",
        f"          image: {spec.image}",
        "          ports:",
        f"            - containerPort: {spec.port}",
        *_field_env(spec),
        *_resources(None, "          "),
    ]


# =============================================================================
# Field Unit Manifests
# =============================================================================


def namespace_manifest(namespace: str, labels: dict[str, str] | None = None) -> str:
    lines = [
        "apiVersion: v1",
        "kind: Namespace",
        "metadata:",
        f"  name: {namespace}",
        "  labels:",
        f"    {MANAGED_BY_LABEL}: {MANAGED_BY}",
    ]
    for key, value in (labels or {}).items():
        lines.append(f"    {key}: {value}")
    return _render(lines)


def deployment_manifest(spec: FieldSpec, namespace: str) -> str:
    """Deployment for a stateless field.

    Sensitive environment entries are referenced from the unit's secret.
    """
    return _render(
        [
            "apiVersion: apps/v1",
            "kind: Deployment",
            *_field_metadata(spec.id, namespace),
            "spec:",
            f"  replicas: {spec.replicas}",
            "  selector:",
            "    matchLabels:",
            f"      app: {spec.id}",
            "  template:",
            "    metadata:",
            "      labels:",
            f"        app: {spec.id}",
            "    spec:",
            *_field_container(spec),
        ]
    )


def statefulset_manifest(spec: FieldSpec, namespace: str) -> str:
    """StatefulSet with one single-writer volume claim mounted at /var/lib/<id>."""
    return _render(
        [
            "apiVersion: apps/v1",
            "kind: StatefulSet",
            *_field_metadata(spec.id, namespace),
            "spec:",
            f"  serviceName: {spec.id}",
            f"  replicas: {spec.replicas}",
            "  selector:",
            "    matchLabels:",
            f"      app: {spec.id}",
            "  template:",
            "    metadata:",
            "      labels:",
            f"        app: {spec.id}",
            "    spec:",
            *_field_container(spec),
            "          volumeMounts:",
            f"            - name: {VOLUME_CLAIM_NAME}",
            f"              mountPath: /var/lib/{spec.id}",
            "  volumeClaimTemplates:",
            "    - metadata:",
            f"        name: {VOLUME_CLAIM_NAME}",
            "      spec:",
            '        accessModes: ["ReadWriteOnce"]',
            "        resources:",
            "          requests:",
            f"            storage: {VOLUME_SIZE}",
        ]
    )


def service_manifest(spec: FieldSpec, namespace: str) -> str:
    return _render(
        [
            "apiVersion: v1",
            "kind: Service",
            *_field_metadata(spec.id, namespace),
            "spec:",
            "  selector:",
            f"    app: {spec.id}",
            "  ports:",
            "    - protocol: TCP",
            f"      port: {spec.port}",
            f"      targetPort: {spec.port}",
            "  type: ClusterIP",
        ]
    )


def configmap_manifest(spec: FieldSpec, namespace: str) -> str:
    lines = [
        "apiVersion: v1",
        "kind: ConfigMap",
        *_field_metadata(f"{spec.id}-config", namespace, app=spec.id),
        "data:",
        "  # Add your configuration here",
        f"  APP_PORT: {quote(str(spec.port))}",
    ]
    return _render(lines)


def secret_manifest(spec: FieldSpec, namespace: str) -> str | None:
    """Secret holding only the sensitive entries, or None when there are none."""
    sensitive = [entry for entry in spec.env if is_sensitive(entry.key)]
    if not sensitive:
        return None
    lines = [
        "apiVersion: v1",
        "kind: Secret",
        *_field_metadata(secret_name(spec.id), namespace, app=spec.id),
        "type: Opaque",
        "stringData:",
    ]
    lines.extend(f"  {entry.key}: {quote(entry.value)}" for entry in sensitive)
    return _render(lines)


def field_bundle(spec: FieldSpec, namespace: str) -> list[tuple[str, str]]:
    """Ordered (filename, content) pairs for a field unit, namespace excluded.

    A StatefulSet never comes with a config map; a Deployment always does.
    """
    bundle: list[tuple[str, str]] = []
    secret = secret_manifest(spec, namespace)
    if secret is not None:
        bundle.append((f"{secret_name(spec.id)}.yaml", secret))

    if is_stateful_image(spec.image):
        bundle.append(("statefulset.yaml", statefulset_manifest(spec, namespace)))
        bundle.append(("service.yaml", service_manifest(spec, namespace)))
    else:
        bundle.append(("deployment.yaml", deployment_manifest(spec, namespace)))
        bundle.append(("service.yaml", service_manifest(spec, namespace)))
        bundle.append(("configmap.yaml", configmap_manifest(spec, namespace)))
    return bundle


# =============================================================================
# Chart Units
# =============================================================================


def chart_descriptor(spec: InfraSpec, chart: ChartSource) -> str:
    """Chart.yaml wrapping exactly one published chart dependency."""
    return _render(
        [
            "apiVersion: v2",
            f"name: {spec.id}",
            f"description: Endfield managed Helm release for {spec.label or spec.id}",
            "type: application",
            f"version: {CHART_VERSION}",
            "dependencies:",
            f"  - name: {chart.chart_name}",
            f"    version: {quote(chart.chart_version)}",
            f"    repository: {quote(chart.repo_url)}",
        ]
    )


_VALUES_PRESETS: tuple[tuple[tuple[str, ...], list[str]], ...] = (
    (
        ("redis",),
        [
            "redis:",
            "  architecture: standalone",
            "  auth:",
            "    enabled: false",
            "  master:",
            "    persistence:",
            "      enabled: false",
            "  replica:",
            "    replicaCount: 0",
            "    persistence:",
            "      enabled: false",
        ],
    ),
    (
        ("kafka",),
        [
            "kafka:",
            "  replicaCount: 1",
            "  persistence:",
            "    enabled: false",
            "  kraft:",
            "    enabled: true",
            "  zookeeper:",
            "    persistence:",
            "      enabled: false",
        ],
    ),
    (
        ("postgres",),
        [
            "postgresql:",
            "  primary:",
            "    persistence:",
            "      enabled: false",
            "  auth:",
            '    postgresPassword: "changeme"',
            '    database: "app"',
        ],
    ),
)


def chart_values(spec: InfraSpec, chart: ChartSource) -> str:
    """Values override: a preset for well-known charts, else a commented skeleton."""
    name = chart.chart_name.lower()
    for keywords, preset in _VALUES_PRESETS:
        if any(keyword in name for keyword in keywords):
            return _render(preset)
    return _render(
        [
            f"# Values for {chart.chart_name} - {spec.label or spec.id}",
            "# Generated by Endfield. Edit as needed.",
            f"{chart.chart_name}:",
            "  # replicaCount: 1",
            "  # persistence:",
            "  #   enabled: false",
            "  #   size: 8Gi",
        ]
    )


# =============================================================================
# Image Deploy Manifests
# =============================================================================


def image_secret_name(name: str) -> str:
    return f"{name}-secrets"


def _image_labels(name: str, namespace: str, indent: str) -> list[str]:
    return [
        f"{indent}app.kubernetes.io/name: {name}",
        f"{indent}{MANAGED_BY_LABEL}: {MANAGED_BY}",
        f"{indent}{IMAGE_DEPLOY_TYPE_LABEL}: image-deploy",
        f"{indent}endfield/namespace: {namespace}",
    ]


def image_namespace_manifest(namespace: str) -> str:
    return namespace_manifest(namespace, {IMAGE_DEPLOY_TYPE_LABEL: "image-deploy"})


def image_secret_manifest(request: ImageDeployRequest) -> str:
    lines = [
        "apiVersion: v1",
        "kind: Secret",
        "metadata:",
        f"  name: {image_secret_name(request.name)}",
        f"  namespace: {request.namespace}",
        "  labels:",
        *_image_labels(request.name, request.namespace, "    "),
        "type: Opaque",
        "stringData:",
    ]
    lines.extend(f"  {entry.key}: {quote(entry.value)}" for entry in request.secret_env)
    return _render(lines)


def _image_ports(ports: list[ContainerPort]) -> list[str]:
    if not ports:
        return []
    lines = ["          ports:"]
    for port in ports:
        lines.append(f"            - containerPort: {port.container_port}")
        if port.name:
            lines.append(f"              name: {port.name}")
    return lines


def _image_env(request: ImageDeployRequest) -> list[str]:
    if not request.env and not request.secret_env:
        return []
    lines = ["          env:"]
    for entry in request.env:
        lines.extend(_plain_env(entry, "            "))
    for entry in request.secret_env:
        lines.extend(
            _secret_env(entry, image_secret_name(request.name), "            ")
        )
    return lines


def image_deployment_manifest(request: ImageDeployRequest) -> str:
    name = request.name
    lines = [
        "apiVersion: apps/v1",
        "kind: Deployment",
        "metadata:",
        f"  name: {name}",
        f"  namespace: {request.namespace}",
        "  labels:",
        *_image_labels(name, request.namespace, "    "),
        "spec:",
        f"  replicas: {request.replicas}",
        "  selector:",
        "    matchLabels:",
        f"      app.kubernetes.io/name: {name}",
        "  template:",
        "    metadata:",
        "      labels:",
        f"        app.kubernetes.io/name: {name}",
        f"        {MANAGED_BY_LABEL}: {MANAGED_BY}",
        "    spec:",
    ]
    if request.image_pull_secret:
        lines.extend(
            [
                "      imagePullSecrets:",
                f"        - name: {request.image_pull_secret}",
            ]
        )
    lines.extend(
        [
            "      containers:",
            f"        - name: {name}",
            f"          image: {request.image}",
            *_image_ports(request.ports),
            *_image_env(request),
            *_resources(request.resources, "          "),
        ]
    )
    return _render(lines)


def image_service_manifest(request: ImageDeployRequest) -> str | None:
    """Service exposing every declared port, or None when there are no ports."""
    if not request.ports:
        return None
    lines = [
        "apiVersion: v1",
        "kind: Service",
        "metadata:",
        f"  name: {request.name}",
        f"  namespace: {request.namespace}",
        "  labels:",
        *_image_labels(request.name, request.namespace, "    "),
        "spec:",
        "  selector:",
        f"    app.kubernetes.io/name: {request.name}",
        f"  type: {request.service_type}",
        "  ports:",
    ]
    for port in request.ports:
        if port.name:
            lines.append(f"    - name: {port.name}")
            lines.append(f"      port: {port.container_port}")
        else:
            lines.append(f"    - port: {port.container_port}")
        lines.append(f"      targetPort: {port.container_port}")
        lines.append("      protocol: TCP")
    return _render(lines)


# =============================================================================
# Ingress
# =============================================================================


def _backend_port(route: IngressRoute) -> str:
    if route.target_port_number is not None:
        return f"number: {route.target_port_number}"
    if route.target_port_name:
        return f"name: {route.target_port_name}"
    return "number: 80"


def ingress_manifest(route: IngressRoute) -> str:
    """Ingress with a single rule, hostless when no host is given.

    TLS is emitted only with both a secret and at least one TLS host.
    """
    ownership = [
        f"    {MANAGED_BY_LABEL}: {MANAGED_BY}",
        f"    {FIELD_ID_ANNOTATION}: {route.field_id}",
        f"    {ROUTE_ID_ANNOTATION}: {route.route_id}",
    ]
    lines = [
        "apiVersion: networking.k8s.io/v1",
        "kind: Ingress",
        "metadata:",
        f"  name: {route.ingress_name}",
        f"  namespace: {route.ingress_namespace}",
        "  labels:",
        *ownership,
        "  annotations:",
        *ownership,
    ]
    lines.extend(f"    {key}: {value}" for key, value in route.annotations)
    lines.extend(["spec:", f"  ingressClassName: {route.ingress_class_name}"])

    if route.tls_secret and route.tls_hosts:
        lines.extend(["  tls:", "    - hosts:"])
        lines.extend(f"        - {host}" for host in route.tls_hosts)
        lines.append(f"      secretName: {route.tls_secret}")

    lines.append("  rules:")
    if route.host:
        lines.extend([f"    - host: {route.host}", "      http:"])
    else:
        lines.append("    - http:")
    lines.extend(
        [
            "        paths:",
            f"          - path: {route.path}",
            f"            pathType: {route.path_type}",
            "            backend:",
            "              service:",
            f"                name: {route.target_service}",
            "                port:",
            f"                  {_backend_port(route)}",
        ]
    )
    return _render(lines)
