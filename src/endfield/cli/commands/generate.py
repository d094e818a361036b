"""Generation commands: write field and infra units, print ingress routes."""

from typing import Annotated

import click
import typer

from endfield.manifests import (
    ChartSource,
    FieldSpec,
    GenerateOutcome,
    InfraSpec,
    IngressRoute,
    generate_field,
    generate_infra,
)

from ..console import console, with_error_handling
from ..context import get_cli_context
from .shared import parse_env, print_warnings

generate_app = typer.Typer(
    name="generate",
    help="Generate unit directories and manifests.",
    no_args_is_help=True,
)


def _report(outcome: GenerateOutcome) -> None:
    print_warnings(outcome.warnings)
    if not outcome.success:
        console.handle_error("Generation failed", outcome.error)
    for path in outcome.generated_files:
        console.print(f"  [green]+[/green] {path}")
    console.ok(
        f"Generated {len(outcome.generated_files)} files "
        f"(namespace [bold]{outcome.namespace}[/bold])"
    )


@generate_app.command()
@with_error_handling
def field(
    field_id: Annotated[str, typer.Argument(help="Field id and resource name")],
    image: Annotated[str, typer.Option("--image", "-i", help="Container image")],
    replicas: Annotated[int, typer.Option("--replicas", "-r", min=0)] = 1,
    port: Annotated[int, typer.Option("--port", "-p", help="Container port")] = 8080,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="Environment entry KEY=VALUE (repeatable)"),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option(
            "--namespace",
            "-n",
            help="Namespace (default: <project>-<id>)",
        ),
    ] = None,
    label: Annotated[str, typer.Option("--label", help="Display name")] = "",
) -> None:
    """Write apps/<id>/ with namespace, workload, service and secret files.

    Images of known stateful software become a StatefulSet; sensitive
    env entries (PASSWORD, SECRET, KEY, TOKEN, PASS) move into a Secret.

    Examples:
        endfield generate field api --image myorg/api:1.2 -e LOG_LEVEL=debug
        endfield generate field db --image postgres:16 -e DB_PASSWORD=changeme
    """
    ctx = get_cli_context()
    spec = FieldSpec(
        id=field_id,
        label=label,
        namespace=namespace or "",
        image=image,
        replicas=replicas,
        port=port,
        env=parse_env(env),
        project_path=str(ctx.project_root),
    )
    _report(generate_field(spec))


@generate_app.command()
@with_error_handling
def infra(
    infra_id: Annotated[str, typer.Argument(help="Unit id and release name")],
    source: Annotated[
        str,
        typer.Option(
            "--source",
            "-s",
            click_type=click.Choice(["chart", "raw-file"]),
            help="chart or raw-file",
        ),
    ] = "chart",
    chart: Annotated[str | None, typer.Option("--chart", help="Chart name")] = None,
    chart_version: Annotated[
        str | None, typer.Option("--chart-version", help="Chart version")
    ] = None,
    repo_name: Annotated[
        str | None, typer.Option("--repo-name", help="Chart repository name")
    ] = None,
    repo_url: Annotated[
        str | None, typer.Option("--repo-url", help="Chart repository URL")
    ] = None,
    values_path: Annotated[
        str | None,
        typer.Option("--values", help="Existing values file, relative to project"),
    ] = None,
    raw_path: Annotated[
        str | None,
        typer.Option("--raw-path", help="Raw manifest, relative to project"),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Namespace (default: infra-<id>)"),
    ] = None,
) -> None:
    """Write infra/<id>/ for a chart release or a raw manifest.

    Examples:
        endfield generate infra cache --chart redis --chart-version 19.0.0 \\
            --repo-name bitnami --repo-url https://charts.bitnami.com/bitnami
        endfield generate infra legacy --source raw-file --raw-path old/db.yaml
    """
    ctx = get_cli_context()
    chart_source = None
    if chart and chart_version and repo_name and repo_url:
        chart_source = ChartSource(
            repo_name=repo_name,
            repo_url=repo_url,
            chart_name=chart,
            chart_version=chart_version,
            values_path=values_path,
        )
    elif source == "chart" and any((chart, chart_version, repo_name, repo_url)):
        console.warn(
            "--chart, --chart-version, --repo-name and --repo-url go together"
        )

    spec = InfraSpec(
        id=infra_id,
        source=source,
        namespace=namespace,
        chart=chart_source,
        raw_path=raw_path,
        project_path=str(ctx.project_root),
    )
    _report(generate_infra(spec))


@generate_app.command()
@with_error_handling
def ingress(
    field_id: Annotated[str, typer.Argument(help="Field owning the route")],
    service: Annotated[str, typer.Option("--service", help="Backend service")],
    namespace: Annotated[
        str, typer.Option("--namespace", "-n", help="Namespace of the backend")
    ],
    port: Annotated[
        int | None, typer.Option("--port", help="Backend port number")
    ] = None,
    port_name: Annotated[
        str | None, typer.Option("--port-name", help="Backend port name")
    ] = None,
    host: Annotated[str | None, typer.Option("--host")] = None,
    path: Annotated[str, typer.Option("--path")] = "/",
    tls_secret: Annotated[str | None, typer.Option("--tls-secret")] = None,
    ingress_class: Annotated[str, typer.Option("--class")] = "nginx",
    route_id: Annotated[
        str | None, typer.Option("--route-id", help="Default: <field>-route")
    ] = None,
    apply: Annotated[
        bool, typer.Option("--apply", help="Apply instead of printing")
    ] = False,
) -> None:
    """Print (or apply) an ingress routing a host/path to a field's service."""
    ctx = get_cli_context()
    route_key = route_id or f"{field_id}-route"
    route = IngressRoute(
        route_id=route_key,
        field_id=field_id,
        target_namespace=namespace,
        target_service=service,
        target_port_number=port,
        target_port_name=port_name,
        host=host,
        path=path,
        tls_secret=tls_secret,
        tls_hosts=[host] if host and tls_secret else [],
        ingress_class_name=ingress_class,
        ingress_name=route_key,
        ingress_namespace=namespace,
    )
    manager = ctx.ingress()

    if not apply:
        typer.echo(manager.generate(route), nl=False)
        return

    outcome = manager.apply(route)
    if not outcome.success:
        console.handle_error(f"Applying ingress {route_key} failed", outcome.stderr)
    console.ok(f"Ingress {route_key} applied in {namespace}")
