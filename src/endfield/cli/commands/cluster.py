"""Cluster inspection commands: status, logs, events and namespaces."""

from typing import Annotated

import typer
from rich.table import Table

from endfield.cluster import StatusColor

from ..console import console, with_error_handling
from ..context import get_cli_context

cluster_app = typer.Typer(
    name="cluster",
    help="Inspect workloads on the current cluster.",
    no_args_is_help=True,
)

_STATUS_STYLE = {
    StatusColor.GRAY: "dim",
    StatusColor.RED: "red",
    StatusColor.YELLOW: "yellow",
    StatusColor.GREEN: "green",
}


@cluster_app.command()
@with_error_handling
def status(
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Only show this namespace"),
    ] = None,
) -> None:
    """Show deployments and statefulsets with ready/desired replicas."""
    ctx = get_cli_context()
    cluster_status = ctx.inspector().status()

    if not cluster_status.kubectl_available:
        console.handle_error("kubectl not found", "Install kubectl and retry.")
    if cluster_status.error:
        console.handle_error("Could not query the cluster", cluster_status.error)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Namespace")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Ready", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Pods")

    for workload in cluster_status.workloads:
        if namespace and workload.namespace != namespace:
            continue
        style = _STATUS_STYLE[workload.status]
        pods = ", ".join(
            f"{pod.name} ({pod.phase}, {pod.restarts} restarts)"
            for pod in workload.pods
        )
        table.add_row(
            workload.namespace,
            workload.label,
            workload.kind,
            f"[{style}]{workload.ready}/{workload.desired}[/{style}]",
            str(workload.available),
            pods,
        )
    console.print(table)


@cluster_app.command()
@with_error_handling
def logs(
    field_id: Annotated[str, typer.Argument(help="Field id (app label)")],
    namespace: Annotated[str, typer.Option("--namespace", "-n")],
    tail: Annotated[int | None, typer.Option("--tail", min=1)] = None,
    previous: Annotated[
        bool, typer.Option("--previous", help="Logs of the previous container")
    ] = False,
    pod: Annotated[
        str | None, typer.Option("--pod", help="Read this pod instead")
    ] = None,
) -> None:
    """Print recent logs of a field's pod."""
    inspector = get_cli_context().inspector()
    if pod:
        result = inspector.pod_logs(namespace, pod, tail)
    else:
        result = inspector.field_logs(
            field_id, namespace, tail=tail, previous=previous
        )
    if not result.success:
        console.handle_error(f"No logs for {field_id}", result.stderr.strip())
    typer.echo(result.stdout, nl=False)


@cluster_app.command()
@with_error_handling
def events(
    namespace: Annotated[
        str, typer.Option("--namespace", "-n", help="Namespace or 'all'")
    ] = "all",
) -> None:
    """Print cluster events sorted by last timestamp."""
    result = get_cli_context().inspector().events(namespace)
    if not result.success:
        console.handle_error("Could not list events", result.stderr.strip())
    typer.echo(result.stdout, nl=False)


@cluster_app.command()
@with_error_handling
def namespaces(
    services: Annotated[
        bool, typer.Option("--services", help="Also list services and ports")
    ] = False,
) -> None:
    """List namespaces, optionally with their services."""
    inspector = get_cli_context().inspector()
    for name in inspector.namespaces():
        console.print(f"[bold]{name}[/bold]")
        if not services:
            continue
        for service in inspector.services(name):
            ports = ", ".join(service.ports) or "-"
            console.print(f"  {service.name} [dim]{ports}[/dim]")
