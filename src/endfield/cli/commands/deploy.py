"""Deploy commands: install, diff, remove, render, scale and image deploys."""

from pathlib import Path
from typing import Annotated

import typer
from rich.syntax import Syntax

from endfield.deployment import DeployOutcome, ReleaseTarget, build_image_manifests
from endfield.manifests import ContainerPort, ImageDeployRequest, ResourceOverrides

from ..console import console, with_error_handling
from ..context import get_cli_context
from .shared import (
    default_namespace,
    parse_env,
    print_command_log,
    print_warnings,
    resolve_target,
    run_operation,
)

deploy_app = typer.Typer(
    name="deploy",
    help="Deploy, diff and remove units on the current cluster.",
    no_args_is_help=True,
)

UnitDir = Annotated[
    Path, typer.Argument(help="Unit directory, e.g. apps/api or infra/redis")
]
NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Target namespace (default: the unit's namespace.yaml)",
    ),
]
ValuesOption = Annotated[
    str | None,
    typer.Option("--values", help="Values file override for release units"),
]


def _unit_dir(unit: Path) -> Path:
    return unit if unit.is_absolute() else get_cli_context().project_root / unit


def _values_file(values: str | None) -> str | None:
    """Values override anchored to the project root when relative."""
    if values is None:
        return None
    path = Path(values).expanduser()
    if not path.is_absolute():
        path = get_cli_context().project_root / path
    return str(path)


def _report(outcome: DeployOutcome, action: str) -> None:
    print_warnings(outcome.warnings)
    print_command_log(outcome.commands)
    if outcome.stdout.strip():
        console.print(outcome.stdout.strip())
    if not outcome.success:
        console.handle_error(f"{action} {outcome.resource_id} failed", outcome.error)
    console.ok(
        f"{action} {outcome.resource_id} ({outcome.origin}) "
        f"in namespace [bold]{outcome.namespace}[/bold]"
    )


@deploy_app.command()
@with_error_handling
def up(
    unit: UnitDir,
    namespace: NamespaceOption = None,
    values: ValuesOption = None,
    repo_name: Annotated[
        str | None, typer.Option("--repo-name", help="Chart repository to add")
    ] = None,
    repo_url: Annotated[
        str | None, typer.Option("--repo-url", help="URL of --repo-name")
    ] = None,
) -> None:
    """Install or upgrade a unit.

    Release units (helm/Chart.yaml present) are rendered into rendered/ and
    installed with helm; everything else is applied with kubectl.

    Examples:
        endfield deploy up apps/api
        endfield deploy up infra/redis --repo-name bitnami \\
            --repo-url https://charts.bitnami.com/bitnami
    """
    ctx = get_cli_context()
    unit_dir = _unit_dir(unit)
    target = resolve_target(unit_dir, _values_file(values), repo_name, repo_url)
    ns = namespace or default_namespace(unit_dir)

    outcome = run_operation(
        f"Deploying {unit_dir.name}...",
        unit_dir.name,
        ctx.orchestrator().deploy,
        unit_dir.name,
        ns,
        target,
    )
    _report(outcome, "Deployed")


@deploy_app.command()
@with_error_handling
def diff(
    unit: UnitDir,
    namespace: NamespaceOption = None,
    values: ValuesOption = None,
) -> None:
    """Show what deploying a unit would change on the cluster."""
    ctx = get_cli_context()
    unit_dir = _unit_dir(unit)
    target = resolve_target(unit_dir, _values_file(values))
    ns = namespace or default_namespace(unit_dir)

    outcome = run_operation(
        f"Diffing {unit_dir.name}...",
        unit_dir.name,
        ctx.orchestrator().diff,
        unit_dir.name,
        ns,
        target,
    )
    print_warnings(outcome.warnings)
    if outcome.error:
        console.handle_error(f"Diff of {unit_dir.name} failed", outcome.error)
    if not outcome.has_changes:
        console.ok(f"{unit_dir.name} is up to date")
        return
    console.print(Syntax(outcome.diff, "diff", word_wrap=True))


@deploy_app.command()
@with_error_handling
def down(
    unit: UnitDir,
    namespace: NamespaceOption = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")
    ] = False,
) -> None:
    """Remove a unit's resources from the cluster; files stay on disk."""
    ctx = get_cli_context()
    unit_dir = _unit_dir(unit)
    target = resolve_target(unit_dir)
    ns = namespace or default_namespace(unit_dir)

    if not console.confirm_action(
        f"Remove {unit_dir.name} from namespace {ns}", force=yes
    ):
        raise typer.Exit(0)

    outcome = run_operation(
        f"Removing {unit_dir.name}...",
        unit_dir.name,
        ctx.orchestrator().remove,
        unit_dir.name,
        ns,
        target,
    )
    _report(outcome, "Removed")


@deploy_app.command()
@with_error_handling
def render(
    unit: UnitDir,
    namespace: NamespaceOption = None,
    values: ValuesOption = None,
) -> None:
    """Render a release unit into its rendered/ directory without installing."""
    ctx = get_cli_context()
    unit_dir = _unit_dir(unit)
    target = resolve_target(unit_dir, _values_file(values))
    if not isinstance(target, ReleaseTarget):
        console.handle_error(f"{unit_dir} is not a release unit")
        return
    ns = namespace or default_namespace(unit_dir)

    outcome = run_operation(
        f"Rendering {target.release_name}...",
        unit_dir.name,
        ctx.renderer().render_release,
        unit_dir,
        target.release_name,
        ns,
        target.values_file,
    )
    print_warnings(outcome.warnings)
    if not outcome.success:
        console.handle_error(f"Render of {target.release_name} failed", outcome.error)
    for path in outcome.rendered_files:
        console.print(f"  [green]+[/green] {path}")
    console.ok(f"Rendered {len(outcome.rendered_files)} manifests")


@deploy_app.command()
@with_error_handling
def replicas(
    file: Annotated[Path, typer.Argument(help="Manifest file holding the workload")],
    name: Annotated[str, typer.Argument(help="metadata.name of the workload")],
    count: Annotated[int, typer.Argument(min=0, help="New replica count")],
) -> None:
    """Rewrite a workload's replica count in place and apply the file."""
    ctx = get_cli_context()
    path = file if file.is_absolute() else ctx.project_root / file

    result = ctx.cleanup().apply_replicas(str(path), name, count)
    if not result.success:
        console.handle_error(f"kubectl apply of {path} failed", result.stderr)
    console.ok(f"{name} scaled to {count}: {result.stdout.strip()}")


@deploy_app.command()
@with_error_handling
def image(
    name: Annotated[str, typer.Argument(help="Deployment name")],
    image_ref: Annotated[str, typer.Option("--image", "-i", help="Container image")],
    namespace: Annotated[str, typer.Option("--namespace", "-n")] = "default",
    replicas_count: Annotated[int, typer.Option("--replicas", "-r", min=0)] = 1,
    ports: Annotated[
        list[int] | None,
        typer.Option("--port", "-p", help="Container port (repeatable)"),
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="Plain env KEY=VALUE (repeatable)"),
    ] = None,
    secret_env: Annotated[
        list[str] | None,
        typer.Option("--secret-env", help="Secret env KEY=VALUE (repeatable)"),
    ] = None,
    service_type: Annotated[str, typer.Option("--service-type")] = "ClusterIP",
    pull_secret: Annotated[
        str | None, typer.Option("--pull-secret", help="Image pull secret")
    ] = None,
    cpu_limit: Annotated[str | None, typer.Option("--cpu-limit")] = None,
    mem_limit: Annotated[str | None, typer.Option("--mem-limit")] = None,
    create_namespace: Annotated[
        bool,
        typer.Option("--create-namespace", help="Apply a Namespace manifest too"),
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Print manifests, apply nothing")
    ] = False,
) -> None:
    """Deploy a container image directly with server-side apply.

    Examples:
        endfield deploy image web --image nginx:1.27 -p 80 -n demo
    """
    ctx = get_cli_context()
    request = ImageDeployRequest(
        namespace=namespace,
        name=name,
        image=image_ref,
        replicas=replicas_count,
        env=parse_env(env),
        secret_env=parse_env(secret_env),
        ports=[ContainerPort(container_port=p) for p in ports or []],
        service_type=service_type,
        resources=ResourceOverrides(cpu_limit=cpu_limit, mem_limit=mem_limit),
        image_pull_secret=pull_secret,
        create_namespace=create_namespace,
    )
    deployer = ctx.image_deployer()

    if dry_run:
        for _, text in build_image_manifests(request).in_apply_order():
            typer.echo(f"---\n{text}", nl=False)
        return

    outcome = run_operation(
        f"Deploying {image_ref}...", name, deployer.deploy, request
    )
    print_command_log(outcome.commands)
    if not outcome.success:
        console.handle_error(f"Image deploy of {name} failed", outcome.error)
    console.ok(f"Deployment {name} applied in namespace [bold]{namespace}[/bold]")


@deploy_app.command()
@with_error_handling
def rm(
    paths: Annotated[list[Path], typer.Argument(help="Files or unit directories")],
    keep_cluster: Annotated[
        bool,
        typer.Option("--keep-cluster", help="Only delete files, not resources"),
    ] = False,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")
    ] = False,
) -> None:
    """Delete files or unit directories, and their resources, for good."""
    ctx = get_cli_context()
    resolved = [str(p if p.is_absolute() else ctx.project_root / p) for p in paths]

    if not console.confirm_action(
        f"Delete {len(resolved)} path(s)",
        details="\n".join(resolved),
        force=yes,
    ):
        raise typer.Exit(0)

    outcome = ctx.cleanup().delete_from_disk(
        resolved, delete_from_cluster=not keep_cluster
    )
    if outcome.cluster_output:
        console.print(outcome.cluster_output)
    if outcome.cluster_error:
        console.warn(outcome.cluster_error)
    for missing in outcome.missing_files:
        console.warn(f"Not found: {missing}")
    for deleted in outcome.deleted_files:
        console.print(f"  [red]-[/red] {deleted}")
    if outcome.file_errors:
        console.handle_error(
            "Some paths could not be deleted", "\n".join(outcome.file_errors)
        )
    console.ok(f"Deleted {len(outcome.deleted_files)} path(s)")
