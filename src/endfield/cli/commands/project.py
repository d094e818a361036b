"""Project inspection commands: scan, files and layout."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from endfield.layout import load_layout
from endfield.manifests import list_manifest_files, scan_project

from ..console import console, with_error_handling
from ..context import get_cli_context

project_app = typer.Typer(
    name="project",
    help="Inspect the manifests of a project.",
    no_args_is_help=True,
)

ProjectPath = Annotated[
    Path | None,
    typer.Argument(help="Project directory (default: current project root)"),
]


def _project_path(path: Path | None) -> Path:
    return path if path is not None else get_cli_context().project_root


@project_app.command()
@with_error_handling
def scan(path: ProjectPath = None) -> None:
    """List the workload and infrastructure nodes found in a project.

    Examples:
        endfield project scan
        endfield project scan ./k8s
    """
    result = scan_project(_project_path(path))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Kind")
    table.add_column("Name", style="cyan")
    table.add_column("Namespace")
    table.add_column("Category")
    table.add_column("Replicas", justify="right")
    table.add_column("Image")

    for node in result.nodes:
        table.add_row(
            node.id,
            node.kind,
            node.label,
            node.namespace,
            str(node.category),
            "" if node.replicas is None else str(node.replicas),
            node.image,
        )

    console.print(table)
    for error in result.errors:
        console.warn(error)
    if not result.nodes and result.errors:
        raise typer.Exit(1)


@project_app.command()
@with_error_handling
def files(path: ProjectPath = None) -> None:
    """List every YAML file in a project, generated output included."""
    for file_path in list_manifest_files(_project_path(path)):
        console.print(file_path)


@project_app.command()
@with_error_handling
def layout(path: ProjectPath = None) -> None:
    """Show the saved canvas positions of a project."""
    saved = load_layout(_project_path(path))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Id", style="cyan")
    table.add_column("Label")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    for position in saved.fields:
        table.add_row(
            position.id, position.label, f"{position.x:g}", f"{position.y:g}"
        )
    console.print(table)
