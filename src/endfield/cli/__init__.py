"""Main CLI application module.

Command Groups:
- project: scan a project, list its files, show the saved layout
- generate: write field and infra units, print ingress routes
- deploy: install, diff, remove, render, scale and image deploys
- cluster: workload status, logs, events, namespaces
"""

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from endfield.errors import EndfieldError

from .commands import cluster_app, deploy_app, generate_app, project_app
from .console import console
from .context import build_cli_context

app = typer.Typer(
    help="endfield - Kubernetes manifest intelligence and deploy orchestration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(project_app, name="project")
app.add_typer(generate_app, name="generate")
app.add_typer(deploy_app, name="deploy")
app.add_typer(cluster_app, name="cluster")


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{level: <8} {message}")


@app.callback()
def root(
    ctx: typer.Context,
    project: Annotated[
        Path | None,
        typer.Option("--project", "-C", help="Project directory (default: cwd)"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Scan, generate and deploy Kubernetes manifests."""
    try:
        cli_context = build_cli_context(project)
    except EndfieldError as e:
        console.handle_error(e.message, e.details)
        return
    configure_logging("DEBUG" if verbose else cli_context.settings.log_level)
    ctx.obj = cli_context


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
