"""CLI command groups."""

from .cluster import cluster_app
from .deploy import deploy_app
from .generate import generate_app
from .project import project_app

__all__ = [
    "cluster_app",
    "deploy_app",
    "generate_app",
    "project_app",
]
