"""Endfield: manifest intelligence and deployment orchestration for Kubernetes projects.

The package is split by concern:

- manifests: line-oriented scanning, classification, generation and splitting
  of Kubernetes YAML text
- deployment: external tool orchestration (helm, kubectl) for units
- cluster: read-only cluster inspection helpers
- layout / watcher: project session state for the visual editor
- cli: the ``endfield`` command line interface
"""

__version__ = "0.3.0"
