"""Synthetic pod workload generator for Kubernetes log-pipeline capacity tests."""

from importlib import metadata


__all__ = ["__version__"]


try:
    __version__ = metadata.version("k8s-pod-log-generator")
except metadata.PackageNotFoundError:  # pragma: no cover - during local dev without install
    __version__ = "0.1.0"
