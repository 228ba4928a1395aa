"""Kubernetes-facing pieces: API adapter, namespace provisioning, observation."""

from .client import (
    CLUSTER_ERRORS,
    LIVE_POD_FIELD_SELECTOR,
    ClusterApi,
    ClusterClient,
    build_core_api,
)
from .observer import ClusterStateObserver
from .provisioner import NamespaceProvisioner, namespace_name

__all__ = [
    "CLUSTER_ERRORS",
    "LIVE_POD_FIELD_SELECTOR",
    "ClusterApi",
    "ClusterClient",
    "ClusterStateObserver",
    "NamespaceProvisioner",
    "build_core_api",
    "namespace_name",
]
