"""Thin adapter over the Kubernetes CoreV1 API."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ..errors import SetupError
from ..logging import get_logger

LOGGER = get_logger(__name__)

LIVE_POD_FIELD_SELECTOR = "status.phase!=Succeeded,status.phase!=Failed"

# Raised by CoreV1Api calls: API error responses and transport failures.
CLUSTER_ERRORS = (ApiException, urllib3.exceptions.HTTPError)


class ClusterApi(Protocol):
    def namespace_exists(self, name: str) -> bool:
        """Return whether the namespace can currently be read."""

    def create_namespace(self, name: str) -> None:
        """Create an empty namespace."""

    def delete_namespace(self, name: str) -> None:
        """Request deletion of a namespace."""

    def create_pod(self, namespace: str, body: client.V1Pod) -> None:
        """Submit a pod to the namespace."""

    def count_live_pods(self, namespace: str) -> int:
        """Count pods that are neither Succeeded nor Failed."""


def build_core_api(kubeconfig_path: Path, *, in_cluster: bool = False) -> client.CoreV1Api:
    """Load credentials and return a CoreV1Api bound to them.

    Credentials are loaded into a private ``Configuration`` so the process-wide
    kubernetes defaults are left untouched.
    """

    configuration = client.Configuration()
    try:
        if in_cluster:
            config.load_incluster_config(client_configuration=configuration)
            LOGGER.info("Using in-cluster Kubernetes configuration")
        else:
            config.load_kube_config(
                config_file=str(kubeconfig_path),
                client_configuration=configuration,
            )
            LOGGER.info("Loaded kubeconfig from %s", kubeconfig_path)
    except (ConfigException, OSError) as exc:
        source = "in-cluster service account" if in_cluster else str(kubeconfig_path)
        raise SetupError(f"Error building kubeconfig from {source}: {exc}") from exc
    return client.CoreV1Api(client.ApiClient(configuration=configuration))


class ClusterClient:
    """Namespace and pod operations used by the generator."""

    def __init__(self, core_api: client.CoreV1Api) -> None:
        self._core = core_api

    def namespace_exists(self, name: str) -> bool:
        try:
            self._core.read_namespace(name=name)
        except ApiException as exc:
            if exc.status == 404:
                return False
            raise
        return True

    def create_namespace(self, name: str) -> None:
        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        self._core.create_namespace(body=body)

    def delete_namespace(self, name: str) -> None:
        self._core.delete_namespace(name=name)

    def create_pod(self, namespace: str, body: client.V1Pod) -> None:
        self._core.create_namespaced_pod(namespace=namespace, body=body)

    def count_live_pods(self, namespace: str) -> int:
        pods = self._core.list_namespaced_pod(
            namespace=namespace,
            field_selector=LIVE_POD_FIELD_SELECTOR,
        )
        return sum(1 for pod in pods.items if _is_addressable(pod))

    def close(self) -> None:
        self._core.api_client.close()

    def __enter__(self) -> "ClusterClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _is_addressable(pod: client.V1Pod) -> bool:
    metadata = pod.metadata
    return bool(metadata and metadata.name and metadata.namespace)


__all__ = [
    "CLUSTER_ERRORS",
    "LIVE_POD_FIELD_SELECTOR",
    "ClusterApi",
    "ClusterClient",
    "build_core_api",
]
