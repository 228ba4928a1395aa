"""Reads how many generator pods are still outstanding."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from ..errors import ObservationError
from ..logging import get_logger
from ..metrics import LIVE_PODS
from .client import CLUSTER_ERRORS, ClusterApi

LOGGER = get_logger(__name__)


class ClusterStateObserver:
    """Counts pods that have not yet reached Succeeded or Failed."""

    def __init__(self, cluster: ClusterApi) -> None:
        self.cluster = cluster

    async def live_pods(self, namespace: str) -> int:
        try:
            return await asyncio.to_thread(self.cluster.count_live_pods, namespace)
        except CLUSTER_ERRORS as exc:
            raise ObservationError(
                f"Failed to list pods in namespace {namespace}: {exc}"
            ) from exc

    async def total_live_pods(self, namespaces: Iterable[str]) -> int:
        total = 0
        for namespace in namespaces:
            total += await self.live_pods(namespace)
        LIVE_PODS.set(total)
        LOGGER.debug("Observed %s live pods", total)
        return total


__all__ = ["ClusterStateObserver"]
