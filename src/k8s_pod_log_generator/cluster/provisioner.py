"""Creates the run's namespaces, replacing any left over from a prior run."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable

from ..errors import ProvisioningError, ProvisioningTimeoutError
from ..logging import get_logger, log_structured
from .client import CLUSTER_ERRORS, ClusterApi

LOGGER = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def namespace_name(prefix: str, index: int) -> str:
    return f"{prefix}-{index}"


class NamespaceProvisioner:
    """Guarantees every run starts from freshly created, empty namespaces.

    A namespace that already exists is deleted and the provisioner waits for the
    API server to stop returning it before recreating it, so pods from an
    earlier run never count towards the live total of this one.
    """

    def __init__(
        self,
        cluster: ClusterApi,
        *,
        poll_interval: float = 1.0,
        delete_timeout: float = 300.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if delete_timeout <= 0:
            raise ValueError("delete_timeout must be positive")
        self.cluster = cluster
        self.poll_interval = poll_interval
        self.delete_timeout = delete_timeout
        self._sleep = sleep

    @property
    def max_delete_checks(self) -> int:
        return max(1, math.ceil(self.delete_timeout / self.poll_interval))

    async def provision(self, count: int, prefix: str) -> list[str]:
        """Create ``count`` namespaces named ``<prefix>-1`` .. ``<prefix>-<count>``."""

        if count <= 0:
            raise ValueError("Namespace count must be positive")
        namespaces: list[str] = []
        for index in range(1, count + 1):
            name = namespace_name(prefix, index)
            await self._recreate(name)
            namespaces.append(name)
        return namespaces

    async def _recreate(self, name: str) -> None:
        if await self._exists(name):
            try:
                await asyncio.to_thread(self.cluster.delete_namespace, name)
            except CLUSTER_ERRORS as exc:
                raise ProvisioningError(
                    f"Failed to delete existing namespace {name}: {exc}"
                ) from exc
            LOGGER.info("Deleted existing namespace %s", name)
            await self._wait_until_gone(name)

        try:
            await asyncio.to_thread(self.cluster.create_namespace, name)
        except CLUSTER_ERRORS as exc:
            raise ProvisioningError(f"Failed to create namespace {name}: {exc}") from exc
        log_structured(LOGGER, "namespace created", namespace=name)

    async def _wait_until_gone(self, name: str) -> None:
        for attempt in range(1, self.max_delete_checks + 1):
            if not await self._exists(name):
                LOGGER.debug("Namespace %s gone after %s checks", name, attempt)
                return
            await self._sleep(self.poll_interval)
        raise ProvisioningTimeoutError(
            f"Namespace {name} still present {self.delete_timeout:g}s after deletion"
        )

    async def _exists(self, name: str) -> bool:
        try:
            return await asyncio.to_thread(self.cluster.namespace_exists, name)
        except CLUSTER_ERRORS as exc:
            raise ProvisioningError(f"Failed to look up namespace {name}: {exc}") from exc


__all__ = ["NamespaceProvisioner", "namespace_name"]
