"""Concurrent creation of log-emitting pods, one bounded batch at a time."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from kubernetes import client

from ..cluster.client import CLUSTER_ERRORS, ClusterApi
from ..config import DEFAULT_IMAGE
from ..logging import get_logger, log_structured
from ..metrics import BATCHES, POD_FAILURES, PODS_CREATED
from ..sizing import PayloadDescriptor

LOGGER = get_logger(__name__)

APP_LABEL = "k8s-pod-log-generator"
CONTAINER_NAME = "logger-container"

Sleep = Callable[[float], Awaitable[None]]


def log_command(payload: PayloadDescriptor) -> str:
    """Shell loop printing ``lines_per_pod`` random lines of ``bytes_per_line`` chars."""

    return (
        f"for i in $(seq 1 {payload.lines_per_pod}); do "
        f"cat /dev/urandom | tr -dc 'a-zA-Z0-9' | head -c {payload.bytes_per_line}; "
        "echo; done"
    )


def build_pod_manifest(
    name: str, payload: PayloadDescriptor, *, image: str = DEFAULT_IMAGE
) -> client.V1Pod:
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            name=name,
            labels={
                "app": APP_LABEL,
                "total_log_lines": str(payload.total_log_lines),
            },
        ),
        spec=client.V1PodSpec(
            restart_policy="Never",
            containers=[
                client.V1Container(
                    name=CONTAINER_NAME,
                    image=image,
                    command=["/bin/sh", "-c", log_command(payload)],
                )
            ],
        ),
    )


class OrdinalSequencer:
    """Hands out pod ordinals; only the coordinating task may call :meth:`take`."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    @property
    def next_ordinal(self) -> int:
        return self._next

    def take(self, count: int) -> list[int]:
        if count < 0:
            raise ValueError("count cannot be negative")
        ordinals = list(range(self._next, self._next + count))
        self._next += count
        return ordinals


@dataclass(frozen=True, slots=True)
class PodResult:
    ordinal: int
    namespace: str
    pod_name: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BatchResult:
    results: list[PodResult] = field(default_factory=list)

    @property
    def created(self) -> list[PodResult]:
        return [result for result in self.results if result.ok]

    @property
    def failures(self) -> list[PodResult]:
        return [result for result in self.results if not result.ok]

    def __len__(self) -> int:
        return len(self.results)


class WorkloadDispatcher:
    """Fires ``concurrency`` pod creations in parallel and waits for all of them.

    Each worker picks up a pre-assigned ordinal, sleeps a random number of
    seconds in ``1..max_jitter_seconds`` to spread requests out, then submits
    its pod to a namespace chosen uniformly at random.
    """

    def __init__(
        self,
        cluster: ClusterApi,
        namespaces: Sequence[str],
        payload: PayloadDescriptor,
        *,
        concurrency: int,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
        max_jitter_seconds: int = 3,
        image: str = DEFAULT_IMAGE,
        pod_name_prefix: str = "logger-pod",
        sequencer: OrdinalSequencer | None = None,
    ) -> None:
        if not namespaces:
            raise ValueError("At least one namespace is required")
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        if max_jitter_seconds < 1:
            raise ValueError("max_jitter_seconds must be at least 1")
        self.cluster = cluster
        self.namespaces = tuple(namespaces)
        self.payload = payload
        self.concurrency = concurrency
        self.max_jitter_seconds = max_jitter_seconds
        self.image = image
        self.pod_name_prefix = pod_name_prefix
        self.sequencer = sequencer or OrdinalSequencer()
        self._rng = rng or random.Random()
        self._sleep = sleep
        self.in_flight = 0
        self.max_in_flight = 0
        self.dispatched = 0

    async def dispatch_batch(self) -> BatchResult:
        """Submit one batch and return once every pod in it has an outcome."""

        queue: asyncio.Queue[int] = asyncio.Queue(maxsize=self.concurrency)
        for ordinal in self.sequencer.take(self.concurrency):
            queue.put_nowait(ordinal)

        results = await asyncio.gather(
            *(self._submit_next(queue) for _ in range(self.concurrency))
        )
        self.dispatched += len(results)
        BATCHES.inc()
        batch = BatchResult(list(results))
        log_structured(
            LOGGER,
            "batch finished",
            created=len(batch.created),
            failed=len(batch.failures),
            next_ordinal=self.sequencer.next_ordinal,
        )
        return batch

    async def _submit_next(self, queue: asyncio.Queue[int]) -> PodResult:
        ordinal = queue.get_nowait()
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self._sleep(self._rng.randint(1, self.max_jitter_seconds))
            namespace = self._rng.choice(self.namespaces)
            pod_name = f"{self.pod_name_prefix}-{ordinal}"
            body = build_pod_manifest(pod_name, self.payload, image=self.image)
            try:
                await asyncio.to_thread(self.cluster.create_pod, namespace, body)
            except CLUSTER_ERRORS as exc:
                POD_FAILURES.inc()
                log_structured(
                    LOGGER,
                    "pod creation failed",
                    level=logging.ERROR,
                    pod=pod_name,
                    namespace=namespace,
                    error=exc,
                )
                return PodResult(ordinal, namespace, pod_name, error=exc)
        finally:
            self.in_flight -= 1
            queue.task_done()

        PODS_CREATED.labels(namespace=namespace).inc()
        log_structured(LOGGER, "pod created", pod=pod_name, namespace=namespace)
        return PodResult(ordinal, namespace, pod_name)


__all__ = [
    "APP_LABEL",
    "BatchResult",
    "OrdinalSequencer",
    "PodResult",
    "WorkloadDispatcher",
    "build_pod_manifest",
    "log_command",
]
