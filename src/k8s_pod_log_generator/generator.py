"""Run loop generating a target volume of pod logs within a time window."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import yaml
from prometheus_client import start_http_server

from .cluster import (
    ClusterApi,
    ClusterClient,
    ClusterStateObserver,
    NamespaceProvisioner,
    build_core_api,
)
from .config import GeneratorConfig, load_config
from .errors import DispatchError, LogGeneratorError
from .logging import get_logger, log_structured
from .metrics import ADMISSION_DEFERRALS, TARGET_PODS
from .settings import get_settings
from .sizing import resolve_target
from .workload import AdmissionController, WorkloadDispatcher

LOGGER = get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class RunSummary:
    namespaces: list[str]
    target_pods: int
    batches: int = 0
    pods_created: int = 0
    pods_failed: int = 0
    deferrals: int = 0
    elapsed_seconds: float = 0.0
    failed_pods: list[str] = field(default_factory=list)

    @property
    def pods_dispatched(self) -> int:
        return self.pods_created + self.pods_failed


class RunLoop:
    """Polls live pods, admits batches and dispatches them until the deadline.

    The deadline is only checked before each observation; a batch that has
    started always runs to completion.
    """

    def __init__(
        self,
        namespaces: Sequence[str],
        observer: ClusterStateObserver,
        admission: AdmissionController,
        dispatcher: WorkloadDispatcher,
        *,
        duration: timedelta,
        backoff_seconds: float = 5.0,
        abort_on_failure: bool = True,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.namespaces = list(namespaces)
        self.observer = observer
        self.admission = admission
        self.dispatcher = dispatcher
        self.duration = duration
        self.backoff_seconds = backoff_seconds
        self.abort_on_failure = abort_on_failure
        self._clock = clock
        self._sleep = sleep

    async def run(self) -> RunSummary:
        summary = RunSummary(namespaces=self.namespaces, target_pods=self.admission.target)
        started = self._clock()
        deadline = started + self.duration.total_seconds()

        while self._clock() < deadline:
            observed = await self.observer.total_live_pods(self.namespaces)
            decision = self.admission.decide(observed, self.dispatcher.dispatched)
            if not decision.admit:
                summary.deferrals += 1
                ADMISSION_DEFERRALS.inc()
                log_structured(
                    LOGGER,
                    "admission deferred",
                    live=observed,
                    dispatched=decision.dispatched,
                    target=self.admission.target,
                    reason=decision.reason,
                )
                await self._sleep(self.backoff_seconds)
                continue

            batch = await self.dispatcher.dispatch_batch()
            summary.batches += 1
            summary.pods_created += len(batch.created)
            if not batch.failures:
                continue

            summary.pods_failed += len(batch.failures)
            summary.failed_pods.extend(result.pod_name for result in batch.failures)
            if self.abort_on_failure:
                first = batch.failures[0]
                raise DispatchError(
                    f"Failed to create Pod {first.pod_name} "
                    f"in namespace {first.namespace}: {first.error}"
                ) from first.error
            log_structured(
                LOGGER,
                "skipping failed pods",
                level=logging.WARNING,
                count=len(batch.failures),
                pods=",".join(result.pod_name for result in batch.failures),
            )

        summary.elapsed_seconds = self._clock() - started
        return summary


async def run_generator(
    config: GeneratorConfig,
    cluster: ClusterApi,
    *,
    rng: random.Random | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> RunSummary:
    """Provision namespaces, then drive the run loop for the configured window."""

    target = resolve_target(config)
    TARGET_PODS.set(target.total_pods)
    log_structured(
        LOGGER,
        "run target resolved",
        total_pods=target.total_pods,
        lines_per_pod=target.payload.lines_per_pod,
        bytes_per_line=target.payload.bytes_per_line,
        duration_minutes=config.run_duration_minutes,
        concurrency=config.concurrent_requests,
    )

    provisioner = NamespaceProvisioner(
        cluster,
        poll_interval=config.namespace_poll_interval_seconds,
        delete_timeout=config.namespace_delete_timeout_seconds,
        sleep=sleep,
    )
    namespaces = await provisioner.provision(
        config.num_k8s_namespaces, config.namespace_prefix
    )

    dispatcher = WorkloadDispatcher(
        cluster,
        namespaces,
        target.payload,
        concurrency=config.concurrent_requests,
        rng=rng or random.Random(config.seed),
        sleep=sleep,
        max_jitter_seconds=config.max_jitter_seconds,
        image=config.container_image,
        pod_name_prefix=config.pod_name_prefix,
    )
    loop = RunLoop(
        namespaces,
        ClusterStateObserver(cluster),
        AdmissionController(
            config.concurrent_requests, target.total_pods, config.admission_policy
        ),
        dispatcher,
        duration=config.run_duration,
        backoff_seconds=config.admission_backoff_seconds,
        abort_on_failure=config.abort_on_pod_failure,
        clock=clock,
        sleep=sleep,
    )
    return await loop.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the generator YAML config (defaults to LOGGEN_CONFIG_PATH or config.yaml).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    config_path = args.config or settings.config_path

    try:
        config = load_config(config_path)
        core_api = build_core_api(config.kubeconfig_path, in_cluster=config.in_cluster)
    except (LogGeneratorError, OSError, ValueError, yaml.YAMLError) as exc:
        log_structured(
            LOGGER, "setup failed", level=logging.ERROR, config=config_path, error=exc
        )
        return 1

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        log_structured(LOGGER, "serving metrics", port=settings.metrics_port)

    log_structured(LOGGER, "starting log generator", config=config_path)
    with ClusterClient(core_api) as cluster:
        try:
            summary = asyncio.run(run_generator(config, cluster))
        except LogGeneratorError as exc:
            log_structured(LOGGER, "run aborted", level=logging.ERROR, error=exc)
            return 1

    log_structured(
        LOGGER,
        "run complete",
        batches=summary.batches,
        pods_created=summary.pods_created,
        pods_failed=summary.pods_failed,
        deferrals=summary.deferrals,
        elapsed_seconds=f"{summary.elapsed_seconds:.0f}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
