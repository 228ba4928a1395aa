"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import os
import threading
from typing import Any

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

os.environ.setdefault("LOGGEN_LOG_LEVEL", "INFO")
os.environ.setdefault("LOGGEN_CONFIG_PATH", "config.yaml")

TERMINAL_PHASES = {"Succeeded", "Failed"}


class FakeCluster:
    """In-memory stand-in for the CoreV1 operations the generator uses.

    A deleted namespace keeps answering existence checks ``delete_checks``
    times before it disappears, mimicking the Terminating phase.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, str]] = {}
        self.terminating: dict[str, int] = {}
        self.delete_checks = 0
        self.fail_pods: set[str] = set()
        self.fail_namespace_create: set[str] = set()
        self.fail_listing = False
        self.listing_error: Exception | None = None
        self.lookup_error: Exception | None = None
        self.created: list[tuple[str, client.V1Pod]] = []
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def add_namespace(self, name: str, pods: dict[str, str] | None = None) -> None:
        self.namespaces[name] = dict(pods or {})

    def finish_all(self, phase: str = "Succeeded") -> None:
        with self._lock:
            for pods in self.namespaces.values():
                for name in pods:
                    pods[name] = phase

    def namespace_exists(self, name: str) -> bool:
        with self._lock:
            self.calls.append(("exists", name))
            if self.lookup_error is not None:
                raise self.lookup_error
            if name in self.terminating:
                if self.terminating[name] > 0:
                    self.terminating[name] -= 1
                    return True
                del self.terminating[name]
                return False
            return name in self.namespaces

    def create_namespace(self, name: str) -> None:
        with self._lock:
            self.calls.append(("create", name))
            if name in self.fail_namespace_create:
                raise ApiException(status=403, reason="Forbidden")
            if name in self.namespaces or name in self.terminating:
                raise ApiException(status=409, reason="AlreadyExists")
            self.namespaces[name] = {}

    def delete_namespace(self, name: str) -> None:
        with self._lock:
            self.calls.append(("delete", name))
            if name not in self.namespaces:
                raise ApiException(status=404, reason="NotFound")
            del self.namespaces[name]
            self.terminating[name] = self.delete_checks

    def create_pod(self, namespace: str, body: client.V1Pod) -> None:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            with self._lock:
                name = body.metadata.name
                if namespace not in self.namespaces:
                    raise ApiException(status=404, reason="NotFound")
                if name in self.fail_pods:
                    raise ApiException(status=500, reason="InternalError")
                self.namespaces[namespace][name] = "Pending"
                self.created.append((namespace, body))
        finally:
            with self._lock:
                self.in_flight -= 1

    def count_live_pods(self, namespace: str) -> int:
        with self._lock:
            if self.listing_error is not None:
                raise self.listing_error
            if self.fail_listing:
                raise ApiException(status=500, reason="InternalError")
            pods = self.namespaces.get(namespace, {})
            return sum(1 for phase in pods.values() if phase not in TERMINAL_PHASES)

    def __enter__(self) -> "FakeCluster":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it.

    Concurrent sleepers overlap: the clock ends at the latest wake-up time,
    not the sum of all delays.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        wake_at = self.now + seconds
        self.sleeps.append(seconds)
        await asyncio.sleep(0)
        self.now = max(self.now, wake_at)


async def no_sleep(seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def cluster_factory() -> type[FakeCluster]:
    return FakeCluster


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def instant_sleep():
    return no_sleep
