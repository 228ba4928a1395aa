"""Prometheus instruments describing a generator run."""

from prometheus_client import Counter, Gauge


PODS_CREATED = Counter(
    "log_generator_pods_created_total",
    "Log-emitting pods accepted by the Kubernetes API.",
    labelnames=("namespace",),
)
POD_FAILURES = Counter(
    "log_generator_pod_failures_total",
    "Pod creation requests rejected by the Kubernetes API.",
)
BATCHES = Counter(
    "log_generator_batches_total",
    "Dispatch batches fired by the run loop.",
)
ADMISSION_DEFERRALS = Counter(
    "log_generator_admission_deferrals_total",
    "Cycles in which the admission check refused a new batch.",
)
LIVE_PODS = Gauge(
    "log_generator_live_pods",
    "Pods not yet Succeeded or Failed across all generator namespaces.",
)
TARGET_PODS = Gauge(
    "log_generator_target_pods",
    "Total pods the current run intends to create.",
)


__all__ = [
    "ADMISSION_DEFERRALS",
    "BATCHES",
    "LIVE_PODS",
    "POD_FAILURES",
    "PODS_CREATED",
    "TARGET_PODS",
]
