"""Admission and dispatch of synthetic log-emitting pods."""

from .admission import AdmissionController, AdmissionDecision, should_admit
from .dispatcher import (
    BatchResult,
    OrdinalSequencer,
    PodResult,
    WorkloadDispatcher,
    build_pod_manifest,
)

__all__ = [
    "AdmissionController",
    "AdmissionDecision",
    "BatchResult",
    "OrdinalSequencer",
    "PodResult",
    "WorkloadDispatcher",
    "build_pod_manifest",
    "should_admit",
]
