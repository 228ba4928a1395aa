"""Decides whether another dispatch batch fits under the run target."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AdmissionPolicy = Literal["observed", "dispatched"]


def should_admit(observed: int, concurrency: int, target: int) -> bool:
    """Admit only if a full batch on top of the live pods stays below target.

    ``observed`` is a snapshot taken before the batch is sent, so the check is
    approximate and a run can still end a batch above ``target``.
    """

    return observed + concurrency < target


@dataclass(frozen=True, slots=True)
class AdmissionDecision:
    admit: bool
    observed: int
    dispatched: int
    reason: str


class AdmissionController:
    """Stateless gate evaluated once per polling cycle.

    With the ``observed`` policy only the live pod count matters, so pods that
    finish free room for new ones and a long run keeps creating pods. The
    ``dispatched`` policy additionally stops once the pods sent by this run
    reach the target.
    """

    def __init__(
        self, concurrency: int, target: int, policy: AdmissionPolicy = "observed"
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        if policy not in ("observed", "dispatched"):
            raise ValueError(f"Unknown admission policy: {policy}")
        self.concurrency = concurrency
        self.target = target
        self.policy = policy

    def decide(self, observed: int, dispatched: int = 0) -> AdmissionDecision:
        if not should_admit(observed, self.concurrency, self.target):
            return AdmissionDecision(False, observed, dispatched, "live pods at target")
        if self.policy == "dispatched" and dispatched >= self.target:
            return AdmissionDecision(False, observed, dispatched, "target already dispatched")
        return AdmissionDecision(True, observed, dispatched, "admitted")


__all__ = ["AdmissionController", "AdmissionDecision", "AdmissionPolicy", "should_admit"]
