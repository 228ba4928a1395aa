"""Error taxonomy for a generator run.

Every failure that ends a run surfaces as a :class:`LogGeneratorError` subclass
so the entry point can log the failing operation and exit non-zero.
"""

from __future__ import annotations


class LogGeneratorError(RuntimeError):
    """Base class for failures that terminate a run."""


class SetupError(LogGeneratorError):
    """Credentials or the Kubernetes client could not be built."""


class ProvisioningError(LogGeneratorError):
    """A namespace could not be inspected, deleted or created."""


class ProvisioningTimeoutError(ProvisioningError):
    """A pre-existing namespace did not disappear within the allowed time."""


class ObservationError(LogGeneratorError):
    """Listing live pods in a namespace failed."""


class DispatchError(LogGeneratorError):
    """A pod creation request failed and the run is configured to abort."""


__all__ = [
    "DispatchError",
    "LogGeneratorError",
    "ObservationError",
    "ProvisioningError",
    "ProvisioningTimeoutError",
    "SetupError",
]
