"""Conversions from configured log volumes to pod counts and line counts."""

from __future__ import annotations

from dataclasses import dataclass

from .config import GeneratorConfig

BYTES_PER_KILOBYTE = 1024
KILOBYTES_PER_MEGABYTE = 1024


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def calculate_total_log_lines(bytes_per_line: int, kilobytes_per_log: int) -> int:
    """Lines a single pod must print to emit ``kilobytes_per_log`` of output."""

    if bytes_per_line <= 0:
        raise ValueError("bytes_per_line must be positive")
    if kilobytes_per_log < 0:
        raise ValueError("kilobytes_per_log cannot be negative")
    return _ceil_div(kilobytes_per_log * BYTES_PER_KILOBYTE, bytes_per_line)


def calculate_total_pods(megabytes_total_log_size: int, kilobytes_per_pod_log: int) -> int:
    """Pods needed so that their combined logs reach ``megabytes_total_log_size``."""

    if kilobytes_per_pod_log <= 0:
        raise ValueError("kilobytes_per_pod_log must be positive")
    if megabytes_total_log_size < 0:
        raise ValueError("megabytes_total_log_size cannot be negative")
    total_kilobytes = megabytes_total_log_size * KILOBYTES_PER_MEGABYTE
    return _ceil_div(total_kilobytes, kilobytes_per_pod_log)


@dataclass(frozen=True, slots=True)
class PayloadDescriptor:
    """Shape of the synthetic output every pod of a run produces."""

    lines_per_pod: int
    bytes_per_line: int

    @property
    def total_log_lines(self) -> int:
        return self.lines_per_pod


@dataclass(frozen=True, slots=True)
class Target:
    total_pods: int
    payload: PayloadDescriptor


def resolve_target(config: GeneratorConfig) -> Target:
    """Derive the immutable run target from configuration."""

    payload = PayloadDescriptor(
        lines_per_pod=calculate_total_log_lines(
            config.bytes_per_log_line, config.kilobytes_per_pod_log
        ),
        bytes_per_line=config.bytes_per_log_line,
    )
    total_pods = calculate_total_pods(
        config.megabytes_total_log_size, config.kilobytes_per_pod_log
    )
    return Target(total_pods=total_pods, payload=payload)


__all__ = [
    "PayloadDescriptor",
    "Target",
    "calculate_total_log_lines",
    "calculate_total_pods",
    "resolve_target",
]
