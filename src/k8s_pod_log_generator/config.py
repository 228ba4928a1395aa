"""Configuration schema for a log generator run."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    field_validator,
)

DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_NAMESPACE_PREFIX = "logger-ns"
DEFAULT_IMAGE = "busybox:1.36.1-uclibc"


def default_kubeconfig_path() -> Path:
    return Path.home() / ".kube" / "config"


class GeneratorConfig(BaseModel):
    """Sizes, duration and concurrency for one run, as read from YAML."""

    kubeconfig_path: Path = Field(default_factory=default_kubeconfig_path)
    num_k8s_namespaces: PositiveInt
    bytes_per_log_line: PositiveInt
    kilobytes_per_pod_log: PositiveInt
    megabytes_total_log_size: NonNegativeInt
    run_duration_minutes: PositiveInt
    namespace_prefix: str = Field(default=DEFAULT_NAMESPACE_PREFIX)
    concurrent_requests: PositiveInt

    in_cluster: bool = Field(
        default=False, description="Use the pod service account instead of a kubeconfig."
    )
    container_image: str = Field(default=DEFAULT_IMAGE, min_length=1)
    pod_name_prefix: str = Field(default="logger-pod", min_length=1)
    max_jitter_seconds: PositiveInt = Field(default=3)
    admission_backoff_seconds: PositiveFloat = Field(default=5.0)
    namespace_poll_interval_seconds: PositiveFloat = Field(default=1.0)
    namespace_delete_timeout_seconds: PositiveFloat = Field(default=300.0)
    abort_on_pod_failure: bool = Field(default=True)
    admission_policy: Literal["observed", "dispatched"] = Field(
        default="observed",
        description="'observed' gates on live pods only; 'dispatched' also caps by pods sent.",
    )
    seed: int | None = Field(default=None, description="Seed for jitter and namespace choice.")

    model_config = {"extra": "forbid"}

    @field_validator("kubeconfig_path", mode="before")
    @classmethod
    def _default_kubeconfig(cls, value: Any) -> Path:
        if value is None or (isinstance(value, str) and not value.strip()):
            return default_kubeconfig_path()
        return Path(value).expanduser()

    @field_validator("namespace_prefix", mode="before")
    @classmethod
    def _default_prefix(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_NAMESPACE_PREFIX
        return value

    @property
    def run_duration(self) -> timedelta:
        return timedelta(minutes=self.run_duration_minutes)


def load_config(path: Path | None = None) -> GeneratorConfig:
    """Load YAML config into a GeneratorConfig instance."""

    config_path = path or DEFAULT_CONFIG_PATH
    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if data is None:
        raise ValueError(f"Generator config is empty: {config_path}")
    return GeneratorConfig.model_validate(data)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_IMAGE",
    "DEFAULT_NAMESPACE_PREFIX",
    "GeneratorConfig",
    "default_kubeconfig_path",
    "load_config",
]
