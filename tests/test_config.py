"""Tests for generator config parsing."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from k8s_pod_log_generator.config import (
    DEFAULT_NAMESPACE_PREFIX,
    GeneratorConfig,
    default_kubeconfig_path,
    load_config,
)

BASE_YAML = """
num_k8s_namespaces: 2
bytes_per_log_line: 10
kilobytes_per_pod_log: 10
megabytes_total_log_size: 1
run_duration_minutes: 1
concurrent_requests: 2
"""


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text(
        BASE_YAML + "kubeconfig_path: /etc/kube/admin.conf\nnamespace_prefix: perf\n",
        encoding="utf-8",
    )

    config = load_config(config_yaml)
    assert isinstance(config, GeneratorConfig)
    assert config.kubeconfig_path == Path("/etc/kube/admin.conf")
    assert config.namespace_prefix == "perf"
    assert config.concurrent_requests == 2
    assert config.run_duration == timedelta(minutes=1)


def test_optional_keys_have_defaults(tmp_path: Path) -> None:
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text(BASE_YAML, encoding="utf-8")

    config = load_config(config_yaml)
    assert config.kubeconfig_path == default_kubeconfig_path()
    assert config.namespace_prefix == DEFAULT_NAMESPACE_PREFIX
    assert config.max_jitter_seconds == 3
    assert config.admission_backoff_seconds == 5.0
    assert config.abort_on_pod_failure is True
    assert config.admission_policy == "observed"
    assert config.in_cluster is False


def test_blank_values_fall_back_to_defaults(tmp_path: Path) -> None:
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text(
        BASE_YAML + 'kubeconfig_path: ""\nnamespace_prefix:\n', encoding="utf-8"
    )

    config = load_config(config_yaml)
    assert config.kubeconfig_path == default_kubeconfig_path()
    assert config.namespace_prefix == "logger-ns"


def test_kubeconfig_path_expands_home() -> None:
    config = GeneratorConfig.model_validate(
        {
            "kubeconfig_path": "~/clusters/kind.yaml",
            "num_k8s_namespaces": 1,
            "bytes_per_log_line": 10,
            "kilobytes_per_pod_log": 1,
            "megabytes_total_log_size": 1,
            "run_duration_minutes": 1,
            "concurrent_requests": 1,
        }
    )
    assert config.kubeconfig_path == Path.home() / "clusters" / "kind.yaml"


def test_empty_config_is_rejected(tmp_path: Path) -> None:
    config_yaml = tmp_path / "config.yaml"
    config_yaml.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_yaml)


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "override",
    [
        "concurrent_requests: 0\n",
        "bytes_per_log_line: -1\n",
        "kilobytes_per_pod_log: 0\n",
        "admission_policy: eager\n",
        "unknown_key: 1\n",
    ],
)
def test_invalid_values_raise_validation_error(tmp_path: Path, override: str) -> None:
    config_yaml = tmp_path / "config.yaml"
    lines = [line for line in BASE_YAML.splitlines() if line.split(":")[0] != override.split(":")[0]]
    config_yaml.write_text("\n".join(lines) + "\n" + override, encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(config_yaml)
