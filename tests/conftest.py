# tests/conftest.py

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from kubehealth.models.health import MonitorConfig
from kubehealth.models.samples import CounterName, LookupEntry, RawSample

T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to pin the monitor thresholds for every test (`autouse=True`),
    so the engine's configuration is predictable and isolated from the actual
    environment.
    """
    for prefix in ("CPU_MONITOR", "MEMORY_MONITOR"):
        monkeypatch.setenv(f"{prefix}_WARN_PERCENTAGE", "80")
        monkeypatch.setenv(f"{prefix}_FAIL_PERCENTAGE", "90")
        monkeypatch.setenv(f"{prefix}_STATE_THRESHOLD_PERCENTAGE", "90")
    monkeypatch.setenv("CYCLE_INTERVAL", "1m")


@pytest.fixture
def make_sample():
    """Factory for RawSample with sensible defaults."""

    def _make(instance_name, value, counter=CounterName.CPU, timestamp=T0):
        counter_name = counter.value if isinstance(counter, CounterName) else counter
        return RawSample(
            instance_name=instance_name,
            counter_name=counter_name,
            counter_value=value,
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def make_entry():
    """Factory for LookupEntry belonging to workload '<namespace>~~<workload>'."""

    def _make(pod_name, namespace="ns1", workload="wl1", container="c1", cpu_limit=1000000000, memory_limit=1073741824):
        return LookupEntry(
            namespace=namespace,
            workload_name=f"{namespace}~~{workload}",
            workload_kind="Deployment",
            container=container,
            pod_name=pod_name,
            cpu_limit=cpu_limit,
            cpu_limit_set=True,
            memory_limit=memory_limit,
            memory_limit_set=True,
        )

    return _make


@pytest.fixture
def monitor_config():
    return MonitorConfig(
        warn_threshold_percentage=50,
        fail_threshold_percentage=80,
        state_threshold_percentage=100,
    )


@pytest.fixture
def emit_event():
    """Stands in for the diagnostic event sink."""
    return MagicMock()
