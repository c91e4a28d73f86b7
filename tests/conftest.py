"""Shared fixtures for HealthScan admin tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from healthscan_admin.config.models import HealthScanConfig
from healthscan_admin.server.cache import HealthCache
from healthscan_admin.server.transport import BackendClient


SAMPLE_CONFIG: Dict[str, Any] = {
    "backend": {
        "project_id": "abcdefgh",
        "anon_key": "anon-test-key",
        "function_slug": "make-server-ed0fe4c2",
    },
    "health": {
        "cache_ttl_seconds": 300,
        "timeout": 5.0,
        "stats_timeout": 8.0,
        "categories_timeout": 6.0,
        "monitor_interval": 300,
    },
    "retry": {"max_retries": 2, "base_delay": 0.01, "max_delay": 0.02},
}


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def sample_config() -> HealthScanConfig:
    """Return a parsed HealthScanConfig from sample data."""
    return HealthScanConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp .healthscan.yaml and return the path."""
    path = tmp_path / ".healthscan.yaml"
    with path.open("w") as fh:
        yaml.dump(SAMPLE_CONFIG, fh)
    return path


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> HealthCache:
    return HealthCache(ttl_ms=300_000, clock=clock)


@pytest.fixture()
def backend_client(sample_config: HealthScanConfig) -> BackendClient:
    return BackendClient(sample_config.backend)
