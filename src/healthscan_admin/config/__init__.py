"""HealthScan admin configuration system."""

from healthscan_admin.config.loader import (
    UnresolvedEnvError,
    UnresolvedVar,
    find_config_file,
    load_config,
    read_config,
)
from healthscan_admin.config.models import AuthConfig, BackendConfig, HealthConfig, HealthScanConfig, RetryConfig

__all__ = [
    "AuthConfig",
    "BackendConfig",
    "HealthConfig",
    "HealthScanConfig",
    "RetryConfig",
    "UnresolvedEnvError",
    "UnresolvedVar",
    "load_config",
    "read_config",
    "find_config_file",
]
