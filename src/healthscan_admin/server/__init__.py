"""Server health, stats and resilience helpers for the HealthScan admin dashboard."""

from __future__ import annotations

from healthscan_admin.server.cache import HealthCache
from healthscan_admin.server.checker import HealthChecker
from healthscan_admin.server.errors import ErrorKind, HttpStatusError, NetworkError, RequestError, RequestTimeout
from healthscan_admin.server.manager import ServerHealthManager
from healthscan_admin.server.models import FALLBACK_STATS, DatabaseStats, HealthStatus, fallback_stats
from healthscan_admin.server.resilience import safe_request, with_retry
from healthscan_admin.server.stats import StatsFetcher, parse_stats
from healthscan_admin.server.transport import BackendClient

__all__ = [
    "FALLBACK_STATS",
    "BackendClient",
    "DatabaseStats",
    "ErrorKind",
    "HealthCache",
    "HealthChecker",
    "HealthStatus",
    "HttpStatusError",
    "NetworkError",
    "RequestError",
    "RequestTimeout",
    "ServerHealthManager",
    "StatsFetcher",
    "fallback_stats",
    "parse_stats",
    "safe_request",
    "with_retry",
]
