"""Server health manager — wires cache, checker and stats fetcher from config."""

from __future__ import annotations

import asyncio

from healthscan_admin.config.models import HealthScanConfig
from healthscan_admin.server.cache import HealthCache
from healthscan_admin.server.checker import HealthChecker
from healthscan_admin.server.models import DatabaseStats, HealthStatus, StatusSummary
from healthscan_admin.server.stats import StatsFetcher
from healthscan_admin.server.transport import BackendClient


class ServerHealthManager:
    """One backend's health state: a cache shared by its checker, plus a stats fetcher."""

    def __init__(
        self,
        config: HealthScanConfig,
        cache: HealthCache | None = None,
        client: BackendClient | None = None,
    ) -> None:
        self._config = config
        self.cache = cache or HealthCache(ttl_ms=int(config.health.cache_ttl_seconds * 1000))
        self.client = client or BackendClient(config.backend)
        self.checker = HealthChecker(self.client, self.cache, config.backend)
        self.fetcher = StatsFetcher(self.client, config.backend)

    @property
    def config(self) -> HealthScanConfig:
        return self._config

    async def check_health(self, timeout: float | None = None) -> HealthStatus:
        if timeout is None:
            timeout = self._config.health.timeout
        return await self.checker.check_health(timeout)

    async def fetch_stats(self, timeout: float | None = None) -> DatabaseStats:
        if timeout is None:
            timeout = self._config.health.stats_timeout
        return await self.fetcher.fetch_stats(timeout)

    async def fetch_category_breakdown(self, timeout: float | None = None) -> dict[str, int]:
        if timeout is None:
            timeout = self._config.health.categories_timeout
        return await self.fetcher.fetch_category_breakdown(timeout)

    def server_status(self) -> StatusSummary:
        return self.cache.status_summary()

    def is_using_fallback(self) -> bool:
        return self.cache.is_using_fallback()

    def clear_cache(self) -> None:
        self.cache.clear()

    async def refresh(self, timeout: float | None = None) -> HealthStatus:
        """Drop the cached status and probe again."""
        self.clear_cache()
        return await self.check_health(timeout)

    def check_health_sync(self, timeout: float | None = None) -> HealthStatus:
        return asyncio.run(self.check_health(timeout))

    def fetch_stats_sync(self, timeout: float | None = None) -> DatabaseStats:
        return asyncio.run(self.fetch_stats(timeout))
