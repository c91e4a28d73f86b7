"""Connectivity probe with caching and graceful degradation."""

from __future__ import annotations

import logging
import time

from healthscan_admin.config.models import BackendConfig
from healthscan_admin.server.cache import HealthCache
from healthscan_admin.server.errors import HttpStatusError, error_kind, error_message, is_quiet
from healthscan_admin.server.models import HealthStatus
from healthscan_admin.server.transport import BackendClient

logger = logging.getLogger(__name__)


class HealthChecker:
    """Probes the ping endpoint, then the health endpoint if ping is unreachable."""

    def __init__(self, client: BackendClient, cache: HealthCache, config: BackendConfig | None = None) -> None:
        self._client = client
        self._cache = cache
        self._config = config or client.config

    async def check_health(self, timeout: float = 5.0) -> HealthStatus:
        """Return the cached status, or probe the backend. Never raises."""
        cached = self._cache.get()
        if cached is not None:
            return cached

        start = time.monotonic()
        try:
            resp = await self._client.get_with_fallback(
                self._config.ping_endpoint,
                self._config.health_endpoint,
                timeout,
            )
            if not resp.is_success:
                raise HttpStatusError(resp.status_code, resp.reason_phrase)
            resp.json()
            elapsed = round((time.monotonic() - start) * 1000)
            status = HealthStatus.ok(timestamp=self._cache.now(), response_time_ms=elapsed)
            logger.info("Server health check passed (%dms)", elapsed)
        except Exception as exc:
            if is_quiet(exc):
                logger.debug("Server unreachable: %s", exc)
            else:
                logger.warning("Server health check failed: %s", error_message(exc))
            status = HealthStatus.failed(
                timestamp=self._cache.now(),
                error=error_message(exc),
                error_kind=error_kind(exc),
                status_code=exc.status_code if isinstance(exc, HttpStatusError) else None,
            )

        self._cache.set(status)
        return status
