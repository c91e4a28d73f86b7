"""Background health monitoring loop."""

from __future__ import annotations

import asyncio
import logging

from healthscan_admin.server.manager import ServerHealthManager

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Periodically re-probes the backend once the cached status has gone stale."""

    def __init__(self, manager: ServerHealthManager) -> None:
        self._manager = manager
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval: float | None = None) -> None:
        if self.running:
            logger.info("Health monitoring already running, skipping duplicate start")
            return
        if interval is None:
            interval = self._manager.config.health.monitor_interval
        if interval <= 0:
            raise ValueError(f"monitor interval must be positive, got {interval}")
        self._task = asyncio.create_task(self._run(interval), name="health-monitor")
        logger.info("Started server health monitoring (%.0fs interval)", interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped server health monitoring")

    async def _run(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.tick()

    async def tick(self) -> None:
        """Probe only when there is no fresh cached status."""
        if self._manager.server_status() != "unknown":
            return
        try:
            await self._manager.check_health()
        except Exception:
            logger.exception("Background health check error")
