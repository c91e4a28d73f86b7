"""Single-slot TTL cache for the latest health status."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Optional

from healthscan_admin.server.models import HealthStatus, StatusSummary

DEFAULT_TTL_MS = 300_000


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class HealthCache:
    """Holds the most recent :class:`HealthStatus` for ``ttl_ms`` milliseconds.

    Last write wins; there is no locking, callers share one event loop.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] | None = None) -> None:
        self.ttl_ms = ttl_ms
        self._clock = clock or _epoch_ms
        self._status: Optional[HealthStatus] = None

    def now(self) -> int:
        return self._clock()

    def get(self) -> Optional[HealthStatus]:
        status = self._status
        if status is None or self.now() - status.timestamp >= self.ttl_ms:
            return None
        return status

    def set(self, status: HealthStatus) -> None:
        self._status = status

    def clear(self) -> None:
        self._status = None

    def status_summary(self) -> StatusSummary:
        status = self.get()
        if status is None:
            return "unknown"
        return "healthy" if status.healthy else "unhealthy"

    def is_using_fallback(self) -> bool:
        return self._status.fallback_active if self._status is not None else False
