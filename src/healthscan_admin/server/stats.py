"""Database statistics fetcher tolerant of several backend response shapes.

The backend has returned stats in three layouts over time. Each layout has a
parser that returns ``None`` when the payload is not in its shape; the fetcher
tries them in order and keeps the first match:

* nested: ``{"stats": {"totalRecords": ..., "categoryBreakdown": {...}, ...}}``
* flat: ``{"totalRecords": ..., "categoryBreakdown": {...}, ...}``
* legacy: one counter per category, ``{"nutrients": 10, "products": 5, ...}``
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional

from healthscan_admin.config.models import BackendConfig
from healthscan_admin.server.errors import HttpStatusError, error_message, is_quiet
from healthscan_admin.server.models import DatabaseStats, fallback_stats
from healthscan_admin.server.transport import BackendClient

logger = logging.getLogger(__name__)

LEGACY_CATEGORIES = (
    "nutrients",
    "products",
    "ingredients",
    "pollutants",
    "parasites",
    "meals",
    "scans",
    "waitlist",
)

StatsParser = Callable[[Any], Optional[DatabaseStats]]


def _count(value: Any) -> int:
    return int(value or 0)


def _from_wire(data: Mapping[str, Any]) -> DatabaseStats:
    breakdown = data.get("categoryBreakdown") or {}
    return DatabaseStats(
        total_records=_count(data.get("totalRecords")),
        category_breakdown={str(k): _count(v) for k, v in breakdown.items()},
        recent_activity=_count(data.get("recentActivity")),
        data_quality=_count(data.get("dataQuality")),
    )


def parse_nested(data: Any) -> Optional[DatabaseStats]:
    if not isinstance(data, Mapping):
        return None
    nested = data.get("stats")
    if not isinstance(nested, Mapping):
        return None
    return _from_wire(nested)


def parse_flat(data: Any) -> Optional[DatabaseStats]:
    # totalRecords is not reconciled against categoryBreakdown here
    if not isinstance(data, Mapping) or "totalRecords" not in data:
        return None
    return _from_wire(data)


def parse_legacy(data: Any) -> Optional[DatabaseStats]:
    if not isinstance(data, Mapping) or not any(key in data for key in LEGACY_CATEGORIES):
        return None
    breakdown = {key: _count(data.get(key)) for key in LEGACY_CATEGORIES}
    total = sum(breakdown.values())
    return DatabaseStats(
        total_records=total,
        category_breakdown=breakdown,
        recent_activity=min(total, 100),
        data_quality=75 if total > 0 else 25,
    )


STATS_PARSERS: tuple[StatsParser, ...] = (parse_nested, parse_flat, parse_legacy)


def parse_stats(data: Any, parsers: tuple[StatsParser, ...] = STATS_PARSERS) -> Optional[DatabaseStats]:
    """Return the first parser's result that matches *data*, or None."""
    for parser in parsers:
        stats = parser(data)
        if stats is not None:
            return stats
    return None


class StatsFetcher:
    """Fetches :class:`DatabaseStats`, substituting a copy of ``FALLBACK_STATS`` on any failure."""

    def __init__(self, client: BackendClient, config: BackendConfig | None = None) -> None:
        self._client = client
        self._config = config or client.config

    async def fetch_stats(self, timeout: float = 8.0) -> DatabaseStats:
        try:
            resp = await self._client.get_with_fallback(
                self._config.stats_endpoint,
                self._config.fallback_stats_endpoint,
                timeout,
            )
            if resp.status_code == 404:
                logger.warning("Stats endpoints not available, using fallback data")
                return fallback_stats()
            if not resp.is_success:
                raise HttpStatusError(
                    resp.status_code,
                    resp.reason_phrase,
                    message=f"Stats request failed: {resp.status_code}",
                )
            stats = parse_stats(resp.json())
            if stats is None:
                logger.warning("Unexpected stats response format, using fallback")
                return fallback_stats()
            return stats
        except Exception as exc:
            if is_quiet(exc):
                logger.debug("Stats unavailable: %s", exc)
            else:
                logger.warning("Error fetching database stats: %s", error_message(exc))
            return fallback_stats()

    async def fetch_category_breakdown(self, timeout: float = 6.0) -> dict[str, int]:
        stats = await self.fetch_stats(timeout)
        return dict(stats.category_breakdown)
