"""Data models for server health and database statistics."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Literal, Optional

from healthscan_admin.server.errors import ErrorKind

StatusSummary = Literal["healthy", "unhealthy", "unknown"]


@dataclass(frozen=True)
class HealthStatus:
    """Outcome of one connectivity probe.

    A status is either healthy (``fallback_active`` false, ``response_time_ms`` set)
    or failed (``fallback_active`` true, ``error`` set). Use :meth:`ok` and
    :meth:`failed` rather than the raw constructor.
    """

    healthy: bool
    timestamp: int  # epoch ms
    fallback_active: bool
    response_time_ms: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    def __post_init__(self) -> None:
        if self.healthy:
            if self.fallback_active or self.response_time_ms is None or self.error is not None:
                raise ValueError("healthy status requires response_time_ms and no error or fallback")
        elif not self.fallback_active or not self.error:
            raise ValueError("failed status requires an error and fallback_active")

    @classmethod
    def ok(cls, timestamp: int, response_time_ms: int) -> HealthStatus:
        return cls(healthy=True, timestamp=timestamp, fallback_active=False, response_time_ms=response_time_ms)

    @classmethod
    def failed(
        cls,
        timestamp: int,
        error: str,
        error_kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: Optional[int] = None,
    ) -> HealthStatus:
        return cls(
            healthy=False,
            timestamp=timestamp,
            fallback_active=True,
            error=error,
            error_kind=error_kind,
            status_code=status_code,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "timestamp": self.timestamp,
            "responseTimeMs": self.response_time_ms,
            "error": self.error,
            "fallbackActive": self.fallback_active,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "statusCode": self.status_code,
        }


@dataclass(frozen=True)
class DatabaseStats:
    """Aggregate record counts shown on the admin dashboard.

    ``is_fallback`` marks the static stand-in served when the backend could
    not provide real numbers; it does not take part in equality.
    """

    total_records: int
    category_breakdown: Mapping[str, int] = field(default_factory=dict)
    recent_activity: int = 0
    data_quality: int = 0
    is_fallback: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.total_records < 0 or self.recent_activity < 0:
            raise ValueError("record counts must be non-negative")
        if not 0 <= self.data_quality <= 100:
            raise ValueError(f"data_quality out of range: {self.data_quality}")
        for name, count in self.category_breakdown.items():
            if count < 0:
                raise ValueError(f"negative count for category {name!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "categoryBreakdown": dict(self.category_breakdown),
            "recentActivity": self.recent_activity,
            "dataQuality": self.data_quality,
        }


FALLBACK_STATS = DatabaseStats(
    total_records=0,
    category_breakdown=MappingProxyType(
        {
            "nutrients": 0,
            "products": 0,
            "ingredients": 0,
            "pollutants": 0,
            "parasites": 0,
            "meals": 0,
            "scans": 0,
        }
    ),
    recent_activity=0,
    data_quality=85,
    is_fallback=True,
)


def fallback_stats() -> DatabaseStats:
    """A caller-owned copy of ``FALLBACK_STATS``."""
    return replace(FALLBACK_STATS, category_breakdown=dict(FALLBACK_STATS.category_breakdown))
