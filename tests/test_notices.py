"""Tests for status badges and failure notices."""

from __future__ import annotations

import pytest

from healthscan_admin.server.errors import ErrorKind
from healthscan_admin.server.models import HealthStatus
from healthscan_admin.server.notices import describe_failure, status_badge


def _failed(kind: ErrorKind, status_code: int | None = None) -> HealthStatus:
    return HealthStatus.failed(timestamp=1, error="failure", error_kind=kind, status_code=status_code)


class TestStatusBadge:
    def test_unknown(self):
        assert status_badge(None) == "Unknown"

    def test_healthy(self):
        assert status_badge(HealthStatus.ok(timestamp=1, response_time_ms=3)) == "Healthy"

    def test_http_failure_is_unhealthy(self):
        assert status_badge(_failed(ErrorKind.HTTP, 500)) == "Unhealthy"

    @pytest.mark.parametrize("kind", [ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.UNKNOWN])
    def test_other_failures_are_fallback_mode(self, kind):
        assert status_badge(_failed(kind)) == "Fallback Mode"


class TestDescribeFailure:
    def test_healthy_has_no_notice(self):
        assert describe_failure(HealthStatus.ok(timestamp=1, response_time_ms=3)) is None
        assert describe_failure(None) is None

    @pytest.mark.parametrize(
        "status, category, title, action",
        [
            (_failed(ErrorKind.HTTP, 401), "auth", "Authentication Required", "Refresh Page"),
            (_failed(ErrorKind.HTTP, 403), "permission", "Access Denied", "Contact Support"),
            (_failed(ErrorKind.TIMEOUT), "timeout", "Connection Issue", "Retry"),
            (_failed(ErrorKind.NETWORK), "network", "Connection Issue", "Retry"),
            (_failed(ErrorKind.HTTP, 500), "server", "Server Issue", "Retry"),
            (_failed(ErrorKind.UNKNOWN), "server", "Server Issue", "Retry"),
        ],
    )
    def test_categories(self, status, category, title, action):
        notice = describe_failure(status)
        assert notice.category == category
        assert notice.title == title
        assert notice.action == action

    def test_server_message_includes_error(self):
        notice = describe_failure(
            HealthStatus.failed(timestamp=1, error="Server returned 502: Bad Gateway", error_kind=ErrorKind.HTTP, status_code=502)
        )
        assert "502" in notice.message
