"""User-facing badge and failure explanations derived from a health status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from healthscan_admin.server.errors import ErrorKind
from healthscan_admin.server.models import HealthStatus

FailureCategory = Literal["auth", "permission", "timeout", "network", "server"]
Badge = Literal["Healthy", "Unhealthy", "Fallback Mode", "Unknown"]


@dataclass(frozen=True)
class FailureNotice:
    category: FailureCategory
    title: str
    message: str
    action: str


def status_badge(status: Optional[HealthStatus]) -> Badge:
    if status is None:
        return "Unknown"
    if status.healthy:
        return "Healthy"
    if status.error_kind == ErrorKind.HTTP:
        return "Unhealthy"
    return "Fallback Mode"


def describe_failure(status: Optional[HealthStatus]) -> Optional[FailureNotice]:
    """Explain a failed status and suggest what the user can do about it."""
    if status is None or status.healthy:
        return None
    if status.status_code == 401:
        return FailureNotice(
            category="auth",
            title="Authentication Required",
            message="Your session has expired or is invalid. Refresh the page to sign in again.",
            action="Refresh Page",
        )
    if status.status_code == 403:
        return FailureNotice(
            category="permission",
            title="Access Denied",
            message="This account does not have admin access to the server.",
            action="Contact Support",
        )
    if status.error_kind == ErrorKind.TIMEOUT:
        return FailureNotice(
            category="timeout",
            title="Connection Issue",
            message="The server took too long to respond. Showing cached or default data.",
            action="Retry",
        )
    if status.error_kind == ErrorKind.NETWORK:
        return FailureNotice(
            category="network",
            title="Connection Issue",
            message="Unable to reach the server. Check your connection; showing cached or default data.",
            action="Retry",
        )
    return FailureNotice(
        category="server",
        title="Server Issue",
        message=f"The server reported a problem: {status.error}",
        action="Retry",
    )
