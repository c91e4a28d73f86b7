"""Server diagnostic suite — configuration, connectivity, database and CORS checks."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from healthscan_admin.config.models import HealthScanConfig
from healthscan_admin.server.errors import HttpStatusError, NetworkError, RequestTimeout, error_message
from healthscan_admin.server.resilience import with_retry
from healthscan_admin.server.stats import parse_stats
from healthscan_admin.server.transport import BackendClient

DiagnosticStatus = Literal["pass", "fail", "warning"]

CONFIGURATION = "Configuration"
CONNECTIVITY = "Connectivity"
DATABASE = "Database"
CORS = "CORS"

_CORS_HEADERS = ("Access-Control-Allow-Origin", "Access-Control-Allow-Methods", "Access-Control-Allow-Headers")


@dataclass
class DiagnosticResult:
    """Outcome of one diagnostic test.

    ``solution`` is a suggested fix, set on failures and warnings where one is known.
    """

    test: str
    status: DiagnosticStatus
    message: str
    details: str | None = None
    category: str = "General"
    solution: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "test": self.test,
            "status": self.status,
            "message": self.message,
            "details": self.details,
            "solution": self.solution,
        }


@dataclass
class DiagnosticReport:
    results: list[DiagnosticResult] = field(default_factory=list)

    def add(
        self,
        test: str,
        status: DiagnosticStatus,
        message: str,
        details: str | None = None,
        *,
        category: str = "General",
        solution: str | None = None,
    ) -> None:
        self.results.append(
            DiagnosticResult(
                test=test,
                status=status,
                message=message,
                details=details,
                category=category,
                solution=solution,
            )
        )

    def count(self, status: DiagnosticStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    def by_category(self) -> dict[str, list[DiagnosticResult]]:
        """Results grouped by category, categories in the order they were first seen."""
        groups: dict[str, list[DiagnosticResult]] = {}
        for r in self.results:
            groups.setdefault(r.category, []).append(r)
        return groups

    @property
    def success(self) -> bool:
        return self.count("fail") == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "passed": self.count("pass"),
            "failed": self.count("fail"),
            "warnings": self.count("warning"),
            "results": [r.to_dict() for r in self.results],
        }


def _check_configuration(config: HealthScanConfig, report: DiagnosticReport) -> bool:
    backend = config.backend
    test = "Supabase Project ID"
    if backend.project_id:
        report.add(test, "pass", f"Project ID configured: {backend.project_id}", category=CONFIGURATION)
    elif backend.base_url:
        report.add(test, "pass", f"Explicit base URL configured: {backend.base_url}", category=CONFIGURATION)
    else:
        report.add(
            test,
            "fail",
            "Project ID is missing",
            category=CONFIGURATION,
            solution="Check that SUPABASE_URL is properly set in your environment",
        )

    test = "Supabase Public Key"
    if backend.anon_key:
        report.add(test, "pass", f"Public key configured ({len(backend.anon_key)} chars)", category=CONFIGURATION)
    else:
        report.add(
            test,
            "fail",
            "Public anon key is missing",
            category=CONFIGURATION,
            solution="Check that SUPABASE_ANON_KEY is properly set in your environment",
        )

    if report.success:
        return True
    report.add(
        "Overall Configuration",
        "fail",
        "Cannot run server tests without proper configuration",
        category=CONFIGURATION,
        solution="Ensure SUPABASE_URL and SUPABASE_ANON_KEY are properly configured",
    )
    return False


async def _check_health_endpoint(config: HealthScanConfig, client: BackendClient, report: DiagnosticReport) -> None:
    test = "Server Health Endpoint"

    async def attempt() -> httpx.Response:
        resp = await client.get(config.backend.health_endpoint, config.health.timeout)
        if not resp.is_success:
            raise HttpStatusError(resp.status_code, resp.reason_phrase)
        return resp

    try:
        resp = await with_retry(
            attempt,
            config.retry.max_retries,
            base_delay=config.retry.base_delay,
            max_delay=config.retry.max_delay,
        )
        data = resp.json()
        label = data.get("status", "healthy") if isinstance(data, dict) else "healthy"
        report.add(test, "pass", f"Server responding: {label}", category=CONNECTIVITY)
    except HttpStatusError as exc:
        report.add(
            test,
            "fail",
            f"Server returned error: {exc.status_code}",
            details=f"Status: {exc.status_code} {exc.reason}",
            category=CONNECTIVITY,
            solution="Check if the Supabase Edge Function is deployed and running",
        )
    except RequestTimeout as exc:
        report.add(
            test,
            "fail",
            "Server health check timed out",
            details=str(exc),
            category=CONNECTIVITY,
            solution="Check if the Supabase Edge Function is running and not overloaded",
        )
    except NetworkError as exc:
        report.add(
            test,
            "fail",
            "Cannot reach server",
            details=str(exc),
            category=CONNECTIVITY,
            solution="Check internet connection and verify Supabase Edge Function deployment",
        )
    except Exception as exc:
        report.add(
            test,
            "fail",
            f"Health check failed: {error_message(exc)}",
            category=CONNECTIVITY,
            solution="Check network connectivity and server configuration",
        )


async def _check_stats_endpoint(config: HealthScanConfig, client: BackendClient, report: DiagnosticReport) -> None:
    test = "Database Stats Endpoint"
    try:
        resp = await client.get(config.backend.fallback_stats_endpoint, config.health.stats_timeout)
        if not resp.is_success:
            report.add(
                test,
                "fail",
                f"Database stats failed: {resp.status_code}",
                details=resp.text[:200],
                category=DATABASE,
                solution="Check database connection and KV store configuration",
            )
            return
        stats = parse_stats(resp.json())
        if stats is None:
            report.add(test, "warning", "Unexpected stats response format", category=DATABASE)
            return
        report.add(test, "pass", f"Database accessible: {stats.total_records} total records", category=DATABASE)
    except Exception as exc:
        report.add(
            test,
            "fail",
            f"Database test failed: {error_message(exc)}",
            category=DATABASE,
            solution="Verify database connectivity and admin endpoint configuration",
        )


async def _check_cors(config: HealthScanConfig, client: BackendClient, report: DiagnosticReport) -> None:
    """Preflight the health endpoint. CORS problems are reported as warnings, never failures."""
    test = "CORS Configuration"
    try:
        resp = await client.preflight(
            config.backend.health_endpoint,
            config.backend.dashboard_origin,
            config.health.timeout,
        )
    except Exception as exc:
        report.add(
            test,
            "warning",
            "Could not test CORS configuration",
            details=error_message(exc),
            category=CORS,
            solution="Manually verify CORS headers are set correctly",
        )
        return

    allowed_origin = resp.headers.get("Access-Control-Allow-Origin")
    if resp.is_success and allowed_origin:
        report.add(
            test,
            "pass",
            "CORS headers properly configured",
            details=f"Allowed origin: {allowed_origin}",
            category=CORS,
        )
        return
    headers = {name: resp.headers.get(name) for name in _CORS_HEADERS}
    report.add(
        test,
        "warning",
        "CORS configuration may have issues",
        details=f"Response: {resp.status_code}, Headers: {json.dumps(headers)}",
        category=CORS,
        solution="Check server CORS configuration in the Edge Function",
    )


async def run_diagnostics(config: HealthScanConfig, client: BackendClient | None = None) -> DiagnosticReport:
    """Run the diagnostic suite in order, stopping early on missing configuration."""
    report = DiagnosticReport()
    if not _check_configuration(config, report):
        return report
    client = client or BackendClient(config.backend)
    await _check_health_endpoint(config, client, report)
    await _check_stats_endpoint(config, client, report)
    await _check_cors(config, client, report)
    return report
