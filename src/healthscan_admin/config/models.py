"""Pydantic models for HealthScan admin configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BackendConfig(BaseModel):
    """Location and credentials of the Supabase Edge Function backend."""

    project_id: str = ""
    anon_key: str = ""  # public anon credential, supports ${ENV_VAR}
    function_slug: str = "make-server-ed0fe4c2"
    base_url: str = ""  # overrides the URL derived from project_id
    ping_endpoint: str = "/ping"
    health_endpoint: str = "/health"
    stats_endpoint: str = "/admin/stats"
    fallback_stats_endpoint: str = "/admin/database-stats"
    dashboard_origin: str = "http://localhost:3000"  # Origin sent on the CORS preflight check

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"https://{self.project_id}.supabase.co/functions/v1/{self.function_slug}"


class HealthConfig(BaseModel):
    """Health probe, stats and monitoring timings (seconds)."""

    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    timeout: float = Field(default=5.0, gt=0)
    stats_timeout: float = Field(default=8.0, gt=0)
    categories_timeout: float = Field(default=6.0, gt=0)
    monitor_interval: float = Field(default=300.0, gt=0)


class RetryConfig(BaseModel):
    """Exponential backoff settings for ad hoc retried operations."""

    max_retries: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=5.0, ge=0)


class AuthConfig(BaseModel):
    """Authentication configuration."""

    api_key: str = ""  # empty = auth disabled


class HealthScanConfig(BaseModel):
    """Root configuration model for .healthscan.yaml."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
