"""Authenticated HTTP access to the Edge Function backend."""

from __future__ import annotations

import asyncio
import logging

import httpx

from healthscan_admin.config.models import BackendConfig
from healthscan_admin.server.errors import NetworkError, RequestTimeout

logger = logging.getLogger(__name__)


class BackendClient:
    """Issues requests against the backend with a per-attempt deadline.

    Connection-level failures surface as :class:`NetworkError` or
    :class:`RequestTimeout`. HTTP error statuses are returned, not raised.
    """

    def __init__(self, config: BackendConfig) -> None:
        self.config = config
        self.base_url = config.resolved_base_url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.anon_key}",
            "Content-Type": "application/json",
        }

    async def get(self, path: str, timeout: float) -> httpx.Response:
        return await self._send("get", path, timeout, self._headers())

    async def preflight(self, path: str, origin: str, timeout: float) -> httpx.Response:
        """Send the CORS preflight a browser would issue before an authenticated GET of *path*."""
        headers = {
            "Origin": origin,
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type, Authorization",
        }
        return await self._send("options", path, timeout, headers)

    async def _send(self, method: str, path: str, timeout: float, headers: dict[str, str]) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                send = getattr(client, method)
                return await asyncio.wait_for(send(url, headers=headers), timeout=timeout)
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise RequestTimeout(timeout) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Connection failed: {exc}") from exc

    async def get_with_fallback(self, primary: str, secondary: str, timeout: float) -> httpx.Response:
        """GET *primary*; if it cannot be reached, GET *secondary* with a fresh *timeout*."""
        try:
            return await self.get(primary, timeout)
        except (NetworkError, RequestTimeout) as exc:
            logger.debug("GET %s unreachable (%s), trying %s", primary, exc, secondary)
            return await self.get(secondary, timeout)
