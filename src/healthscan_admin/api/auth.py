"""API key guard for the endpoints that make the server hit the backend on demand."""

from __future__ import annotations

import hmac
import logging

from fastapi import HTTPException, Request

from healthscan_admin.config.loader import has_placeholder

logger = logging.getLogger(__name__)

_CHALLENGE = {"WWW-Authenticate": 'Bearer realm="healthscan-admin"'}


def presented_key(request: Request) -> str:
    """The key sent as ``X-API-Key`` or, failing that, as an ``Authorization: Bearer`` token."""
    key = request.headers.get("X-API-Key", "").strip()
    if key:
        return key
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer":
        return token.strip()
    return ""


async def require_api_key(request: Request) -> None:
    """Reject the request unless it carries the configured ``auth.api_key``.

    Auth is disabled when no key is configured. A key that is still a
    ``${VAR}`` placeholder is a deployment mistake, not a secret, so it
    locks the endpoint with 503 instead of accepting the literal text.
    """
    expected = request.app.state.config.auth.api_key
    if not expected:
        return
    if has_placeholder(expected):
        logger.error("auth.api_key is an unresolved placeholder; refusing %s", request.url.path)
        raise HTTPException(status_code=503, detail="API key is not configured on the server")

    key = presented_key(request)
    if not key:
        raise HTTPException(status_code=401, detail="Missing API key", headers=_CHALLENGE)
    if not hmac.compare_digest(key.encode(), expected.encode()):
        client = request.client.host if request.client else "unknown"
        logger.warning("Rejected API key for %s from %s", request.url.path, client)
        raise HTTPException(status_code=401, detail="Invalid API key", headers=_CHALLENGE)
