"""Server health and database stats endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from healthscan_admin.api.auth import require_api_key
from healthscan_admin.server.manager import ServerHealthManager
from healthscan_admin.server.models import HealthStatus
from healthscan_admin.server.notices import describe_failure, status_badge

router = APIRouter(prefix="/server", tags=["server"])


def _get_manager(request: Request) -> ServerHealthManager:
    return request.app.state.manager


def _health_payload(manager: ServerHealthManager, status: HealthStatus) -> Dict[str, Any]:
    notice = describe_failure(status)
    return {
        **status.to_dict(),
        "status": manager.server_status(),
        "badge": status_badge(status),
        "notice": asdict(notice) if notice else None,
    }


@router.get("/health")
async def server_health(manager: ServerHealthManager = Depends(_get_manager)) -> Dict[str, Any]:
    status = await manager.check_health()
    return _health_payload(manager, status)


@router.post("/health/refresh", dependencies=[Depends(require_api_key)])
async def refresh_server_health(manager: ServerHealthManager = Depends(_get_manager)) -> Dict[str, Any]:
    status = await manager.refresh()
    return _health_payload(manager, status)


@router.get("/stats")
async def database_stats(manager: ServerHealthManager = Depends(_get_manager)) -> Dict[str, Any]:
    stats = await manager.fetch_stats()
    return stats.to_dict()


@router.get("/stats/categories")
async def category_breakdown(manager: ServerHealthManager = Depends(_get_manager)) -> Dict[str, int]:
    return await manager.fetch_category_breakdown()
