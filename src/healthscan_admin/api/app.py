"""FastAPI application factory for the HealthScan admin status API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthscan_admin.api.routes import server
from healthscan_admin.config.loader import load_config
from healthscan_admin.config.models import HealthScanConfig
from healthscan_admin.server.manager import ServerHealthManager


def create_app(config: HealthScanConfig | None = None) -> FastAPI:
    app = FastAPI(title="HealthScan Admin", version="0.1.0", description="Server health and database stats")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config is None:
        try:
            config = load_config()
        except (FileNotFoundError, ValueError):
            # No config file (e.g. testing): run against defaults
            config = HealthScanConfig()

    app.state.config = config
    app.state.manager = ServerHealthManager(config)

    @app.get("/health", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(server.router, prefix="/api")

    return app


app = create_app()
