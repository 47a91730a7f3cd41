from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.core.config import settings
from app.core.services.container import ServiceContainer, build_services
from app.modules.api.router import router as api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(
    services: Optional[ServiceContainer] = None,
    *,
    start_probe: bool = True,
) -> FastAPI:
    """Build the FastAPI app around one set of offline sync services."""
    services = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = services.settings
        logger.info(f"{config.APP_NAME} starting")
        logger.info(f"Movies service base URL: {config.MOVIES_API_BASE_URL}")
        logger.info(f"Movies service timeout: {config.MOVIES_API_TIMEOUT}s")
        logger.info(f"Offline data dir: {config.OFFLINE_DATA_DIR}")

        # Mirror and queue must be back in memory before the first request.
        services.movies.load()
        logger.info(
            "Loaded %d mirrored movies, %d pending operations",
            len(services.mirror),
            services.movies.pending_count(),
        )
        if start_probe:
            services.monitor.start_periodic_probe()
        try:
            yield
        finally:
            await services.monitor.stop_periodic_probe()

    app = FastAPI(title=services.settings.APP_NAME, lifespan=lifespan)
    app.state.services = services
    app.include_router(api_router, prefix="/api")

    @app.get("/healthz")
    def healthz():
        """Health check endpoint."""
        return {
            "ok": True,
            "app": services.settings.APP_NAME,
            "env": services.settings.APP_ENV,
            "movies_api_url": services.settings.MOVIES_API_BASE_URL,
            "network_status": services.monitor.get_status().value,
        }

    return app


app = create_app(build_services(settings))
