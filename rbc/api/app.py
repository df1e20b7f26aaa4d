"""FastAPI application factory for the sweep webhook service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import Depends, FastAPI

from rbc.api.bearer_auth import require_bearer_auth, settings_from_app
from rbc.api.routes.health import router as health_router
from rbc.api.routes.sweeps import router as sweeps_router
from rbc.config.logging import init_logging
from rbc.config.settings import load_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from rbc.config.settings import SweepSettings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log service start and stop around the serving window."""
    settings = settings_from_app(app)
    logger.info(
        "Starting RBC webhook (api_url=%s, namespace=%s, tls_mode=%s)",
        settings.api_url,
        settings.namespace,
        settings.tls_mode,
    )
    if settings.service_token is None:
        logger.warning("No service token configured; /sweeps rejects every call")
    try:
        yield
    finally:
        logger.info("Shutting down RBC webhook")


def create_app(settings: SweepSettings | None = None) -> FastAPI:
    """Create and configure a new FastAPI application instance."""
    resolved = load_settings() if settings is None else settings
    init_logging(resolved.log_level)

    app = FastAPI(
        title="RBC",
        description="Rogue Build Canceller",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = resolved

    app.include_router(health_router)
    app.include_router(
        sweeps_router,
        dependencies=[Depends(require_bearer_auth)],
    )
    return app
