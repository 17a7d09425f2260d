"""
FastAPI application entrypoint for the Trakt votes gateway.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from votes_gateway.api.routes import router
from votes_gateway.core.config import configuration_warnings, get_settings
from votes_gateway.core.logging import configure_logging
from votes_gateway.dependencies import get_redis_connection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    for warning in configuration_warnings(settings):
        logger.warning(warning)
    logger.info("Add-on available at %s/manifest.json", settings.addon_base_url)

    yield

    connection = get_redis_connection()
    if connection is not None:
        await connection.aclose()
        logger.info("Redis connection closed")


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Trakt Votes Gateway",
        version="1.0.0",
        description="Stremio add-on that records votes as Trakt ratings.",
        lifespan=lifespan,
    )
    # Stremio fetches add-on resources cross-origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
