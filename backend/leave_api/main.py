from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from redis.asyncio import Redis

from leave_api.api.health import router as health_router
from leave_api.api.router import api_router
from leave_api.config import get_settings
from leave_api.db import dispose_engine
from leave_api.exceptions import setup_exception_handlers
from leave_api.logging_config import configure_logging
from leave_api.middleware import setup_middleware
from leave_api.services.cache import RedisCache, set_cache
from leave_api.services.notification import RedisPushChannel, set_push_channel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Wire Redis-backed collaborators on startup and release pools on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)

    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    set_cache(RedisCache(redis))
    set_push_channel(RedisPushChannel(redis))
    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.app_name)
        await redis.aclose()
        await dispose_engine()


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
