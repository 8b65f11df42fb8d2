import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from leave_api.api.deps import LifecycleDep
from leave_api.config import get_settings
from leave_api.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_PROBE_KEY = "health:probe"


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded", "error"]
    database: Literal["ok", "error"]
    cache: Literal["ok", "error"]
    version: str
    environment: str


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep, ctx: LifecycleDep) -> HealthResponse:
    """Report database and cache connectivity.

    A cache outage only degrades reports, so the service stays "degraded"
    rather than "error" unless the database is also down.
    """
    settings = get_settings()
    database: Literal["ok", "error"] = "ok"
    cache: Literal["ok", "error"] = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        database = "error"

    try:
        await ctx.cache.get(_PROBE_KEY)
    except Exception:
        logger.exception("Health check: cache connectivity failed")
        cache = "error"

    status: Literal["ok", "degraded", "error"] = "ok"
    if database == "error" and cache == "error":
        status = "error"
    elif database == "error" or cache == "error":
        status = "degraded"

    return HealthResponse(
        status=status,
        database=database,
        cache=cache,
        version=settings.app_version,
        environment=settings.environment,
    )
