"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from timekeeping.api.dependencies import DbSession
from timekeeping.models import Base

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Check API and database health."""
    db_status = "unhealthy"
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception:
        logger.exception("Database health check failed")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str
    missing_tables: list[str] = []


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(db: DbSession, response: Response) -> ReadinessResponse:
    """Ready once every table the API writes to exists."""
    try:
        conn = await db.connection()
        existing = set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
    except SQLAlchemyError:
        logger.exception("Readiness check could not reach the database")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="unavailable")

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.warning("Not ready; missing tables: %s", ", ".join(missing))
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not_ready", missing_tables=missing)
    return ReadinessResponse(status="ready")


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
