"""Health check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..core.config import settings
from ..core.database import get_db, ping
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])

DB_DEPENDENCY = Depends(get_db)


async def check_database(db: AsyncSession) -> str:
    """Run a trivial query; returns "ok" or "unavailable"."""
    try:
        await ping(db)
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return "unavailable"
    return "ok"


@router.post("/ping", response_model=HealthResponse)
async def health_ping(db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """
    Health check endpoint.

    Returns current service status, timestamp and database reachability.
    """
    database = await check_database(db)
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY if database == "ok" else HealthStatus.DEGRADED,
        service=settings.service_name,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        checks={"database": database},
    )

    logger.debug(
        "Health check requested",
        extra={
            "status": response_data.status.value,
            "timestamp": response_data.timestamp.isoformat()
        }
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
