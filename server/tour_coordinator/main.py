"""Application factory for the tour coordinator API."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import settings
from .core.database import async_session_factory, close_db, engine, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import health, metrics, notification, rejection, staff, tour
from .routers.health import check_database

setup_structured_logging()

# Stdlib loggers used by services and routers share the configured level
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

API_ROUTERS = (health.router, tour.router, rejection.router, staff.router, notification.router, metrics.router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire up telemetry and the schema on startup; release connections on shutdown."""
    logger.info(
        "Starting tour coordinator",
        extra={"environment": settings.environment, "version": __version__}
    )

    setup_tracing(settings.service_name)
    setup_metrics(settings.service_name)
    instrument_sqlalchemy(engine)

    try:
        await init_db()
    except Exception as e:
        logger.error("Database initialization failed", extra={"error": str(e)}, exc_info=True)
        raise

    logger.info("Tour coordinator ready")

    yield

    logger.info("Shutting down tour coordinator")
    await close_db()


def _register_probes(app: FastAPI) -> None:
    """Liveness, readiness and service description endpoints."""

    @app.get("/health", tags=["Health"], summary="Liveness probe", response_model=dict)
    async def health_check():
        """Answers without touching the database."""
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": __version__,
            "environment": settings.environment,
        }

    @app.get("/ready", tags=["Health"], summary="Readiness probe", response_model=dict)
    async def readiness_check():
        """200 once the database answers, 503 until then."""
        async with async_session_factory() as session:
            database = await check_database(session)

        ready = database == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if ready else "not_ready",
                "service": settings.service_name,
                "checks": {"database": database},
            },
        )

    @app.get("/info", tags=["Info"], summary="Service information", response_model=dict)
    async def service_info():
        return {
            "service": settings.service_name,
            "version": __version__,
            "description": "Assigns guides and drivers to wildlife tours and tracks tour lifecycle",
            "environment": settings.environment,
            "features": {
                "optimistic_locking": True,
                "problem_details": True,
                "tracing": bool(settings.otlp_endpoint),
            },
            "endpoints": {
                "tours": "/v1/tour",
                "staff": "/v1/staff",
                "notifications": "/v1/notification",
                "metrics": "/metrics",
                "docs": app.docs_url,
            },
        }


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Returns:
        FastAPI: Application with middleware, error handlers and routers attached
    """
    app = FastAPI(
        title="Wildlife Tour Coordinator API",
        description="Tour lifecycle and guide/driver availability coordination for wildlife safaris",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )
    setup_middleware(app, enable_logging=True)
    instrument_fastapi(app)

    # Every error leaves as application/problem+json
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    _register_probes(app)
    for router in API_ROUTERS:
        app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tour_coordinator.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
