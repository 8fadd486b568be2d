"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from .core.cache import create_cache
from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    STORE_UNAVAILABLE_ERRORS,
    ProblemDetailsException,
    generic_exception_handler,
    integrity_error_handler,
    problem_details_handler,
    store_error_handler,
)
from .core.mapping import create_mapper
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_structured_logging,
    setup_tracing,
)
from .routers import auth, booking, dashboard, flights, health, metrics, users
from .services.events import create_booking_events
from .workers import CachePurgeWorker, WorkerManager

# Configure structured logging; module loggers render through structlog
setup_structured_logging()

logger = logging.getLogger(__name__)


def init_state(app: FastAPI) -> None:
    """Attach the process-wide cache, mapper and event registry to the app."""
    app.state.cache = create_cache(
        enabled=settings.cache_enabled,
        sliding_expiration=settings.cache_sliding_expiration_seconds,
    )
    app.state.mapper = create_mapper()
    app.state.booking_events = create_booking_events()
    app.state.workers = WorkerManager([
        CachePurgeWorker(app.state.cache, interval_seconds=settings.cache_purge_interval_seconds),
    ])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        # Setup observability
        setup_tracing(SERVICE_NAME)
        instrument_sqlalchemy(engine)
        logger.info("Observability setup completed")

        # Initialize database
        await init_db()
        logger.info("Database initialized successfully")

        init_state(app)

        # Start background workers
        await app.state.workers.start_all()
        logger.info("Background workers started successfully")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down FastAPI application")

    try:
        await app.state.workers.stop_all()
        logger.info("Background workers stopped")

        app.state.cache.clear()

        # Close database connections
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}", exc_info=True)

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Airline Booking API",
        description="Flight catalogue and booking API with a lookaside cache in front of the database",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Setup custom middleware
    setup_middleware(app, enable_logging=True)

    # Instrument FastAPI with OpenTelemetry
    instrument_fastapi(app)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    for error_type in STORE_UNAVAILABLE_ERRORS:
        app.add_exception_handler(error_type, store_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Health check endpoint (inline)
    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is healthy and responsive",
        response_model=dict,
    )
    async def health_check():
        """
        Health check endpoint that returns service status.

        Returns:
            dict: Health status information
        """
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": settings.environment,
            "debug": settings.debug,
        }

    # Readiness check endpoint (inline)
    @app.get(
        "/ready",
        tags=["Health"],
        summary="Readiness Check",
        description="Check that the database answers and the cache is attached",
        response_model=dict,
        responses={503: {"description": "A dependency is not ready"}},
    )
    async def readiness_check(request: Request):
        """
        Readiness check endpoint that verifies service dependencies.

        Returns:
            dict: Readiness status information, with 503 when a check fails
        """
        checks = {"database": "ok", "cache": "ok"}

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except STORE_UNAVAILABLE_ERRORS as e:
            logger.warning("Readiness check failed: database", extra={"error": str(e)})
            checks["database"] = "unavailable"

        if getattr(request.app.state, "cache", None) is None:
            checks["cache"] = "missing"

        ready = all(value == "ok" for value in checks.values())
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if ready else "not_ready",
                "service": SERVICE_NAME,
                "checks": checks,
            },
        )

    # Info endpoint (inline)
    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        description="Get detailed information about the service",
        response_model=dict,
    )
    async def service_info():
        """
        Service information endpoint.

        Returns:
            dict: Detailed service information
        """
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Flight catalogue and booking API",
            "environment": settings.environment,
            "debug": settings.debug,
            "features": {
                "authentication": True,
                "lookaside_cache": settings.cache_enabled,
                "cache_sliding_expiration_seconds": settings.cache_sliding_expiration_seconds,
                "tracing": True,
                "problem_details": True,
            },
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
                "redoc": "/redoc" if settings.debug else None,
            },
        }

    # Register API routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(flights.router)
    app.include_router(users.router)
    app.include_router(booking.router)
    app.include_router(dashboard.router)
    app.include_router(metrics.router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "airline.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
