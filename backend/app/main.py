"""
FastAPI Application Entry Point.

This is the main application file for the Trail Safety Backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from backend.app.core.config import settings
from backend.app.api.v1.router import router as api_router
from backend.app.core.observability import ObservabilityMiddleware, configure_logging
from backend.app.core.redis_client import close_redis, ping_redis
from backend.app.db.session import engine, Base
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from backend.app.models.user import User  # noqa: F401
from backend.app.models.emergency_contact import EmergencyContact  # noqa: F401
from backend.app.models.trip import Trip  # noqa: F401
from backend.app.models.location_update import LocationUpdate  # noqa: F401

configure_logging(settings.log_level)
logger = logging.getLogger("trailsafe")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Closes the Redis connection on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if not settings.sms_configured:
        logger.warning("Twilio credentials missing - SMS notifications are disabled")
    logger.info("Application running", extra={"app_name": settings.app_name})
    yield
    await close_redis()
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Trip tracking with SMS safety notifications to an emergency contact",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and dependency reachability
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": await ping_redis(),
        "sms_configured": settings.sms_configured,
    }


app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Trail Safety Backend API",
        "docs": "/docs",
        "health": "/health",
    }
