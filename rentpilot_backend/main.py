"""RentPilot backend - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import RentPilotException
from .core.logging import RequestIdMiddleware, get_logger, setup_logging, shutdown_logging
from .core.realtime import RealtimeHub
from .core.storage import build_storage

# Import routers
from .modules.analytics import router as analytics_router
from .modules.applications import router as applications_router
from .modules.auth import access_router
from .modules.auth import router as auth_router
from .modules.auth import ws_router as auth_ws_router
from .modules.documents import router as documents_router
from .modules.lease_management import router as leases_router
from .modules.messaging import router as messages_router
from .modules.messaging import ws_router as messages_ws_router
from .modules.notifications import router as notifications_router
from .modules.notifications import ws_router as notifications_ws_router
from .modules.property_management import router as properties_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging()
    logger.info("Starting RentPilot application...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug mode: {settings.app_debug}")
    yield
    # Shutdown
    logger.info("Shutting down RentPilot application...")
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description="Property management for independent landlords and their tenants",
    version=settings.api_version,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
    openapi_url="/api/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# Process-wide collaborators, reached through the Hub and Storage dependencies
app.state.realtime_hub = RealtimeHub()
app.state.storage = build_storage()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(RentPilotException)
async def rentpilot_exception_handler(request: Request, exc: RentPilotException):
    """Handle RentPilot-specific exceptions."""
    logger.warning(
        "Request failed",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
            "error": exc.message,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "error": exc.details or exc.message,
            "data": None,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc) if settings.app_debug else "Internal server error",
            "data": None,
        },
    )


# Health check endpoint
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.api_version,
        "env": settings.app_env,
    }


# Register routers with /api prefix
API_PREFIX = settings.api_prefix

# Session, profile and role gate
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(access_router, prefix=API_PREFIX)

# Properties, leases and applications
app.include_router(properties_router, prefix=API_PREFIX)
app.include_router(leases_router, prefix=API_PREFIX)
app.include_router(applications_router, prefix=API_PREFIX)
app.include_router(analytics_router, prefix=API_PREFIX)

# Messaging, notifications and documents
app.include_router(messages_router, prefix=API_PREFIX)
app.include_router(notifications_router, prefix=API_PREFIX)
app.include_router(documents_router, prefix=API_PREFIX)

# Realtime subscriptions
app.include_router(auth_ws_router, prefix=API_PREFIX)
app.include_router(messages_ws_router, prefix=API_PREFIX)
app.include_router(notifications_ws_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentpilot_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
