# main.py
"""
GymTracker Pro - Server.

Stub FastAPI app next to the client auth core. No business routes are
registered; only root and health endpoints.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from settings import settings
from app.services.anamnesis import AnamnesisService
from app.services.auth_factory import create_auth_backend
from app.services.supabase_auth import SupabaseAuthAdapter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR
            ),
        ],
    )
    logger.info(f"Sentry initialized ({settings.SENTRY_ENVIRONMENT})")
else:
    logger.warning("Sentry DSN not configured - error tracking disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting GymTracker Pro server...")
    app.state.auth_backend = await create_auth_backend(settings)
    app.state.anamnesis = AnamnesisService.for_backend(
        app.state.auth_backend,
        key=settings.ANAMNESIS_KEY
    )

    yield

    await app.state.auth_backend.close()
    logger.info("GymTracker Pro server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="GymTracker Pro",
    version="1.0.0",
    description="Personal fitness tracking",
    lifespan=lifespan
)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint - reports the configured auth mode."""
    return {
        "status": "ok",
        "environment": settings.ENV,
        "auth_mode": settings.auth_mode,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0"
    }


@app.get("/health/detailed")
async def health_check_detailed():
    """Detailed health check with Supabase connectivity test."""
    backend = getattr(app.state, "auth_backend", None)
    if not isinstance(backend, SupabaseAuthAdapter):
        return {
            "status": "ok",
            "auth_mode": settings.auth_mode,
            "provider_connected": None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    result = await backend.healthcheck()
    if not result["ok"]:
        logger.error(f"Health check failed: {result['message']}")
    return {
        "status": "ok" if result["ok"] else "degraded",
        "auth_mode": settings.auth_mode,
        "provider_connected": result["ok"],
        "message": result["message"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Root endpoint
@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "GymTracker Pro",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
