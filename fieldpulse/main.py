"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fieldpulse.config import settings
from fieldpulse.api.rate_limit import limiter
from fieldpulse.middleware.error_handler import ErrorHandlerMiddleware
from fieldpulse.api.v1.routers import alerts, indices, parcels, prescriptions

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Alert config: ndvi_drop_threshold={settings.ndvi_drop_threshold}, "
                f"health_decline_threshold={settings.health_decline_threshold}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} generations/minute")

    yield

    # Shutdown
    from fieldpulse.infrastructure.observation_store_client import get_store_client
    logger.info("Shutting down application...")
    client = get_store_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Crop Health Analytics API

    This API turns per-parcel vegetation index observations and periodic health
    assessments into trends, alerts and variable-rate prescription maps.

    ## Features

    - **Trend Aggregation**: Windowed health averages, period-over-period deltas
      and index statistics
    - **Health Classification**: NDVI bands and stress indicator severities
    - **Threshold Alerts**: NDVI drop and health decline detection with an
      active -> acknowledged -> resolved lifecycle
    - **Prescription Maps**: Management zones with severity-driven application
      rates, exportable as CSV
    - **Rate Limiting**: Protects map generation from abuse

    ## Zone Generation

    1. A high performance zone covers the area outside all problem areas
    2. Each problem area becomes a zone rated by its severity
    3. Application rates come from a per map type rate table
    4. Zone areas must sum to 100%
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(parcels.router, prefix="/api/v1")
app.include_router(alerts.router, prefix="/api/v1")
app.include_router(prescriptions.router, prefix="/api/v1")
app.include_router(indices.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
