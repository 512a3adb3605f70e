"""
TalentPool - AI-Interviewed Talent Marketplace

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentpool.config.settings import get_settings
from talentpool.api.router import api_router
from talentpool.api.dependencies import cleanup, get_scoring_worker, get_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting TalentPool...")
    settings = get_settings()
    logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")

    await get_store().init()
    # Also reconciles interviews left in processing by a previous run
    await get_scoring_worker().start()

    yield

    # Shutdown
    logger.info("Shutting down TalentPool...")
    await cleanup()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title="TalentPool",
    description="AI-Interviewed Talent Marketplace",
    version=settings.app_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "ai_configured": settings.ai_configured,
        "voice_configured": bool(settings.vapi_api_key),
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
