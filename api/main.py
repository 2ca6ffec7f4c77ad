"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, weights
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.database import get_engine, get_session_maker
from core.logging import setup_logging
from ingestion.extractors.asset_source import BundledAssetSource
from ingestion.loaders.league_repository import LeagueDirectoryRepository
from ingestion.notifier import RefreshNotifier
from ingestion.scheduler import WeightsScheduler
from ingestion.service import WeightsService
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Drop Weights Backend API",
    description="Loads bundled drop-weight assets and serves classified weights per league",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(weights.router)


@app.on_event("startup")
async def startup_event():
    """Build the weights service, run the initial load and start the scheduler"""
    logger.info("Starting Drop Weights Backend API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    session_factory = get_session_maker()
    service = WeightsService(
        session_factory=session_factory,
        asset_source=BundledAssetSource(),
        notifier=RefreshNotifier(),
        league_directory_factory=LeagueDirectoryRepository,
    )
    app.state.weights_service = service

    await service.initialize()

    scheduler = WeightsScheduler(service, session_factory)
    scheduler.start()
    app.state.scheduler = scheduler


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Drop Weights Backend API")
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.stop()
    await get_engine().dispose()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Drop Weights Backend API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "weights": "/weights/{game}?league=",
            "boss_items": "/weights/{game}/boss-items?league=",
            "status": "/weights/{game}/status",
            "reload": "/weights/{game}/reload"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
