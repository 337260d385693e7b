"""FastAPI application entry point."""
import logging
from pathlib import Path

from fastapi import FastAPI

from mapty import __version__
from mapty.config import settings
from mapty.database import init_db
from mapty.dependencies import build_activity_service, set_activity_service
from mapty.routers import activities, map_view

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Mapty",
    description="Log runs and rides on a map",
    version=__version__
)

# Register routers
app.include_router(activities.router)
app.include_router(map_view.router)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    # Ensure database directory exists
    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_path = Path(settings.DATABASE_URL.replace("sqlite:///", ""))
        db_path.parent.mkdir(parents=True, exist_ok=True)

    # Create database tables
    init_db()
    logger.info("✓ Database initialized")

    service = build_activity_service()
    service.start()
    set_activity_service(service)
    logger.info("✓ Running in %s mode", settings.ENVIRONMENT)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mapty.main:app", host="0.0.0.0", port=8080, reload=settings.is_development)
