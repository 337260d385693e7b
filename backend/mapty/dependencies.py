"""FastAPI dependencies for the shared activity service."""
from typing import Optional

from fastapi import HTTPException

from mapty.config import settings
from mapty.database import SessionLocal
from mapty.services.activity import ActivityService
from mapty.services.geolocation import StaticLocationProvider
from mapty.services.map_renderer import MarkerBoard
from mapty.services.persistence import SqlBlobStorage, WorkoutRepository

_service: Optional[ActivityService] = None


def build_activity_service() -> ActivityService:
    """Wire the service to the database, the marker board and the configured home location."""
    return ActivityService(
        repository=WorkoutRepository(SqlBlobStorage(SessionLocal), key=settings.STORAGE_KEY),
        renderer=MarkerBoard(default_zoom=settings.DEFAULT_ZOOM),
        geolocation=StaticLocationProvider(settings.home_location),
        default_zoom=settings.DEFAULT_ZOOM,
    )


def set_activity_service(service: Optional[ActivityService]) -> None:
    global _service
    _service = service


def get_activity_service() -> ActivityService:
    """
    Get the process-wide activity service.

    Raises HTTPException if the application has not finished starting up.
    """
    if _service is None:
        raise HTTPException(
            status_code=503,
            detail="Service is starting up. Please retry."
        )
    return _service
