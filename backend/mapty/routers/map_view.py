"""Map router exposing the marker board to the Leaflet frontend."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mapty.dependencies import get_activity_service
from mapty.services.activity import ActivityService

router = APIRouter(prefix="/api/map", tags=["map"])


class LocationUpdate(BaseModel):
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")


@router.get("")
async def get_map_state(service: ActivityService = Depends(get_activity_service)):
    """Get the map center, zoom and every marker currently on the map."""
    return service.renderer.to_dict()


@router.post("/location")
async def set_location(
    update: LocationUpdate,
    service: ActivityService = Depends(get_activity_service),
):
    """
    Report the user's position from the browser.

    Opens the map on first call (drawing markers for stored workouts); later
    calls just recenter it.
    """
    service.set_location((update.lat, update.lng))
    return service.renderer.to_dict()
