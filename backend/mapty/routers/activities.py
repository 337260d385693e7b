"""Activities router for logging, listing, focusing and deleting workouts."""
from typing import Any, Dict, Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from mapty.dependencies import get_activity_service
from mapty.services.activity import ActivityService
from mapty.services.map_renderer import list_icon
from mapty.services.validation import ActivityValidationError
from mapty.services.workout import Activity

router = APIRouter(prefix="/api/activities", tags=["activities"])

RawNumber = Optional[Union[float, str]]


class ActivityForm(BaseModel):
    """New-workout form as submitted by the frontend. Numbers may arrive as raw strings."""

    kind: Literal["running", "cycling"] = Field(..., description="Workout type")
    distance: RawNumber = Field(None, description="Distance in km")
    duration: RawNumber = Field(None, description="Duration in minutes")
    cadence: RawNumber = Field(None, description="Cadence in steps/min (running)")
    elevation: RawNumber = Field(None, description="Elevation gain in m (cycling)")
    lat: float = Field(..., description="Latitude of the map click")
    lng: float = Field(..., description="Longitude of the map click")


def serialize_activity(activity: Activity) -> Dict[str, Any]:
    return {**activity.to_display_dict(), "icon": list_icon(activity)}


@router.get("")
async def get_activities(service: ActivityService = Depends(get_activity_service)):
    """Get all logged workouts, newest first."""
    activities_data = [serialize_activity(activity) for activity in service.list_activities()]

    return {
        "count": len(activities_data),
        "activities": activities_data,
    }


@router.post("", status_code=201)
async def create_activity(
    form: ActivityForm,
    service: ActivityService = Depends(get_activity_service),
):
    """
    Log a new workout at the clicked map location.

    Returns 422 with the failed check when a number is missing, not finite or not positive.
    """
    extra = form.cadence if form.kind == "running" else form.elevation

    try:
        activity = service.submit_new_activity(
            form.kind,
            form.distance,
            form.duration,
            extra,
            (form.lat, form.lng),
        )
    except ActivityValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.to_dict(),
        )

    return serialize_activity(activity)


@router.get("/{activity_id}")
async def get_activity(
    activity_id: str,
    service: ActivityService = Depends(get_activity_service),
):
    """Get one workout by id."""
    activity = service.get_activity(activity_id)

    if not activity:
        raise HTTPException(
            status_code=404,
            detail="Activity not found"
        )

    return serialize_activity(activity)


@router.delete("/{activity_id}", status_code=204)
async def delete_activity(
    activity_id: str,
    service: ActivityService = Depends(get_activity_service),
):
    """Delete a workout and its map marker. Deleting an unknown id does nothing."""
    service.delete_activity(activity_id)
    return Response(status_code=204)


@router.post("/{activity_id}/focus")
async def focus_activity(
    activity_id: str,
    service: ActivityService = Depends(get_activity_service),
):
    """Center the map on a workout and count the click."""
    activity = service.focus_activity(activity_id)

    if not activity:
        raise HTTPException(
            status_code=404,
            detail="Activity not found"
        )

    return serialize_activity(activity)
