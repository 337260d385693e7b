"""
Workout domain model.

An activity is one logged exercise session pinned to a map location. Runs and
rides share the base fields; each variant carries one extra raw field and one
derived metric. Derived values are computed once when the object is built and
the dataclasses are frozen, so they can never drift from their inputs.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

Location = Tuple[float, float]

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class ActivityKind(str, Enum):
    """Discriminator stored with every activity."""

    RUNNING = "running"
    CYCLING = "cycling"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def format_description(kind: ActivityKind, created_at: datetime) -> str:
    """Build the list/popup title, e.g. "Running on April 04"."""
    return f"{kind.label} on {MONTH_NAMES[created_at.month - 1]} {created_at.day:02d}"


@dataclass(frozen=True, kw_only=True)
class Activity(ABC):
    """Base for all logged activities. Use create_run / create_ride to build one."""

    kind: ClassVar[ActivityKind]

    location: Location
    distance_km: float
    duration_min: float
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utc_now)
    clicks: int = field(default=0, compare=False)
    description: str = field(init=False, compare=False)

    def __post_init__(self):
        lat, lng = self.location
        object.__setattr__(self, "location", (float(lat), float(lng)))
        object.__setattr__(self, "description", format_description(self.kind, self.created_at))

    def increment_click(self) -> int:
        """Record one more focus of this activity; the only mutation allowed."""
        object.__setattr__(self, "clicks", self.clicks + 1)
        return self.clicks

    @abstractmethod
    def _details(self) -> Dict[str, Any]:
        """Kind-specific raw and derived fields for display."""

    def to_display_dict(self) -> Dict[str, Any]:
        """Fields the list view shows for this activity."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
            "location": list(self.location),
            "distance_km": self.distance_km,
            "duration_min": self.duration_min,
            "clicks": self.clicks,
            **self._details(),
        }


@dataclass(frozen=True, kw_only=True)
class Run(Activity):
    kind: ClassVar[ActivityKind] = ActivityKind.RUNNING

    cadence_spm: float
    pace_min_per_km: float = field(init=False, compare=False)

    def __post_init__(self):
        super().__post_init__()
        # Pace in min/km
        object.__setattr__(self, "pace_min_per_km", self.duration_min / self.distance_km)

    def _details(self) -> Dict[str, Any]:
        return {
            "cadence_spm": self.cadence_spm,
            "pace_min_per_km": round(self.pace_min_per_km, 1),
        }


@dataclass(frozen=True, kw_only=True)
class Ride(Activity):
    kind: ClassVar[ActivityKind] = ActivityKind.CYCLING

    elevation_gain_m: float
    speed_km_per_h: float = field(init=False, compare=False)

    def __post_init__(self):
        super().__post_init__()
        # Speed in km/h
        object.__setattr__(self, "speed_km_per_h", self.distance_km / (self.duration_min / 60))

    def _details(self) -> Dict[str, Any]:
        return {
            "elevation_gain_m": self.elevation_gain_m,
            "speed_km_per_h": round(self.speed_km_per_h, 1),
        }


def _identity(activity_id: Optional[str], created_at: Optional[datetime], clicks: int) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"clicks": clicks}
    if activity_id is not None:
        kwargs["id"] = activity_id
    if created_at is not None:
        kwargs["created_at"] = created_at
    return kwargs


def create_run(
    location: Location,
    distance_km: float,
    duration_min: float,
    cadence_spm: float,
    *,
    activity_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    clicks: int = 0,
) -> Run:
    """
    Build a Run from already-validated inputs.

    Args:
        location: (lat, lng) where the run was logged
        distance_km: Distance in km, must be positive
        duration_min: Duration in minutes, must be positive
        cadence_spm: Cadence in steps per minute
        activity_id: Existing id when rebuilding a stored run
        created_at: Existing timestamp when rebuilding a stored run
        clicks: Existing focus count when rebuilding a stored run

    Returns:
        Run with pace and description already derived
    """
    return Run(
        location=location,
        distance_km=distance_km,
        duration_min=duration_min,
        cadence_spm=cadence_spm,
        **_identity(activity_id, created_at, clicks),
    )


def create_ride(
    location: Location,
    distance_km: float,
    duration_min: float,
    elevation_gain_m: float,
    *,
    activity_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    clicks: int = 0,
) -> Ride:
    """
    Build a Ride from already-validated inputs.

    Elevation gain may be zero or negative (net descent).
    """
    return Ride(
        location=location,
        distance_km=distance_km,
        duration_min=duration_min,
        elevation_gain_m=elevation_gain_m,
        **_identity(activity_id, created_at, clicks),
    )
