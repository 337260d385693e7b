"""
Map rendering collaborator.

The browser draws the Leaflet map; the backend keeps the authoritative marker
list and view so the frontend can redraw from GET /api/map at any time.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from mapty.services.workout import Activity, ActivityKind, Location

logger = logging.getLogger(__name__)

RUNNING_GLYPH = "🏃‍♂️"
LIST_ICONS = {
    ActivityKind.RUNNING: "🏃‍♂️",
    ActivityKind.CYCLING: "🚴‍♀️",
}


def popup_text(activity: Activity) -> str:
    """Popup label; runs get the runner glyph in front of the description."""
    if activity.kind is ActivityKind.RUNNING:
        return f"{RUNNING_GLYPH} {activity.description}"
    return activity.description


def popup_class(activity: Activity) -> str:
    return f"{activity.kind.value}-popup"


def list_icon(activity: Activity) -> str:
    return LIST_ICONS[activity.kind]


class MapRenderer(Protocol):
    """Operations the activity service needs from a map widget."""

    def create_marker(self, location: Location, popup_text: str, style_class: str) -> Any:
        ...

    def remove_marker(self, handle: Any) -> None:
        ...

    def recenter(self, location: Location, zoom_level: int) -> None:
        ...

    def get_current_zoom(self) -> int:
        ...


@dataclass
class Marker:
    handle: int
    location: Location
    popup_text: str
    style_class: str
    # Popups stay open when another marker is clicked
    auto_close: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "handle": self.handle,
            "location": list(self.location),
            "popup_text": self.popup_text,
            "style_class": self.style_class,
            "auto_close": self.auto_close,
        }


@dataclass
class MarkerBoard:
    """
    Server-side map state: the markers on the map and the current view.

    Marker handles are plain integers that are never reused.
    """
    default_zoom: int = 13
    center: Optional[Location] = None
    zoom: Optional[int] = None
    markers: Dict[int, Marker] = field(default_factory=dict)
    _handles: Any = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def create_marker(self, location: Location, popup_text: str, style_class: str) -> int:
        handle = next(self._handles)
        self.markers[handle] = Marker(handle, tuple(location), popup_text, style_class)
        return handle

    def remove_marker(self, handle: Any) -> None:
        if self.markers.pop(handle, None) is None:
            logger.warning("Tried to remove unknown marker %s", handle)

    def recenter(self, location: Location, zoom_level: int) -> None:
        self.center = tuple(location)
        self.zoom = zoom_level

    def get_current_zoom(self) -> int:
        return self.zoom if self.zoom is not None else self.default_zoom

    @property
    def ready(self) -> bool:
        return self.center is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ready": self.ready,
            "center": list(self.center) if self.center else None,
            "zoom": self.get_current_zoom(),
            "markers": [marker.to_dict() for marker in self.markers.values()],
        }
