"""Activity service: validates form input and keeps store, map and storage in step."""
import logging
from typing import Any, List, Optional, Union

from mapty.services.activity_store import ActivityStore
from mapty.services.geolocation import GeolocationProvider
from mapty.services.map_renderer import MapRenderer, popup_class, popup_text
from mapty.services.persistence import WorkoutRepository
from mapty.services.validation import UNKNOWN_KIND, ActivityValidationError, parse_finite, require_positive
from mapty.services.workout import Activity, ActivityKind, Location, create_ride, create_run

logger = logging.getLogger(__name__)


class ActivityService:
    """
    Application controller for logged workouts.

    All operations run synchronously inside one request handler; nothing here
    is shared across threads.
    """

    def __init__(
        self,
        repository: WorkoutRepository,
        renderer: MapRenderer,
        geolocation: Optional[GeolocationProvider] = None,
        store: Optional[ActivityStore] = None,
        default_zoom: int = 13,
    ):
        self.repository = repository
        self.renderer = renderer
        self.geolocation = geolocation
        self.store = store if store is not None else ActivityStore()
        self.default_zoom = default_zoom
        self.map_ready = False

    # Startup

    def start(self) -> int:
        """
        Load stored workouts, then ask for the user's location to open the map.

        Returns:
            Number of workouts loaded from storage
        """
        activities = self.repository.load()
        self.store.hydrate(activities)
        logger.info("Loaded %d stored workouts", len(activities))

        if self.geolocation is not None:
            self.geolocation.get_current_location(self.set_location, self._location_unavailable)
        return len(activities)

    def _location_unavailable(self) -> None:
        logger.warning("Unable to fetch coordinates, map stays unavailable")

    def set_location(self, location: Location) -> None:
        """
        Center the map on a location, opening it if it is not available yet.

        Opening the map draws a marker for every workout still without one.
        """
        if self.map_ready:
            self.renderer.recenter(location, self.renderer.get_current_zoom())
            return

        self.renderer.recenter(location, self.default_zoom)
        self.map_ready = True
        logger.info("Map opened at %s", location)
        self._render_pending_markers()

    def _render_marker(self, activity: Activity) -> Any:
        return self.renderer.create_marker(activity.location, popup_text(activity), popup_class(activity))

    def _render_pending_markers(self) -> None:
        # pending() is in display order and attach_marker fills the oldest gap first
        for activity in self.store.pending():
            self.store.attach_marker(self._render_marker(activity))

    # User actions

    def submit_new_activity(
        self,
        kind: Union[ActivityKind, str],
        raw_distance: Any,
        raw_duration: Any,
        raw_cadence_or_elevation: Any,
        location: Location,
    ) -> Activity:
        """
        Validate form input and log a new workout.

        Args:
            kind: "running" or "cycling"
            raw_distance: Distance in km as typed by the user
            raw_duration: Duration in minutes as typed by the user
            raw_cadence_or_elevation: Cadence for runs, elevation gain for rides
            location: (lat, lng) the user clicked on the map

        Returns:
            The stored activity

        Raises:
            ActivityValidationError: If the kind is unknown or any input fails a numeric
                check; nothing is stored
        """
        try:
            kind = ActivityKind(kind)
        except ValueError as e:
            raise ActivityValidationError(UNKNOWN_KIND, "kind") from e
        extra_name = "cadence" if kind is ActivityKind.RUNNING else "elevation"
        values = parse_finite(
            distance=raw_distance,
            duration=raw_duration,
            **{extra_name: raw_cadence_or_elevation},
        )
        if kind is ActivityKind.RUNNING:
            require_positive(values, "distance", "duration", "cadence")
        else:
            # Elevation may be negative for a net descent
            require_positive(values, "distance", "duration")

        coords = parse_finite(lat=location[0], lng=location[1])
        point = (coords["lat"], coords["lng"])

        if kind is ActivityKind.RUNNING:
            activity = create_run(point, values["distance"], values["duration"], values["cadence"])
        else:
            activity = create_ride(point, values["distance"], values["duration"], values["elevation"])

        self.store.add(activity)
        if self.map_ready:
            self.store.attach_marker(self._render_marker(activity))

        self.repository.save(self.store.all())
        logger.info("Logged %s (%s)", activity.description, activity.id)
        return activity

    def delete_activity(self, activity_id: str) -> Optional[Activity]:
        """Delete a workout and its marker. Unknown ids are ignored."""
        removed = self.store.remove_by_id(activity_id)
        if removed is None:
            return None

        activity, marker = removed
        if marker is not None:
            self.renderer.remove_marker(marker)
        self.repository.save(self.store.all())
        logger.info("Deleted %s (%s)", activity.description, activity.id)
        return activity

    def focus_activity(self, activity_id: str) -> Optional[Activity]:
        """Pan the map to a workout, count the click and save it. Unknown ids are ignored."""
        activity = self.store.find_by_id(activity_id)
        if activity is None:
            return None

        if self.map_ready:
            self.renderer.recenter(activity.location, self.renderer.get_current_zoom())
        activity.increment_click()
        self.repository.save(self.store.all())
        return activity

    # Queries

    def list_activities(self) -> List[Activity]:
        """Workouts newest first, the order the list view shows them in."""
        return list(reversed(self.store.all()))

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        return self.store.find_by_id(activity_id)
