"""
In-memory store pairing each activity with its map marker.

Activities and their marker handles live together in one ordered mapping keyed
by activity id, so a delete can never strip the marker of a neighbouring
activity. Display order is insertion order.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from mapty.services.workout import Activity

logger = logging.getLogger(__name__)


class MarkerAlignmentError(RuntimeError):
    """A marker was attached with no activity waiting for one."""


class DuplicateActivityError(ValueError):
    """An activity with the same id is already in the store."""


@dataclass
class StoreEntry:
    activity: Activity
    marker: Any = None


class ActivityStore:
    """Ordered collection of activities and their (opaque) marker handles."""

    def __init__(self, activities: Iterable[Activity] = ()):
        self._entries: Dict[str, StoreEntry] = {}
        for activity in activities:
            self.add(activity)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, activity_id: object) -> bool:
        return activity_id in self._entries

    def add(self, activity: Activity) -> None:
        """Append an activity; its marker is attached separately."""
        if activity.id in self._entries:
            raise DuplicateActivityError(f"Activity {activity.id} is already stored")
        self._entries[activity.id] = StoreEntry(activity)

    def attach_marker(self, handle: Any) -> Activity:
        """
        Attach a marker to the oldest activity that does not have one yet.

        Callers add then attach in pairs, or re-attach in hydrated order after
        hydrate(); both end with every activity holding its own marker.

        Returns:
            The activity the marker was attached to

        Raises:
            MarkerAlignmentError: If every activity already has a marker
        """
        for entry in self._entries.values():
            if entry.marker is None:
                entry.marker = handle
                return entry.activity
        raise MarkerAlignmentError(
            f"No activity waiting for a marker ({len(self._entries)} activities, all marked)"
        )

    def attach_marker_for(self, activity_id: str, handle: Any) -> bool:
        """Attach a marker to a specific activity. Returns False if the id is unknown."""
        entry = self._entries.get(activity_id)
        if entry is None:
            return False
        if entry.marker is not None:
            raise MarkerAlignmentError(f"Activity {activity_id} already has a marker")
        entry.marker = handle
        return True

    def find_by_id(self, activity_id: str) -> Optional[Activity]:
        entry = self._entries.get(activity_id)
        return entry.activity if entry else None

    def marker_for(self, activity_id: str) -> Any:
        entry = self._entries.get(activity_id)
        return entry.marker if entry else None

    def remove_by_id(self, activity_id: str) -> Optional[Tuple[Activity, Any]]:
        """
        Remove an activity together with its marker.

        Returns:
            (activity, marker_handle) so the caller can dispose the marker,
            or None when no activity has that id
        """
        entry = self._entries.pop(activity_id, None)
        if entry is None:
            logger.debug("Remove skipped, no activity with id %s", activity_id)
            return None
        return entry.activity, entry.marker

    def hydrate(self, activities: Iterable[Activity]) -> None:
        """Replace all activities; every marker is dropped and must be re-attached."""
        entries: Dict[str, StoreEntry] = {}
        for activity in activities:
            if activity.id in entries:
                raise DuplicateActivityError(f"Activity {activity.id} appears twice")
            entries[activity.id] = StoreEntry(activity)
        self._entries = entries

    def all(self) -> Tuple[Activity, ...]:
        """Activities in insertion (chronological) order."""
        return tuple(entry.activity for entry in self._entries.values())

    def markers(self) -> List[Any]:
        """Marker handles in the same order as all(), skipping unmarked activities."""
        return [entry.marker for entry in self._entries.values() if entry.marker is not None]

    def pending(self) -> List[Activity]:
        """Activities that still need a marker."""
        return [entry.activity for entry in self._entries.values() if entry.marker is None]

    def entries(self) -> List[Tuple[Activity, Any]]:
        return [(entry.activity, entry.marker) for entry in self._entries.values()]
