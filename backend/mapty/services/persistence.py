"""
Workout persistence: JSON codec plus the blob storage it is written to.

Only activity data is encoded. Markers are a rendering concern and are rebuilt
by the caller after load. Derived values (pace, speed, description) are not
trusted from storage; they are re-derived by the model constructors.
"""
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mapty.models import StoredBlob
from mapty.services.workout import Activity, ActivityKind, Ride, Run, create_ride, create_run

logger = logging.getLogger(__name__)

CODEC_VERSION = 1


class BlobStorage(Protocol):
    """Durable key/value storage for serialized blobs."""

    def read_blob(self, key: str) -> Optional[str]:
        ...

    def write_blob(self, key: str, value: str) -> None:
        ...


class InMemoryBlobStorage:
    """Dict-backed storage, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})

    def read_blob(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write_blob(self, key: str, value: str) -> None:
        self.blobs[key] = value


class SqlBlobStorage:
    """Blob storage on top of the stored_blobs table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def read_blob(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            blob = db.query(StoredBlob).filter(StoredBlob.key == key).first()
            return blob.value if blob else None
        finally:
            db.close()

    def write_blob(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            blob = db.query(StoredBlob).filter(StoredBlob.key == key).first()
            if blob:
                blob.value = value
            else:
                db.add(StoredBlob(key=key, value=value))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()


class RecordError(ValueError):
    """A stored record could not be turned back into an activity."""


def encode_activity(activity: Activity) -> Dict[str, Any]:
    record = {
        "id": activity.id,
        "kind": activity.kind.value,
        "created_at": activity.created_at.isoformat(),
        "location": list(activity.location),
        "distance_km": activity.distance_km,
        "duration_min": activity.duration_min,
        "clicks": activity.clicks,
    }
    if isinstance(activity, Run):
        record["cadence_spm"] = activity.cadence_spm
    elif isinstance(activity, Ride):
        record["elevation_gain_m"] = activity.elevation_gain_m
    return record


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RecordError(f"Field '{name}' is not a number: {value!r}")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise RecordError(f"Field '{name}' is not a finite number: {value!r}")
    return number


def _parse_created_at(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise RecordError(f"Field 'created_at' is not a timestamp: {raw!r}")
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise RecordError(f"Field 'created_at' is not a timestamp: {raw!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def decode_activity(record: Dict[str, Any]) -> Activity:
    """
    Rebuild a typed activity from one stored record.

    Raises:
        RecordError: If the record is malformed or has an unknown kind
    """
    if not isinstance(record, dict):
        raise RecordError(f"Record is not an object: {record!r}")

    try:
        kind = ActivityKind(record.get("kind"))
    except ValueError as e:
        raise RecordError(f"Unknown activity kind: {record.get('kind')!r}") from e

    activity_id = record.get("id")
    if not isinstance(activity_id, str) or not activity_id:
        raise RecordError(f"Record has no id: {record!r}")

    location = record.get("location")
    if not isinstance(location, (list, tuple)) or len(location) != 2:
        raise RecordError(f"Field 'location' is not a [lat, lng] pair: {location!r}")
    lat = _number(location[0], "lat")
    lng = _number(location[1], "lng")

    clicks = record.get("clicks", 0)
    if isinstance(clicks, bool) or not isinstance(clicks, int) or clicks < 0:
        clicks = 0

    identity = {
        "activity_id": activity_id,
        "created_at": _parse_created_at(record.get("created_at")),
        "clicks": clicks,
    }
    distance_km = _number(record.get("distance_km"), "distance_km")
    duration_min = _number(record.get("duration_min"), "duration_min")
    if distance_km <= 0 or duration_min <= 0:
        raise RecordError(f"Record {activity_id} has a non-positive distance or duration")

    if kind is ActivityKind.RUNNING:
        cadence_spm = _number(record.get("cadence_spm"), "cadence_spm")
        if cadence_spm <= 0:
            raise RecordError(f"Record {activity_id} has a non-positive cadence")
        return create_run((lat, lng), distance_km, duration_min, cadence_spm, **identity)

    elevation_gain_m = _number(record.get("elevation_gain_m"), "elevation_gain_m")
    return create_ride((lat, lng), distance_km, duration_min, elevation_gain_m, **identity)


def encode_activities(activities: Iterable[Activity]) -> str:
    payload = {
        "version": CODEC_VERSION,
        "activities": [encode_activity(activity) for activity in activities],
    }
    return json.dumps(payload)


def decode_activities(blob: Optional[str]) -> List[Activity]:
    """
    Decode a stored blob into activities, in stored order.

    A missing or unreadable blob means no prior data. Records that cannot be
    rebuilt are skipped with a warning.
    """
    if not blob:
        return []

    try:
        payload = json.loads(blob)
    except json.JSONDecodeError as e:
        logger.warning("Stored workouts are not valid JSON, starting empty: %s", e)
        return []

    if isinstance(payload, dict):
        records = payload.get("activities")
    else:
        records = payload

    if not isinstance(records, list):
        logger.warning("Stored workouts have an unexpected shape, starting empty")
        return []

    activities = []
    seen = set()
    for record in records:
        try:
            activity = decode_activity(record)
        except RecordError as e:
            logger.warning("Skipping stored workout: %s", e)
            continue
        if activity.id in seen:
            logger.warning("Skipping stored workout: duplicate id %s", activity.id)
            continue
        seen.add(activity.id)
        activities.append(activity)
    return activities


class WorkoutRepository:
    """Saves and loads the full workout list under one storage key."""

    def __init__(self, storage: BlobStorage, key: str = "workouts"):
        self.storage = storage
        self.key = key

    def save(self, activities: Iterable[Activity]) -> bool:
        """
        Write every activity to storage.

        Returns:
            True on success, False when the storage write failed (logged, not raised)
        """
        blob = encode_activities(activities)
        try:
            self.storage.write_blob(self.key, blob)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to save workouts under '%s': %s", self.key, e)
            return False
        return True

    def load(self) -> List[Activity]:
        try:
            blob = self.storage.read_blob(self.key)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to read workouts under '%s': %s", self.key, e)
            return []
        return decode_activities(blob)
