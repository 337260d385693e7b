import json

import pytest

from mapty.services.activity import ActivityService
from mapty.services.geolocation import StaticLocationProvider
from mapty.services.persistence import InMemoryBlobStorage, WorkoutRepository, encode_activities
from mapty.services.validation import NOT_A_NUMBER, NOT_POSITIVE, UNKNOWN_KIND, ActivityValidationError
from mapty.services.map_renderer import MarkerBoard
from mapty.services.workout import Run, create_ride, create_run

from conftest import APRIL_4, LONDON


def _stored(storage):
    return json.loads(storage.blobs["workouts"])["activities"]


def test_start_with_location_opens_map(service, board):
    assert service.start() == 0
    assert service.map_ready is True
    assert board.center == LONDON
    assert board.zoom == 13


def test_submit_run_stores_marks_and_saves(service, board, storage):
    service.start()

    run = service.submit_new_activity("running", "5.2", "30", "170", LONDON)

    assert isinstance(run, Run)
    assert run.pace_min_per_km == pytest.approx(30 / 5.2)
    assert service.store.all() == (run,)
    marker = board.markers[service.store.marker_for(run.id)]
    assert marker.popup_text == f"🏃‍♂️ {run.description}"
    assert marker.style_class == "running-popup"
    assert [r["id"] for r in _stored(storage)] == [run.id]


def test_downhill_ride_is_accepted(service):
    service.start()
    ride = service.submit_new_activity("cycling", "10", "30", "-20", LONDON)
    assert ride.speed_km_per_h == pytest.approx(20)
    assert ride.elevation_gain_m == -20


@pytest.mark.parametrize("distance,reason", [("0", NOT_POSITIVE), ("-5", NOT_POSITIVE), ("abc", NOT_A_NUMBER)])
def test_bad_distance_is_rejected_without_changes(service, board, storage, distance, reason):
    service.start()
    with pytest.raises(ActivityValidationError) as excinfo:
        service.submit_new_activity("running", distance, "30", "170", LONDON)

    assert excinfo.value.reason == reason
    assert excinfo.value.field == "distance"
    assert service.store.all() == ()
    assert board.markers == {}
    assert "workouts" not in storage.blobs


def test_run_cadence_must_be_positive(service):
    with pytest.raises(ActivityValidationError) as excinfo:
        service.submit_new_activity("running", "5", "30", "0", LONDON)
    assert excinfo.value.field == "cadence"


def test_ride_elevation_must_still_be_a_number(service):
    with pytest.raises(ActivityValidationError) as excinfo:
        service.submit_new_activity("cycling", "5", "30", "up", LONDON)
    assert excinfo.value.reason == NOT_A_NUMBER
    assert excinfo.value.field == "elevation"


def test_unknown_kind_is_rejected(service, storage):
    with pytest.raises(ActivityValidationError) as excinfo:
        service.submit_new_activity("swimming", "5", "30", "1", LONDON)
    assert excinfo.value.reason == UNKNOWN_KIND
    assert excinfo.value.field == "kind"
    assert "workouts" not in storage.blobs
    assert len(service.store) == 0


def test_delete_removes_activity_marker_and_saves(service, board, storage):
    service.start()
    first = service.submit_new_activity("running", "5", "25", "170", LONDON)
    second = service.submit_new_activity("cycling", "20", "60", "150", (51.51, -0.1))
    third = service.submit_new_activity("running", "3", "18", "165", (51.52, -0.11))

    assert service.delete_activity(second.id) is second

    assert service.store.all() == (first, third)
    assert len(board.markers) == 2
    for activity, handle in service.store.entries():
        assert board.markers[handle].location == activity.location
    assert [r["id"] for r in _stored(storage)] == [first.id, third.id]


def test_delete_unknown_id_is_a_no_op(service, board, storage):
    service.start()
    run = service.submit_new_activity("running", "5", "25", "170", LONDON)
    blob = storage.blobs["workouts"]

    assert service.delete_activity("missing") is None

    assert service.store.all() == (run,)
    assert len(board.markers) == 1
    assert storage.blobs["workouts"] == blob


def test_focus_recenters_at_current_zoom_and_counts(service, board):
    service.start()
    board.zoom = 15
    ride = service.submit_new_activity("cycling", "20", "60", "150", (48.85, 2.35))

    assert service.focus_activity(ride.id) is ride
    assert service.focus_activity(ride.id) is ride

    assert board.center == (48.85, 2.35)
    assert board.zoom == 15
    assert ride.clicks == 2
    assert service.focus_activity("missing") is None


def test_hydrated_run_focus_only_counts_that_run(board):
    run = create_run(LONDON, 5, 25, 170, created_at=APRIL_4)
    ride = create_ride((51.6, -0.2), 10, 30, 40, created_at=APRIL_4)
    storage = InMemoryBlobStorage({"workouts": encode_activities([run, ride])})
    service = ActivityService(WorkoutRepository(storage), board, StaticLocationProvider(LONDON))

    assert service.start() == 2
    assert len(service.store.markers()) == 2
    assert service.store.pending() == []

    service.focus_activity(run.id)

    loaded_run = service.store.find_by_id(run.id)
    loaded_ride = service.store.find_by_id(ride.id)
    assert loaded_run.clicks == 1
    assert loaded_ride.clicks == 0
    assert loaded_run.description == run.description


def test_markers_wait_until_location_is_known(repository, board, caplog):
    service = ActivityService(repository, board, StaticLocationProvider(None))
    service.start()
    assert service.map_ready is False
    assert "Unable to fetch coordinates" in caplog.text

    run = service.submit_new_activity("running", "5", "25", "170", LONDON)
    assert board.markers == {}
    assert service.store.pending() == [run]

    # Focus works without a map; it just cannot pan
    service.focus_activity(run.id)
    assert run.clicks == 1

    service.set_location((40.0, -3.7))
    assert service.map_ready is True
    assert board.center == (40.0, -3.7)
    assert service.store.pending() == []
    assert len(board.markers) == 1


def test_second_location_only_recenters(service, board):
    service.start()
    service.submit_new_activity("running", "5", "25", "170", LONDON)
    board.zoom = 9

    service.set_location((40.0, -3.7))

    assert board.center == (40.0, -3.7)
    assert board.zoom == 9
    assert len(board.markers) == 1


def test_list_is_newest_first(service):
    service.start()
    first = service.submit_new_activity("running", "5", "25", "170", LONDON)
    second = service.submit_new_activity("cycling", "20", "60", "150", LONDON)
    assert service.list_activities() == [second, first]


def test_focus_clicks_survive_reload(service, storage):
    service.start()
    run = service.submit_new_activity("running", "5", "25", "170", LONDON)
    service.focus_activity(run.id)
    service.focus_activity(run.id)

    reloaded = ActivityService(WorkoutRepository(storage), MarkerBoard())
    reloaded.start()
    assert run.clicks == 2
    assert reloaded.store.find_by_id(run.id).clicks == 2


def test_focus_unknown_id_does_not_save(service, storage):
    service.start()
    service.submit_new_activity("running", "5", "25", "170", LONDON)
    blob = storage.blobs["workouts"]

    service.focus_activity("missing")

    assert storage.blobs["workouts"] == blob
