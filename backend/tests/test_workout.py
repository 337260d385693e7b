import dataclasses
from datetime import datetime, timezone

import pytest

from mapty.services.workout import Activity, ActivityKind, Ride, Run, create_ride, create_run, format_description

from conftest import APRIL_4, LONDON


def test_run_pace_is_duration_over_distance():
    run = create_run(LONDON, 5.2, 30, 170)
    assert isinstance(run, Run)
    assert run.kind is ActivityKind.RUNNING
    assert run.pace_min_per_km == pytest.approx(30 / 5.2)


def test_ride_speed_is_km_per_hour():
    ride = create_ride(LONDON, 10, 30, -20)
    assert isinstance(ride, Ride)
    assert ride.kind is ActivityKind.CYCLING
    assert ride.speed_km_per_h == pytest.approx(20)
    assert ride.elevation_gain_m == -20


@pytest.mark.parametrize("distance,duration", [(1, 1), (42.195, 180), (0.4, 2.5), (150, 300)])
def test_derived_metrics_for_various_inputs(distance, duration):
    run = create_run(LONDON, distance, duration, 160)
    ride = create_ride(LONDON, distance, duration, 0)
    assert run.pace_min_per_km == pytest.approx(duration / distance)
    assert ride.speed_km_per_h == pytest.approx(distance / (duration / 60))


def test_description_uses_label_full_month_and_padded_day():
    run = create_run(LONDON, 5, 25, 170, created_at=APRIL_4)
    ride = create_ride(LONDON, 20, 60, 100, created_at=datetime(2024, 12, 25, tzinfo=timezone.utc))
    assert run.description == "Running on April 04"
    assert ride.description == "Cycling on December 25"
    assert format_description(ActivityKind.CYCLING, APRIL_4) == "Cycling on April 04"


def test_new_activities_get_unique_ids_and_zero_clicks():
    first = create_run(LONDON, 5, 25, 170)
    second = create_run(LONDON, 5, 25, 170)
    assert first.id != second.id
    assert first.clicks == 0
    assert first.created_at.tzinfo is not None


def test_activity_fields_are_frozen():
    run = create_run(LONDON, 5, 25, 170)
    with pytest.raises(dataclasses.FrozenInstanceError):
        run.distance_km = 10
    with pytest.raises(dataclasses.FrozenInstanceError):
        run.pace_min_per_km = 1


def test_increment_click_is_the_only_mutation():
    ride = create_ride(LONDON, 10, 30, 5)
    assert ride.increment_click() == 1
    assert ride.increment_click() == 2
    assert ride.clicks == 2
    assert ride.speed_km_per_h == pytest.approx(20)


def test_rebuilding_keeps_identity():
    run = create_run(LONDON, 5, 25, 170, activity_id="abc", created_at=APRIL_4, clicks=3)
    assert run.id == "abc"
    assert run.created_at == APRIL_4
    assert run.clicks == 3


def test_location_is_stored_as_float_pair():
    run = create_run([51, 0], 5, 25, 170)
    assert run.location == (51.0, 0.0)


def test_display_dict_has_kind_specific_fields():
    run = create_run(LONDON, 5.2, 30, 170, created_at=APRIL_4)
    data = run.to_display_dict()
    assert data["kind"] == "running"
    assert data["description"] == "Running on April 04"
    assert data["cadence_spm"] == 170
    assert data["pace_min_per_km"] == 5.8
    assert "speed_km_per_h" not in data

    ride_data = create_ride(LONDON, 10, 30, -20).to_display_dict()
    assert ride_data["speed_km_per_h"] == 20.0
    assert ride_data["elevation_gain_m"] == -20
    assert "cadence_spm" not in ride_data


def test_base_activity_cannot_be_built():
    with pytest.raises(TypeError):
        Activity(location=LONDON, distance_km=5, duration_min=25)
