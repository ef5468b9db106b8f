import math
from dataclasses import FrozenInstanceError

import pytest

from track_recorder.models import Position
from track_recorder.stopover import DEFAULT_STOP_OVER_POLICY, StopOverPolicy, is_stop_over

from conftest import north_of


def test_default_policy_values() -> None:
    assert DEFAULT_STOP_OVER_POLICY.min_movement_m == 10.0
    assert DEFAULT_STOP_OVER_POLICY.accuracy_factor == 1.0
    assert DEFAULT_STOP_OVER_POLICY.max_accuracy_radius_m == 50.0


def test_policy_is_frozen() -> None:
    with pytest.raises(FrozenInstanceError):
        DEFAULT_STOP_OVER_POLICY.min_movement_m = 1.0  # type: ignore[misc]


def test_close_positions_are_stop_over(start: Position) -> None:
    assert is_stop_over(start, north_of(start, 3.0))
    assert is_stop_over(start, start)


def test_distant_positions_are_moving(start: Position) -> None:
    assert not is_stop_over(start, north_of(start, 25.0))


def test_poor_accuracy_widens_stationary_radius(start: Position) -> None:
    prev = Position(latitude=start.latitude, longitude=start.longitude, horizontal_accuracy_m=30.0)
    cur = north_of(start, 25.0, accuracy=5.0)
    assert is_stop_over(prev, cur)
    assert not is_stop_over(Position(latitude=start.latitude, longitude=start.longitude), cur)


def test_accuracy_radius_is_capped(start: Position) -> None:
    prev = Position(latitude=start.latitude, longitude=start.longitude, horizontal_accuracy_m=5000.0)
    assert is_stop_over(prev, north_of(start, 45.0))
    assert not is_stop_over(prev, north_of(start, 60.0))


@pytest.mark.parametrize("accuracy", [None, -1.0, 0.0, math.nan])
def test_missing_or_sentinel_accuracy_counts_as_zero(start: Position, accuracy) -> None:
    policy = StopOverPolicy(min_movement_m=5.0)
    prev = Position(latitude=start.latitude, longitude=start.longitude, horizontal_accuracy_m=accuracy)
    assert policy.stationary_radius_m(prev, prev) == 5.0
    assert not is_stop_over(prev, north_of(start, 8.0), policy)


def test_custom_policy_threshold(start: Position) -> None:
    strict = StopOverPolicy(min_movement_m=1.0, accuracy_factor=0.0)
    loose = StopOverPolicy(min_movement_m=100.0)
    cur = north_of(start, 20.0)
    assert not is_stop_over(start, cur, strict)
    assert is_stop_over(start, cur, loose)


def test_non_finite_position_is_moving(start: Position) -> None:
    bad = Position(latitude=math.nan, longitude=start.longitude)
    assert not is_stop_over(start, bad)
