import math

import pytest

from spatialconv.converter.bearing import (
    Bearing2D,
    VelocitySequenceToBearingConverter,
    VelocityToBearingConverter,
    smooth_velocities,
)
from spatialconv.core.errors import ComputationFailure, InvalidArgument
from spatialconv.core.primitives import Vector3D


def _off_north(bearing: float) -> float:
    return min(bearing, 360.0 - bearing)


def test_due_north() -> None:
    b = VelocityToBearingConverter().convert(Vector3D(0.0, 10.0, 0.0))
    assert b.bearing == pytest.approx(0.0)
    assert b.speed == pytest.approx(10.0)
    assert b.cardinal_direction == "N"


def test_due_east_ignores_up() -> None:
    converter = VelocityToBearingConverter()
    for v in (Vector3D(10.0, 0.0, 0.0), Vector3D(10.0, 0.0, 100.0)):
        b = converter.convert(v)
        assert b.bearing == pytest.approx(90.0)
        assert b.speed == pytest.approx(10.0)
        assert b.cardinal_direction == "E"


@pytest.mark.parametrize(
    "east,north,expected",
    [
        (0.0, -5.0, 180.0),
        (-5.0, 0.0, 270.0),
        (1.0, 1.0, 45.0),
        (-1.0, 1.0, 315.0),
    ],
)
def test_quadrants(east: float, north: float, expected: float) -> None:
    b = VelocityToBearingConverter().convert(Vector3D(east, north, 0.0))
    assert b.bearing == pytest.approx(expected)
    assert 0.0 <= b.bearing < 360.0


def test_speed_is_horizontal_magnitude() -> None:
    assert VelocityToBearingConverter().convert(Vector3D(3.0, 4.0, 0.0)).speed == 5.0


def test_slow_velocity_is_stationary() -> None:
    assert VelocityToBearingConverter().convert(Vector3D(0.001, 0.001, 0.0)) == Bearing2D.STATIONARY
    assert VelocityToBearingConverter(minimum_speed=0.0).convert(Vector3D(0.001, 0.001, 0.0)).bearing == pytest.approx(45.0)


@pytest.mark.parametrize(
    "bearing,cardinal",
    [(0.0, "N"), (22.4, "N"), (22.5, "NE"), (67.5, "E"), (135.0, "SE"), (180.0, "S"),
     (225.0, "SW"), (270.0, "W"), (315.0, "NW"), (337.4, "NW"), (337.5, "N"), (359.9, "N")],
)
def test_cardinal_sectors(bearing: float, cardinal: str) -> None:
    assert Bearing2D(bearing, 1.0).cardinal_direction == cardinal


def test_negative_threshold_rejected() -> None:
    with pytest.raises(InvalidArgument):
        VelocityToBearingConverter(minimum_speed=-1.0)


def test_non_finite_velocity_fails() -> None:
    with pytest.raises(ComputationFailure):
        VelocityToBearingConverter().convert(Vector3D(math.nan, 1.0, 0.0))


def test_sequence_preserves_order() -> None:
    converter = VelocitySequenceToBearingConverter()
    out = converter.convert([Vector3D(0.0, 1.0, 0.0), Vector3D(1.0, 0.0, 0.0), Vector3D(0.0, 0.0, 0.0)])
    assert [b.cardinal_direction for b in out] == ["N", "E", "N"]
    assert out[2] == Bearing2D.STATIONARY
    assert converter.convert([]) == []


def test_sequence_aborts_on_first_failure() -> None:
    velocities = [Vector3D(0.0, 1.0, 0.0), Vector3D(math.inf, 0.0, 0.0), Vector3D(math.nan, 0.0, 0.0)]
    with pytest.raises(ComputationFailure) as excinfo:
        VelocitySequenceToBearingConverter().convert(velocities)
    assert excinfo.value.index == 1


def test_smoothing_pulls_noisy_heading_towards_north() -> None:
    velocities = [
        Vector3D(0.5, 10.0, 0.0),
        Vector3D(-0.5, 10.0, 0.0),
        Vector3D(0.5, 10.0, 0.0),
        Vector3D(-0.5, 10.0, 0.0),
    ]
    converter = VelocitySequenceToBearingConverter()
    raw = converter.convert(velocities)
    smoothed = converter.convert_smoothed(velocities, window_size=3)
    assert len(smoothed) == len(velocities)
    for i in (1, 2):
        assert _off_north(smoothed[i].bearing) < _off_north(raw[i].bearing)


def test_smoothing_window_is_centered_and_clipped() -> None:
    velocities = [Vector3D(float(i), 0.0, 0.0) for i in range(5)]
    out = smooth_velocities(velocities, 3)
    assert [v.x for v in out] == pytest.approx([0.5, 1.0, 2.0, 3.0, 3.5])
    assert smooth_velocities(velocities, 1) == velocities


def test_smoothing_rejects_bad_window() -> None:
    converter = VelocitySequenceToBearingConverter()
    with pytest.raises(InvalidArgument):
        converter.convert_smoothed([Vector3D(0.0, 1.0, 0.0)], window_size=0)
    assert converter.convert_smoothed([], window_size=5) == []


def test_short_sequence_is_converted_unsmoothed() -> None:
    velocities = [Vector3D(1.0, 10.0, 0.0), Vector3D(-1.0, 10.0, 0.0)]
    converter = VelocitySequenceToBearingConverter()
    raw = converter.convert(velocities)
    smoothed = converter.convert_smoothed(velocities, window_size=3)
    assert smoothed == raw
    assert smoothed[0].bearing == pytest.approx(5.711, abs=1e-3)
    assert smoothed[1].bearing == pytest.approx(354.289, abs=1e-3)
