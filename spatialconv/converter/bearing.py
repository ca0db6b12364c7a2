"""ENU velocity → compass bearing.

Velocities are East-North-Up: ``x`` is East, ``y`` is North and ``z`` is Up.
Bearings are degrees clockwise from North in ``[0, 360)``; the Up component
never contributes to bearing or speed.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, List, Sequence
import math
import numpy as np

from ..core.errors import ComputationFailure, InvalidArgument, SpatialError
from ..core.primitives import Vector3D
from ..core.utils import degrees, get_logger, normalize_degrees

_log = get_logger()

_CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class Bearing2D:
    bearing: float   # degrees clockwise from North, [0, 360)
    speed: float     # horizontal (EN plane) speed

    STATIONARY: ClassVar["Bearing2D"]

    @property
    def cardinal_direction(self) -> str:
        """Eight 45° sectors centred on N, NE, E, ... NW."""
        b = self.bearing
        if b < 22.5 or b >= 337.5:
            return "N"
        return _CARDINALS[int((b + 22.5) // 45.0)]


Bearing2D.STATIONARY = Bearing2D(0.0, 0.0)


class VelocityToBearingConverter:
    """Velocities slower than ``minimum_speed`` map to :attr:`Bearing2D.STATIONARY`."""

    def __init__(self, minimum_speed: float = 0.01) -> None:
        if minimum_speed < 0:
            raise InvalidArgument("minimum_speed must be non-negative")
        self.minimum_speed = float(minimum_speed)

    def convert(self, input: Vector3D) -> Bearing2D:
        east = float(input.x)
        north = float(input.y)
        if not (math.isfinite(east) and math.isfinite(north)):
            raise ComputationFailure(f"Non-finite horizontal velocity ({east}, {north})")

        horizontal_speed = math.sqrt(east * east + north * north)
        if horizontal_speed < self.minimum_speed:
            return Bearing2D.STATIONARY

        # atan2 is counter-clockwise from East; bearings are clockwise from North
        angle_from_east = math.atan2(north, east)
        bearing = normalize_degrees(float(degrees(math.pi / 2 - angle_from_east)))
        return Bearing2D(bearing, horizontal_speed)


class VelocitySequenceToBearingConverter:
    """Order-preserving batch conversion; the first failure aborts the batch."""

    def __init__(self, minimum_speed: float = 0.01) -> None:
        self._converter = VelocityToBearingConverter(minimum_speed)

    @property
    def minimum_speed(self) -> float:
        return self._converter.minimum_speed

    def convert(self, velocities: Sequence[Vector3D]) -> List[Bearing2D]:
        out: List[Bearing2D] = []
        for i, v in enumerate(velocities):
            try:
                out.append(self._converter.convert(v))
            except SpatialError as exc:
                raise ComputationFailure(f"Velocity {i} could not be converted: {exc}", index=i) from exc
        return out

    def convert_smoothed(self, velocities: Sequence[Vector3D], window_size: int = 3) -> List[Bearing2D]:
        """Centered moving average per component, then :meth:`convert`.

        Sample ``i`` averages indices ``i - (w-1)//2 .. i + w//2``; windows are
        clipped at both ends of the sequence rather than dropping samples.
        Sequences shorter than the window are converted unsmoothed.
        """
        if window_size < 1:
            raise InvalidArgument("Window size must be positive")
        if len(velocities) < window_size:
            return self.convert(velocities)
        return self.convert(smooth_velocities(velocities, window_size))


def smooth_velocities(velocities: Sequence[Vector3D], window_size: int) -> List[Vector3D]:
    if window_size < 1:
        raise InvalidArgument("Window size must be positive")
    arr = np.asarray([tuple(v) for v in velocities], dtype=np.float64).reshape(-1, 3)
    n = len(arr)
    before = (window_size - 1) // 2
    after = window_size // 2
    out: List[Vector3D] = []
    for i in range(n):
        lo = max(0, i - before)
        hi = min(n, i + after + 1)
        out.append(Vector3D.from_array(arr[lo:hi].mean(axis=0)))
    return out
