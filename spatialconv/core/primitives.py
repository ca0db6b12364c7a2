"""Immutable 3D value types.

``Point3D`` is a position and ``Vector3D`` a displacement. The split matters to
:class:`~spatialconv.core.transform.Transform3D`: translation moves points but
never vectors. Arithmetic is exposed as named methods (``add``, ``subtract``,
``scale``) with the usual operators as thin aliases.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Iterator, Sequence
import math
import numpy as np

from .errors import InvalidArgument


@dataclass(frozen=True)
class Point3D:
    """An (x, y, z) position."""

    x: float
    y: float
    z: float

    ORIGIN: ClassVar["Point3D"]

    def add(self, other: "Vector3D") -> "Point3D":
        return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Point3D") -> "Vector3D":
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def distance_to(self, other: "Point3D") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def __add__(self, other: "Vector3D") -> "Point3D":
        if not isinstance(other, Vector3D):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Point3D") -> "Vector3D":
        if not isinstance(other, Point3D):
            return NotImplemented
        return self.subtract(other)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Sequence[float] | np.ndarray) -> "Point3D":
        if len(arr) != 3:
            raise InvalidArgument(f"Point3D expects 3 values, got {len(arr)}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))


@dataclass(frozen=True)
class Vector3D:
    """An (x, y, z) displacement or direction."""

    x: float
    y: float
    z: float

    ZERO: ClassVar["Vector3D"]
    UNIT_X: ClassVar["Vector3D"]
    UNIT_Y: ClassVar["Vector3D"]
    UNIT_Z: ClassVar["Vector3D"]

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def add(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, scalar: float) -> "Vector3D":
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def negate(self) -> "Vector3D":
        return Vector3D(-self.x, -self.y, -self.z)

    def normalized(self) -> "Vector3D":
        """Unit vector in the same direction; the zero vector is returned as-is."""
        mag = self.magnitude
        if mag > 0:
            return Vector3D(self.x / mag, self.y / mag, self.z / mag)
        return self

    def dot(self, other: "Vector3D") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3D") -> "Vector3D":
        return Vector3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def __add__(self, other: "Vector3D") -> "Vector3D":
        if not isinstance(other, Vector3D):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Vector3D") -> "Vector3D":
        if not isinstance(other, Vector3D):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, scalar: float) -> "Vector3D":
        if not isinstance(scalar, (int, float)):
            return NotImplemented
        return self.scale(scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3D":
        return self.negate()

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Sequence[float] | np.ndarray) -> "Vector3D":
        if len(arr) != 3:
            raise InvalidArgument(f"Vector3D expects 3 values, got {len(arr)}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))


Point3D.ORIGIN = Point3D(0.0, 0.0, 0.0)
Vector3D.ZERO = Vector3D(0.0, 0.0, 0.0)
Vector3D.UNIT_X = Vector3D(1.0, 0.0, 0.0)
Vector3D.UNIT_Y = Vector3D(0.0, 1.0, 0.0)
Vector3D.UNIT_Z = Vector3D(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Triangle3D:
    v0: Point3D
    v1: Point3D
    v2: Point3D

    @property
    def normal(self) -> Vector3D:
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0
        return edge1.cross(edge2).normalized()

    @property
    def centroid(self) -> Point3D:
        return Point3D(
            (self.v0.x + self.v1.x + self.v2.x) / 3.0,
            (self.v0.y + self.v1.y + self.v2.y) / 3.0,
            (self.v0.z + self.v1.z + self.v2.z) / 3.0,
        )

    @property
    def area(self) -> float:
        ab = self.v1 - self.v0
        ac = self.v2 - self.v0
        return ab.cross(ac).magnitude / 2.0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box; ``contains`` is inclusive on every face."""

    min: Point3D
    max: Point3D

    @property
    def center(self) -> Point3D:
        return Point3D(
            (self.min.x + self.max.x) / 2.0,
            (self.min.y + self.max.y) / 2.0,
            (self.min.z + self.max.z) / 2.0,
        )

    @property
    def dimensions(self) -> Vector3D:
        return Vector3D(
            self.max.x - self.min.x,
            self.max.y - self.min.y,
            self.max.z - self.min.z,
        )

    def contains(self, point: Point3D) -> bool:
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )

    @staticmethod
    def from_points(points: Sequence[Point3D]) -> "BoundingBox":
        if len(points) == 0:
            raise InvalidArgument("Cannot create bounding box from empty list")
        return BoundingBox(
            min=Point3D(
                min(p.x for p in points),
                min(p.y for p in points),
                min(p.z for p in points),
            ),
            max=Point3D(
                max(p.x for p in points),
                max(p.y for p in points),
                max(p.z for p in points),
            ),
        )
