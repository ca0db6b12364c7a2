from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple
import numpy as np

from .errors import InvalidArgument
from .primitives import BoundingBox, Point3D, Vector3D


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    WHITE: ClassVar["Color"]
    BLACK: ClassVar["Color"]
    RED: ClassVar["Color"]
    GREEN: ClassVar["Color"]
    BLUE: ClassVar["Color"]

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)) or not 0 <= v <= 255:
                raise InvalidArgument(f"Color components must be in range 0-255 (got {name}={v!r})")
            object.__setattr__(self, name, int(v))

    def to_hex(self) -> str:
        return "#%02X%02X%02X" % (self.r, self.g, self.b)

    @staticmethod
    def from_hex(hex_str: str) -> "Color":
        clean = hex_str[1:] if hex_str.startswith("#") else hex_str
        if len(clean) != 6:
            raise InvalidArgument("Hex color must be 6 characters")
        try:
            return Color(int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16))
        except ValueError as exc:
            raise InvalidArgument(f"Invalid hex color '{hex_str}'") from exc


Color.WHITE = Color(255, 255, 255)
Color.BLACK = Color(0, 0, 0)
Color.RED = Color(255, 0, 0)
Color.GREEN = Color(0, 255, 0)
Color.BLUE = Color(0, 0, 255)


class CoordinateSystem(str, Enum):
    RIGHT_HANDED_Y_UP = "RIGHT_HANDED_Y_UP"   # OpenGL, Blender
    RIGHT_HANDED_Z_UP = "RIGHT_HANDED_Z_UP"   # CAD, GIS
    LEFT_HANDED_Y_UP = "LEFT_HANDED_Y_UP"     # DirectX, Unity


@dataclass(frozen=True)
class PointCloudMetadata:
    name: str = ""
    source_format: str = ""
    coordinate_system: CoordinateSystem = CoordinateSystem.RIGHT_HANDED_Y_UP
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PointCloud:
    """Points with optional per-point colors, normals and intensity.

    Every attribute that is present must have exactly one entry per point;
    this is checked when the cloud is built.
    """
    points: Tuple[Point3D, ...]
    colors: Optional[Tuple[Color, ...]] = None
    normals: Optional[Tuple[Vector3D, ...]] = None
    intensity: Optional[Tuple[float, ...]] = None
    metadata: PointCloudMetadata = field(default_factory=PointCloudMetadata)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        n = len(self.points)
        for k in ("colors", "normals", "intensity"):
            v = getattr(self, k)
            if v is None:
                continue
            v = tuple(v)
            if len(v) != n:
                raise InvalidArgument(f"Attribute '{k}' length {len(v)} != {n}")
            object.__setattr__(self, k, v)

    @property
    def size(self) -> int:
        return len(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @cached_property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.points)

    @cached_property
    def xyz(self) -> np.ndarray:
        if not self.points:
            arr = np.zeros((0, 3), dtype=np.float64)
        else:
            arr = np.asarray([tuple(p) for p in self.points], dtype=np.float64)
        arr.setflags(write=False)
        return arr

    def with_colors(self, colors: Sequence[Color]) -> "PointCloud":
        return replace(self, colors=tuple(colors))

    def with_normals(self, normals: Sequence[Vector3D]) -> "PointCloud":
        return replace(self, normals=tuple(normals))

    def voxel_downsample(self, voxel_size: float) -> "PointCloud":
        """Replace the points of each occupied voxel by their centroid.

        Voxel keys truncate toward zero, so the cells straddling each axis
        origin are twice as wide. Attributes are dropped.
        """
        if voxel_size <= 0:
            raise InvalidArgument("voxel_size must be positive")
        if not self.points:
            return PointCloud((), metadata=replace(self.metadata, source_format="downsampled"))
        keys = np.trunc(self.xyz / voxel_size).astype(np.int64)
        _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)
        counts = np.bincount(inverse)
        sums = np.zeros((len(counts), 3), dtype=np.float64)
        np.add.at(sums, inverse, self.xyz)
        centroids = sums / counts[:, None]
        # np.unique sorts keys; restore first-seen order
        order = np.argsort(first, kind="stable")
        new_points: List[Point3D] = [Point3D.from_array(centroids[i]) for i in order]
        return PointCloud(new_points, metadata=replace(self.metadata, source_format="downsampled"))


def points_from_array(xyz: np.ndarray) -> Tuple[Point3D, ...]:
    return tuple(Point3D(float(x), float(y), float(z)) for x, y, z in np.asarray(xyz, dtype=np.float64))


def vectors_from_array(xyz: np.ndarray) -> Tuple[Vector3D, ...]:
    return tuple(Vector3D(float(x), float(y), float(z)) for x, y, z in np.asarray(xyz, dtype=np.float64))
