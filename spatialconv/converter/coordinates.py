from __future__ import annotations
from dataclasses import replace
from typing import Optional
import math

from ..core.pointcloud import CoordinateSystem, PointCloud, points_from_array
from ..core.primitives import Vector3D
from ..core.transform import Transform3D
from ..core.utils import get_logger

_log = get_logger()


class CoordinateTransformer:
    """Applies one :class:`Transform3D` to a point cloud.

    Points go through ``apply`` and normals through ``apply_to_vector``;
    colors and intensity are carried over untouched.
    """

    def __init__(self, transform: Transform3D, target_system: Optional[CoordinateSystem] = None) -> None:
        self.transform = transform
        self.target_system = target_system

    def convert(self, input: PointCloud) -> PointCloud:
        cloud = input
        points = points_from_array(self.transform.apply_points(cloud.xyz)) if cloud.points else ()
        normals = None
        if cloud.normals is not None:
            normals = tuple(self.transform.apply_to_vector(n) for n in cloud.normals)
        metadata = cloud.metadata
        if self.target_system is not None:
            metadata = replace(metadata, coordinate_system=self.target_system)
        _log.debug("Transformed %d points (normals=%s)", cloud.size, normals is not None)
        return replace(cloud, points=points, normals=normals, metadata=metadata)

    def then(self, other: "CoordinateTransformer") -> "CoordinateTransformer":
        target = other.target_system if other.target_system is not None else self.target_system
        return CoordinateTransformer(self.transform.then(other.transform), target)

    @staticmethod
    def y_up_to_z_up() -> "CoordinateTransformer":
        """Y-up → Z-up: rotate -90° about X."""
        return CoordinateTransformer(Transform3D.rotation_x(-math.pi / 2), CoordinateSystem.RIGHT_HANDED_Z_UP)

    @staticmethod
    def z_up_to_y_up() -> "CoordinateTransformer":
        return CoordinateTransformer(Transform3D.rotation_x(math.pi / 2), CoordinateSystem.RIGHT_HANDED_Y_UP)

    @staticmethod
    def scale(factor: float) -> "CoordinateTransformer":
        return CoordinateTransformer(Transform3D.scale(factor, factor, factor))

    @staticmethod
    def translate(offset: Vector3D) -> "CoordinateTransformer":
        return CoordinateTransformer(Transform3D.translation(offset.x, offset.y, offset.z))
